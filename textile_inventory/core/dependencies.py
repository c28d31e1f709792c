from fastapi import Depends
from sqlmodel import Session

from textile_inventory.db.core import get_session
from textile_inventory.db.repository import RawMaterialRepository
from textile_inventory.services.raw_material import RawMaterialService
from textile_inventory.utils.file_storage import LocalAssetStorage


def get_raw_material_repository(session: Session = Depends(get_session)) -> RawMaterialRepository:
    """Creates a repository bound to the active DB session."""
    return RawMaterialRepository(session)


def get_asset_storage() -> LocalAssetStorage:
    return LocalAssetStorage()


def get_raw_material_service(
    repository: RawMaterialRepository = Depends(get_raw_material_repository),
    storage: LocalAssetStorage = Depends(get_asset_storage),
) -> RawMaterialService:
    return RawMaterialService(repository=repository, storage=storage)
