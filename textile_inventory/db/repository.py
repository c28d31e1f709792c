from typing import Any, Dict, List, Optional
from uuid import UUID
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select, col

from textile_inventory.core.exceptions import PersistenceError
from textile_inventory.db.schema import RawMaterial


class RawMaterialRepository:
    """
    Persistence boundary for raw material records.

    Every write commits on its own; a failed write is rolled back and
    surfaced as PersistenceError so no half-written record is ever visible.
    """

    def __init__(self, session: Session):
        self.session = session

    def _fail(self, action: str, error: SQLAlchemyError):
        self.session.rollback()
        logger.error(f"Raw material {action} failed: {error}")
        raise PersistenceError(f"Could not {action} raw material.") from error

    def list_all(self) -> List[RawMaterial]:
        try:
            statement = select(RawMaterial).order_by(
                col(RawMaterial.created_at).desc())
            return list(self.session.exec(statement).all())
        except SQLAlchemyError as e:
            self._fail("load", e)

    def get(self, material_id: UUID) -> Optional[RawMaterial]:
        try:
            return self.session.get(RawMaterial, material_id)
        except SQLAlchemyError as e:
            self._fail("load", e)

    def insert(self, material: RawMaterial) -> RawMaterial:
        try:
            self.session.add(material)
            self.session.commit()
            self.session.refresh(material)
            return material
        except SQLAlchemyError as e:
            self._fail("create", e)

    def replace(self, material_id: UUID, values: Dict[str, Any]) -> Optional[RawMaterial]:
        """Overwrites the stored fields of one record. Returns None if it does not exist."""
        try:
            material = self.session.get(RawMaterial, material_id)
            if material is None:
                return None
            for key, value in values.items():
                setattr(material, key, value)
            self.session.add(material)
            self.session.commit()
            self.session.refresh(material)
            return material
        except SQLAlchemyError as e:
            self._fail("update", e)

    def remove(self, material_id: UUID) -> bool:
        try:
            material = self.session.get(RawMaterial, material_id)
            if material is None:
                return False
            self.session.delete(material)
            self.session.commit()
            return True
        except SQLAlchemyError as e:
            self._fail("delete", e)
