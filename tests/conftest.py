import os
import uuid
from datetime import datetime

import pytest

# Keep the app's module-level engine and log sink away from real files
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", "logs/test.log")

from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from textile_inventory.core.exceptions import AssetError, PersistenceError  # noqa: E402
from textile_inventory.db.schema import RawMaterial  # noqa: E402
from textile_inventory.models.raw_material import RawMaterialRead  # noqa: E402
from textile_inventory.services.raw_material import RawMaterialService  # noqa: E402


class FakeMaterialRepository:
    def __init__(self):
        self._rows: dict[uuid.UUID, RawMaterial] = {}
        self.fail_writes = False

    def _check(self):
        if self.fail_writes:
            raise PersistenceError("Could not update raw material.")

    def list_all(self):
        return sorted(self._rows.values(), key=lambda m: m.created_at, reverse=True)

    def get(self, material_id):
        return self._rows.get(material_id)

    def insert(self, material):
        self._check()
        self._rows[material.id] = material
        return material

    def replace(self, material_id, values):
        self._check()
        material = self._rows.get(material_id)
        if material is None:
            return None
        for key, value in values.items():
            setattr(material, key, value)
        return material

    def remove(self, material_id):
        self._check()
        return self._rows.pop(material_id, None) is not None


class FakeAssetStorage:
    def __init__(self):
        self.assets: dict[str, bytes] = {}
        self.fail_remove = False
        self.removed: list[str] = []
        self._counter = 0

    def store(self, content, suggested_name, content_type=None):
        if not suggested_name.lower().endswith((".png", ".jpg", ".jpeg", ".webp")):
            raise AssetError("Only image files are allowed!")
        self._counter += 1
        ref = f"/static/materials/material-{self._counter}-{suggested_name}"
        self.assets[ref] = content
        return ref

    def remove(self, asset_ref):
        if self.fail_remove:
            raise AssetError("disk is read-only")
        self.removed.append(asset_ref)
        self.assets.pop(asset_ref, None)


@pytest.fixture
def repository():
    return FakeMaterialRepository()


@pytest.fixture
def storage():
    return FakeAssetStorage()


@pytest.fixture
def service(repository, storage):
    return RawMaterialService(repository=repository, storage=storage)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_material():
    """Builds read models for the pure query functions."""

    def _make(**overrides) -> RawMaterialRead:
        values = {
            "id": uuid.uuid4(),
            "name": "Cotton A",
            "category": "Cotton - Regular",
            "stock": 5,
            "unit_price": 2,
            "reorder_level": 10,
            "created_at": datetime(2025, 1, 10, 9, 0),
            "updated_at": datetime(2025, 1, 10, 9, 0),
        }
        values.update(overrides)
        return RawMaterialRead.model_validate(values)

    return _make
