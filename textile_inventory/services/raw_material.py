import math
from typing import Any, Dict, List, Optional, Union
from uuid import UUID
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from textile_inventory.core.exceptions import (
    AssetError, NotFoundError, PersistenceError, ValidationError
)
from textile_inventory.db.repository import RawMaterialRepository
from textile_inventory.db.schema import RawMaterial, utc_now
from textile_inventory.models.material_filter import MaterialFilter, SortSpec
from textile_inventory.models.raw_material import (
    DeleteResult, InventorySummary, MaterialPage,
    RawMaterialCreate, RawMaterialRead, RawMaterialUpdate
)
from textile_inventory.services import inventory_query
from textile_inventory.utils.file_storage import LocalAssetStorage


class RawMaterialService:
    """
    Service layer for the raw material inventory.

    All writes go through the repository. Each write validates the complete
    resulting record before anything is persisted, and derived values
    (total value, stock status) are recomputed on every read model returned.
    """

    def __init__(self, repository: RawMaterialRepository, storage: LocalAssetStorage):
        """
        Args:
            repository: The persistence collaborator (list_all/get/insert/replace/remove).
            storage: The asset collaborator for material images (store/remove).
        """
        self.repository = repository
        self.storage = storage

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    @staticmethod
    def _to_read(material: RawMaterial) -> RawMaterialRead:
        return RawMaterialRead.model_validate(material)

    @staticmethod
    def _validation_error(error: PydanticValidationError) -> ValidationError:
        first = error.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        return ValidationError(f"{field}: {first['msg']}", field=field)

    def _validate(self, values: Dict[str, Any]) -> RawMaterialCreate:
        try:
            return RawMaterialCreate.model_validate(values)
        except PydanticValidationError as e:
            error = self._validation_error(e)
            logger.warning(f"Rejected raw material payload: {error.message}")
            raise error from e

    def _get_or_404(self, material_id: UUID) -> RawMaterial:
        material = self.repository.get(material_id)
        if material is None:
            raise NotFoundError(f"Raw material {material_id} not found.")
        return material

    def _require_number(self, value, field: str) -> float:
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be a number.", field=field)
        if math.isnan(number) or math.isinf(number):
            raise ValidationError(f"{field} must be a finite number.", field=field)
        return number

    def _remove_asset(self, asset_ref: str) -> Optional[str]:
        """Best-effort asset removal. Returns the failure message, if any."""
        try:
            self.storage.remove(asset_ref)
            return None
        except AssetError as e:
            logger.warning(f"Could not remove image asset {asset_ref}: {e.message}")
            return e.message

    # ==========================================================================
    # READ OPERATIONS
    # ==========================================================================

    def get_material(self, material_id: UUID) -> RawMaterialRead:
        return self._to_read(self._get_or_404(material_id))

    def list_materials(
        self,
        filters: Optional[MaterialFilter] = None,
        sort: Optional[SortSpec] = None,
    ) -> List[RawMaterialRead]:
        """
        Loads the whole collection and runs it through the query engine.
        """
        records = [self._to_read(m) for m in self.repository.list_all()]
        return inventory_query.query_materials(records, filters, sort)

    def list_page(
        self,
        filters: Optional[MaterialFilter] = None,
        sort: Optional[SortSpec] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> MaterialPage:
        return inventory_query.paginate(self.list_materials(filters, sort), offset, limit)

    def summarize(self, filters: Optional[MaterialFilter] = None) -> InventorySummary:
        return inventory_query.summarize(self.list_materials(filters))

    def list_low_stock(self) -> List[RawMaterialRead]:
        """Reorder candidates: every record below its reorder level, empty ones included."""
        return [m for m in self.list_materials() if m.stock < m.reorder_level]

    # ==========================================================================
    # WRITE OPERATIONS
    # ==========================================================================

    def create_material(self, data: Union[RawMaterialCreate, Dict[str, Any]]) -> RawMaterialRead:
        """
        Creates a new raw material record.

        Raises:
            ValidationError: If a required field is missing, an enumeration
                value is unknown or a quantity is negative.
            PersistenceError: If the record could not be stored.
        """
        values = data.model_dump() if isinstance(data, RawMaterialCreate) else dict(data)
        validated = self._validate(values)

        now = utc_now()
        material = RawMaterial(
            **validated.model_dump(),
            created_at=now,
            updated_at=now,
        )
        saved = self.repository.insert(material)
        logger.info(f"Created raw material {saved.id} ({saved.name})")
        return self._to_read(saved)

    def update_material(
        self,
        material_id: UUID,
        data: Union[RawMaterialUpdate, Dict[str, Any]],
    ) -> RawMaterialRead:
        """
        Merges the supplied fields into an existing record.

        Only fields present in the payload are changed, so the same call
        serves full replacement (PUT) and field patches (PATCH). The merged
        record is validated as a whole before it is written.

        Raises:
            NotFoundError: If the material does not exist.
            ValidationError: If the merged record is invalid.
        """
        material = self._get_or_404(material_id)

        if not isinstance(data, RawMaterialUpdate):
            try:
                data = RawMaterialUpdate.model_validate(data)
            except PydanticValidationError as e:
                raise self._validation_error(e) from e

        current = {
            name: getattr(material, name)
            for name in RawMaterialCreate.model_fields
        }
        merged = {**current, **data.model_dump(exclude_unset=True)}
        validated = self._validate(merged)

        values = validated.model_dump()
        values["updated_at"] = utc_now()

        saved = self.repository.replace(material_id, values)
        if saved is None:
            raise NotFoundError(f"Raw material {material_id} not found.")

        logger.info(f"Updated raw material {material_id}")
        return self._to_read(saved)

    def adjust_stock(self, material_id: UUID, delta: float) -> RawMaterialRead:
        """
        Adds a signed quantity to the stock on hand.

        A positive delta counts as a restock and stamps `last_restocked`.

        Raises:
            NotFoundError: If the material does not exist.
            ValidationError: If the result would be negative. Stock is left unchanged.
        """
        delta = self._require_number(delta, "delta")
        material = self._get_or_404(material_id)

        new_stock = material.stock + delta
        if new_stock < 0:
            logger.warning(
                f"Rejected stock adjustment {delta} on {material_id}: stock is {material.stock}")
            raise ValidationError(
                f"Stock cannot be negative (current {material.stock}, change {delta}).",
                field="stock",
            )

        now = utc_now()
        values = {"stock": new_stock, "updated_at": now}
        if delta > 0:
            values["last_restocked"] = now

        saved = self.repository.replace(material_id, values)
        if saved is None:
            raise NotFoundError(f"Raw material {material_id} not found.")

        logger.info(f"Adjusted stock of {material_id} by {delta} to {new_stock}")
        return self._to_read(saved)

    def set_stock(self, material_id: UUID, stock: float) -> RawMaterialRead:
        """Sets the absolute stock on hand and stamps `last_restocked`."""
        stock = self._require_number(stock, "stock")
        if stock < 0:
            raise ValidationError("Valid stock value is required.", field="stock")

        self._get_or_404(material_id)

        now = utc_now()
        saved = self.repository.replace(
            material_id,
            {"stock": stock, "last_restocked": now, "updated_at": now},
        )
        if saved is None:
            raise NotFoundError(f"Raw material {material_id} not found.")

        logger.info(f"Set stock of {material_id} to {stock}")
        return self._to_read(saved)

    def attach_image(
        self,
        material_id: UUID,
        content: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> RawMaterialRead:
        """
        Stores a new image for the material and points the record at it.

        The previous image, if any, is removed best-effort. If the record
        cannot be updated, the freshly stored file is removed again.

        Raises:
            NotFoundError: If the material does not exist.
            AssetError: If the image is rejected or cannot be written.
        """
        material = self._get_or_404(material_id)
        previous = material.image

        asset_ref = self.storage.store(content, filename, content_type=content_type)

        try:
            saved = self.repository.replace(
                material_id, {"image": asset_ref, "updated_at": utc_now()})
        except PersistenceError:
            self._remove_asset(asset_ref)
            raise

        if saved is None:
            self._remove_asset(asset_ref)
            raise NotFoundError(f"Raw material {material_id} not found.")

        if previous and previous != asset_ref:
            self._remove_asset(previous)

        logger.info(f"Attached image {asset_ref} to raw material {material_id}")
        return self._to_read(saved)

    def delete_material(self, material_id: UUID) -> DeleteResult:
        """
        Deletes a material and then its image.

        The record removal is authoritative: if the image cannot be removed
        the record stays deleted and the failure is reported in the result.

        Raises:
            NotFoundError: If the material does not exist.
        """
        material = self._get_or_404(material_id)
        image = material.image

        if not self.repository.remove(material_id):
            raise NotFoundError(f"Raw material {material_id} not found.")

        logger.info(f"Deleted raw material {material_id}")

        result = DeleteResult(id=material_id)
        if image:
            error = self._remove_asset(image)
            if error:
                result.asset_removed = False
                result.asset_error = error
        return result
