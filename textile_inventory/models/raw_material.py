import math
from typing import List, Optional
from datetime import datetime, date, timezone
from uuid import UUID
from pydantic import computed_field, field_validator
from sqlmodel import SQLModel, Field

from textile_inventory.db.schema import (
    CategoryGroup, MaterialCategory, MaterialUnit, StockStatus
)


def compute_total_value(stock: float, unit_price: float) -> float:
    return (stock or 0) * (unit_price or 0)


def compute_stock_status(stock: float, reorder_level: float) -> StockStatus:
    if stock == 0:
        return StockStatus.OUT_OF_STOCK
    if stock < reorder_level:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


class MaterialSpecifications(SQLModel):
    """Free-text technical details captured on the material entry form."""
    color: Optional[str] = None
    color_hex: Optional[str] = None
    weight: Optional[str] = Field(
        default=None, description="Example: '450' or '450 g/m²'")
    weight_unit: Optional[str] = "g/m²"
    dimensions: Optional[str] = Field(
        default=None, description="Example: '70 x 140'")
    width: Optional[str] = None
    length: Optional[str] = None
    dimensions_unit: Optional[str] = "cm"
    quality: Optional[str] = None
    additional_info: Optional[str] = None


class RawMaterialBase(SQLModel):
    name: str = Field(min_length=1, max_length=200)
    category: MaterialCategory
    stock: float = Field(default=0, ge=0)
    unit: MaterialUnit = MaterialUnit.KG
    unit_price: float = Field(default=0, ge=0)
    reorder_level: float = Field(default=10, ge=0)
    supplier: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    specifications: Optional[MaterialSpecifications] = None
    last_restocked: Optional[datetime] = None
    expiry_date: Optional[date] = None

    @field_validator("name", "supplier", "location", "notes", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("stock", "unit_price", "reorder_level")
    @classmethod
    def finite_quantity(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        return value

    @field_validator("last_restocked")
    @classmethod
    def naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Stored timestamps are naive UTC; keep comparisons in one form
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class RawMaterialCreate(RawMaterialBase):
    pass


class RawMaterialUpdate(SQLModel):
    """
    Partial payload. Only the fields that were sent are merged into the
    stored record; the merged result is validated as a whole.
    """
    name: Optional[str] = None
    category: Optional[MaterialCategory] = None
    stock: Optional[float] = None
    unit: Optional[MaterialUnit] = None
    unit_price: Optional[float] = None
    reorder_level: Optional[float] = None
    supplier: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    specifications: Optional[MaterialSpecifications] = None
    last_restocked: Optional[datetime] = None
    expiry_date: Optional[date] = None


class RawMaterialRead(RawMaterialBase):
    id: UUID
    image: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def category_group(self) -> CategoryGroup:
        return self.category.group

    @computed_field
    @property
    def total_value(self) -> float:
        return compute_total_value(self.stock, self.unit_price)

    @computed_field
    @property
    def stock_status(self) -> StockStatus:
        return compute_stock_status(self.stock, self.reorder_level)


class StockAdjustment(SQLModel):
    delta: float = Field(
        description="Signed quantity to add to the current stock. Example: -2.5")


class StockSet(SQLModel):
    stock: float = Field(description="New absolute quantity on hand.")


class DeleteResult(SQLModel):
    status: str = "deleted"
    id: UUID
    asset_removed: bool = True
    asset_error: Optional[str] = None


class MaterialPage(SQLModel):
    items: List[RawMaterialRead]
    total: int
    offset: int
    limit: int


class InventorySummary(SQLModel):
    """Headline counts shown above the inventory table."""
    total_materials: int = 0
    in_stock: int = 0
    low_stock: int = 0
    out_of_stock: int = 0
    total_value: float = 0
