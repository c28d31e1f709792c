from typing import Optional, Dict, Any
from datetime import datetime, date, timezone
import uuid
from pydantic import NaiveDatetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, JSON
from enum import Enum


def utc_now() -> datetime:
    """Naive UTC timestamp, the form SQLite hands back on read."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CategoryGroup(str, Enum):
    FABRIC = "fabric"
    TOWEL = "towel"
    MANUFACTURING = "manufacturing"
    OTHER = "other"


class MaterialCategory(str, Enum):
    # Fabric material type
    COTTON_REGULAR = "Cotton - Regular"
    COTTON_EGYPTIAN = "Cotton - Egyptian"
    COTTON_PIMA = "Cotton - Pima"
    COTTON_ORGANIC = "Cotton - Organic"
    POLYESTER = "Polyester"
    MICROFIBER = "Microfiber"
    LINEN = "Linen"
    BAMBOO_FIBER = "Bamboo Fiber"
    HEMP_FIBER = "Hemp Fiber"
    BLENDED_COTTON_POLYESTER = "Blended - Cotton-Polyester"
    BLENDED_BAMBOO_COTTON = "Blended - Bamboo-Cotton"
    BLENDED_OTHER = "Blended - Other"

    # Towel type
    BATH_TOWEL = "Bath Towel"
    HAND_TOWEL = "Hand Towel"
    FACE_TOWEL = "Face Towel/Washcloth"
    BEACH_TOWEL = "Beach Towel"
    GYM_TOWEL = "Gym Towel"
    KITCHEN_TOWEL = "Kitchen Towel"
    HOTEL_SPA_TOWEL = "Hotel & Spa Towel"

    # Manufacturing type
    WOVEN_TOWEL = "Woven Towel"
    KNITTED_TOWEL = "Knitted Towel"
    TERRY_TOWEL = "Terry Towel"
    WAFFLE_TOWEL = "Waffle Towel"
    ZERO_TWIST_TOWEL = "Zero-Twist Towel"

    # Other raw materials
    DYES_CHEMICALS = "Dyes & Chemicals"
    SEWING_THREADS = "Sewing Threads"
    LABELS_TAGS = "Labels & Tags"
    PACKAGING = "Packaging Materials"

    @property
    def group(self) -> CategoryGroup:
        return CATEGORY_GROUPS[self]


_FABRIC_PREFIXES = ("Cotton - ", "Blended - ")

CATEGORY_GROUPS: Dict[MaterialCategory, CategoryGroup] = {}
for _category in MaterialCategory:
    if _category.value.startswith(_FABRIC_PREFIXES) or _category in (
        MaterialCategory.POLYESTER,
        MaterialCategory.MICROFIBER,
        MaterialCategory.LINEN,
        MaterialCategory.BAMBOO_FIBER,
        MaterialCategory.HEMP_FIBER,
    ):
        CATEGORY_GROUPS[_category] = CategoryGroup.FABRIC
    elif _category in (
        MaterialCategory.WOVEN_TOWEL,
        MaterialCategory.KNITTED_TOWEL,
        MaterialCategory.TERRY_TOWEL,
        MaterialCategory.WAFFLE_TOWEL,
        MaterialCategory.ZERO_TWIST_TOWEL,
    ):
        CATEGORY_GROUPS[_category] = CategoryGroup.MANUFACTURING
    elif _category.value.endswith("Towel") or _category == MaterialCategory.FACE_TOWEL:
        CATEGORY_GROUPS[_category] = CategoryGroup.TOWEL
    else:
        CATEGORY_GROUPS[_category] = CategoryGroup.OTHER


class MaterialUnit(str, Enum):
    KG = "kg"
    METERS = "meters"
    ROLLS = "rolls"
    BOXES = "boxes"
    LITERS = "liters"
    PIECES = "pieces"


class StockStatus(str, Enum):
    IN_STOCK = "In Stock"
    LOW_STOCK = "Low Stock"
    OUT_OF_STOCK = "Out of Stock"


class TimestampMixin(SQLModel):
    """
    Standard audit timestamps. Both are assigned by the service layer, never
    by the caller.
    """
    created_at: NaiveDatetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=False),
        description="UTC timestamp when the record was first persisted. Example: '2025-03-02 14:30:00'"
    )
    updated_at: NaiveDatetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=False),
        description="UTC timestamp of the last create, update or stock adjustment."
    )


class RawMaterial(TimestampMixin, SQLModel, table=True):
    """
    One raw-material inventory entry (fabric roll, towel blank, dye drum...).

    Only authoritative fields are stored. The total value and stock status are
    derived on the read model and never persisted.
    """
    __tablename__ = "raw_material"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        description="Immutable identifier assigned at creation."
    )
    name: str = Field(
        index=True,
        description="Commercial name of the material. Example: 'Combed Cotton 30s'"
    )
    category: MaterialCategory = Field(
        index=True,
        description="Fabric, towel, manufacturing or other material type. Example: 'Cotton - Pima'"
    )
    stock: float = Field(
        default=0,
        description="Quantity on hand, expressed in `unit`. Never negative."
    )
    unit: MaterialUnit = Field(default=MaterialUnit.KG)
    unit_price: float = Field(
        default=0,
        description="Price per unit. Never negative."
    )
    reorder_level: float = Field(
        default=10,
        description="Threshold below which the stock counts as low."
    )

    supplier: Optional[str] = Field(default=None)
    location: Optional[str] = Field(
        default=None,
        description="Warehouse location. Example: 'Rack B-4'"
    )
    notes: Optional[str] = Field(default=None)

    specifications: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_type=JSON,
        description="Free-text technical specifications (color, weight, dimensions, quality)."
    )

    last_restocked: Optional[NaiveDatetime] = Field(
        default=None,
        sa_type=DateTime(timezone=False),
        description="UTC timestamp of the last stock increase."
    )
    expiry_date: Optional[date] = Field(default=None)
    image: Optional[str] = Field(
        default=None,
        description="Reference to the stored image asset. Example: '/static/materials/material-1700000000000.png'"
    )
