from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator

from textile_inventory.db.schema import CategoryGroup, MaterialCategory
from textile_inventory.utils.parsing import (
    parse_choice, parse_datetime_bound, parse_number
)


class StockLevel(str, Enum):
    IN = "in"
    LOW = "low"
    OUT = "out"


class SortKey(str, Enum):
    NAME = "name"
    CATEGORY = "category"
    STOCK = "stock"
    UNIT_PRICE = "unit_price"
    LAST_RESTOCKED = "last_restocked"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class MaterialFilter(BaseModel):
    """
    Immutable filter configuration for the inventory list.

    Every field is optional and an unset field does not restrict the view.
    Construction never fails on bad input: malformed numbers or dates, and
    unknown selector values, are read as "no restriction".
    """
    model_config = ConfigDict(frozen=True)

    search: Optional[str] = None
    category: Optional[MaterialCategory] = None
    category_group: Optional[CategoryGroup] = None
    stock_level: Optional[StockLevel] = None

    price_min: Optional[float] = None
    price_max: Optional[float] = None
    stock_min: Optional[float] = None
    stock_max: Optional[float] = None

    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    restocked_from: Optional[datetime] = None
    restocked_to: Optional[datetime] = None

    # Specification sub-filters
    color: Optional[str] = None
    quality: Optional[str] = None
    weight_min: Optional[float] = None
    weight_max: Optional[float] = None
    width_min: Optional[float] = None
    width_max: Optional[float] = None
    length_min: Optional[float] = None
    length_max: Optional[float] = None

    @field_validator("search", "color", "quality", mode="before")
    @classmethod
    def blank_text_is_unset(cls, value):
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("category", mode="before")
    @classmethod
    def lenient_category(cls, value):
        return parse_choice(MaterialCategory, value)

    @field_validator("category_group", mode="before")
    @classmethod
    def lenient_category_group(cls, value):
        return parse_choice(CategoryGroup, value)

    @field_validator("stock_level", mode="before")
    @classmethod
    def lenient_stock_level(cls, value):
        return parse_choice(StockLevel, value)

    @field_validator(
        "price_min", "price_max", "stock_min", "stock_max",
        "weight_min", "weight_max", "width_min", "width_max",
        "length_min", "length_max",
        mode="before",
    )
    @classmethod
    def lenient_number(cls, value):
        return parse_number(value)

    @field_validator("created_from", "restocked_from", mode="before")
    @classmethod
    def lenient_lower_date(cls, value):
        return parse_datetime_bound(value)

    @field_validator("created_to", "restocked_to", mode="before")
    @classmethod
    def lenient_upper_date(cls, value):
        return parse_datetime_bound(value, end_of_day=True)


class SortSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: SortKey = SortKey.NAME
    direction: SortDirection = SortDirection.ASC

    @field_validator("key", mode="before")
    @classmethod
    def lenient_key(cls, value):
        return parse_choice(SortKey, value, fold=True) or SortKey.NAME

    @field_validator("direction", mode="before")
    @classmethod
    def lenient_direction(cls, value):
        return parse_choice(SortDirection, value, fold=True) or SortDirection.ASC

    def toggle(self, key: SortKey) -> "SortSpec":
        """
        Column-header click: flips the direction of the active key, or
        switches to a new key in ascending order.
        """
        key = SortKey(key)
        if key == self.key:
            flipped = SortDirection.DESC if self.direction == SortDirection.ASC else SortDirection.ASC
            return SortSpec(key=key, direction=flipped)
        return SortSpec(key=key, direction=SortDirection.ASC)
