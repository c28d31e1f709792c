"""
Filtering, sorting and paging of the raw material list.

Everything here is a pure function of its arguments: the input sequence is
never mutated and no I/O happens, so it is safe to call from any thread.
"""
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence

from textile_inventory.db.schema import StockStatus
from textile_inventory.models.material_filter import (
    MaterialFilter, SortDirection, SortKey, SortSpec, StockLevel
)
from textile_inventory.models.raw_material import (
    InventorySummary, MaterialPage, RawMaterialRead
)
from textile_inventory.utils.parsing import numbers_in, parse_leading_number


Predicate = Callable[[RawMaterialRead, MaterialFilter], bool]


def _within(value, low, high, missing_passes: bool = False) -> bool:
    if low is None and high is None:
        return True
    if value is None:
        return missing_passes
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def _spec(material: RawMaterialRead, name: str) -> Optional[str]:
    if material.specifications is None:
        return None
    return getattr(material.specifications, name)


def _spec_width(material: RawMaterialRead) -> Optional[float]:
    width = parse_leading_number(_spec(material, "width"))
    if width is None:
        found = numbers_in(_spec(material, "dimensions"))
        width = found[0] if found else None
    return width


def _spec_length(material: RawMaterialRead) -> Optional[float]:
    length = parse_leading_number(_spec(material, "length"))
    if length is None:
        found = numbers_in(_spec(material, "dimensions"))
        length = found[1] if len(found) > 1 else None
    return length


# ==============================================================================
# PREDICATES
# ==============================================================================

def matches_search(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    if not filters.search:
        return True
    term = filters.search.lower()
    haystack = (
        material.name,
        material.supplier,
        material.location,
        _spec(material, "color"),
        _spec(material, "quality"),
    )
    return any(term in field.lower() for field in haystack if field)


def matches_category(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    return filters.category is None or material.category == filters.category


def matches_category_group(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    return filters.category_group is None or material.category.group == filters.category_group


def matches_stock_level(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    level = filters.stock_level
    if level is None:
        return True
    if level == StockLevel.LOW:
        # Same bucket as the "Low Stock" badge; empty rows are "out", not "low"
        return material.stock_status == StockStatus.LOW_STOCK
    if level == StockLevel.OUT:
        return material.stock == 0
    return material.stock > 0


def matches_price(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    return _within(material.unit_price, filters.price_min, filters.price_max)


def matches_stock_range(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    return _within(material.stock, filters.stock_min, filters.stock_max)


def matches_created(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    return _within(material.created_at, filters.created_from, filters.created_to)


def matches_restocked(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    return _within(material.last_restocked, filters.restocked_from, filters.restocked_to)


def matches_color(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    if not filters.color:
        return True
    color = _spec(material, "color")
    return bool(color) and filters.color.lower() in color.lower()


def matches_quality(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    return not filters.quality or _spec(material, "quality") == filters.quality


def matches_weight(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    weight = parse_leading_number(_spec(material, "weight"))
    return _within(weight, filters.weight_min, filters.weight_max, missing_passes=True)


def matches_dimensions(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    return (
        _within(_spec_width(material), filters.width_min, filters.width_max, missing_passes=True)
        and _within(_spec_length(material), filters.length_min, filters.length_max, missing_passes=True)
    )


PREDICATES: List[Predicate] = [
    matches_search,
    matches_category,
    matches_category_group,
    matches_stock_level,
    matches_price,
    matches_stock_range,
    matches_created,
    matches_restocked,
    matches_color,
    matches_quality,
    matches_weight,
    matches_dimensions,
]


def matches(material: RawMaterialRead, filters: MaterialFilter) -> bool:
    return all(predicate(material, filters) for predicate in PREDICATES)


def apply_filters(materials: Iterable[RawMaterialRead], filters: MaterialFilter) -> List[RawMaterialRead]:
    return [m for m in materials if matches(m, filters)]


# ==============================================================================
# SORTING
# ==============================================================================

def _text_key(value) -> tuple:
    text = str(value.value if hasattr(value, "value") else value)
    # Case-insensitive order, exact string breaks ties so the order is total
    return (text.casefold(), text)


_SORT_KEYS = {
    SortKey.NAME: lambda m: _text_key(m.name),
    SortKey.CATEGORY: lambda m: _text_key(m.category),
    SortKey.STOCK: lambda m: m.stock,
    SortKey.UNIT_PRICE: lambda m: m.unit_price,
    SortKey.LAST_RESTOCKED: lambda m: m.last_restocked or datetime.min,
}


def sort_materials(materials: Iterable[RawMaterialRead], sort: SortSpec) -> List[RawMaterialRead]:
    return sorted(
        materials,
        key=_SORT_KEYS[sort.key],
        reverse=sort.direction == SortDirection.DESC,
    )


def query_materials(
    materials: Sequence[RawMaterialRead],
    filters: Optional[MaterialFilter] = None,
    sort: Optional[SortSpec] = None,
) -> List[RawMaterialRead]:
    """Filtered and ordered view of `materials`."""
    view = apply_filters(materials, filters or MaterialFilter())
    return sort_materials(view, sort or SortSpec())


# ==============================================================================
# PAGING & SUMMARY
# ==============================================================================

def paginate(view: Sequence[RawMaterialRead], offset: int = 0, limit: int = 10) -> MaterialPage:
    offset = max(offset, 0)
    limit = max(limit, 0)
    return MaterialPage(
        items=list(view[offset:offset + limit]),
        total=len(view),
        offset=offset,
        limit=limit,
    )


def summarize(materials: Iterable[RawMaterialRead]) -> InventorySummary:
    summary = InventorySummary()
    for m in materials:
        summary.total_materials += 1
        summary.total_value += m.total_value
        if m.stock == 0:
            summary.out_of_stock += 1
        else:
            summary.in_stock += 1
            if m.stock_status == StockStatus.LOW_STOCK:
                summary.low_stock += 1
    return summary
