from datetime import datetime

import pytest

from textile_inventory.models.material_filter import (
    MaterialFilter, SortDirection, SortKey, SortSpec, StockLevel
)
from textile_inventory.services.inventory_query import (
    apply_filters, paginate, query_materials, sort_materials, summarize
)


def names(materials):
    return [m.name for m in materials]


@pytest.fixture
def cotton_pair(make_material):
    return [
        make_material(name="Cotton A", stock=5, reorder_level=10, unit_price=2),
        make_material(name="Cotton B", stock=0, reorder_level=10, unit_price=3),
    ]


@pytest.fixture
def catalog(make_material):
    return [
        make_material(
            name="Pima Yarn", category="Cotton - Pima", stock=400, unit_price=4.5,
            supplier="Faisal Mills", location="Rack A-1",
            created_at=datetime(2025, 1, 5), last_restocked=datetime(2025, 2, 1),
            specifications={"color": "Raw White", "weight": "180 g/m²", "quality": "Premium",
                            "dimensions": "160 x 5000"},
        ),
        make_material(
            name="Bath Towel Blank", category="Bath Towel", stock=8, reorder_level=50,
            unit_price=2.1, location="Bay C",
            created_at=datetime(2025, 2, 10),
            specifications={"color": "White", "width": "70", "length": "140", "quality": "Hotel"},
        ),
        make_material(
            name="Terry Loop", category="Terry Towel", stock=0, unit_price=6,
            supplier="Navy Looms",
            created_at=datetime(2025, 3, 1), last_restocked=datetime(2025, 3, 2),
            specifications={"color": "Sky Blue", "weight": "heavy"},
        ),
        make_material(
            name="reactive dye", category="Dyes & Chemicals", stock=40, reorder_level=20,
            unit_price=9.75, created_at=datetime(2025, 3, 20),
        ),
    ]


# ==============================================================================
# STOCK BUCKETS
# ==============================================================================

def test_low_bucket_excludes_empty_records(cotton_pair):
    view = apply_filters(cotton_pair, MaterialFilter(stock_level="low"))
    assert names(view) == ["Cotton A"]


def test_out_bucket(cotton_pair):
    view = apply_filters(cotton_pair, MaterialFilter(stock_level="out"))
    assert names(view) == ["Cotton B"]


def test_in_bucket_is_any_positive_stock(cotton_pair):
    view = apply_filters(cotton_pair, MaterialFilter(stock_level=StockLevel.IN))
    assert names(view) == ["Cotton A"]


def test_all_bucket_disables_predicate(cotton_pair):
    assert len(apply_filters(cotton_pair, MaterialFilter(stock_level="all"))) == 2


def test_total_value_of_example(cotton_pair):
    assert cotton_pair[0].total_value == 10


# ==============================================================================
# TEXT & CATEGORY
# ==============================================================================

def test_search_matches_any_text_field_case_insensitively(catalog):
    assert names(apply_filters(catalog, MaterialFilter(search="faisal"))) == ["Pima Yarn"]
    assert names(apply_filters(catalog, MaterialFilter(search="BAY"))) == ["Bath Towel Blank"]
    assert names(apply_filters(catalog, MaterialFilter(search="premium"))) == ["Pima Yarn"]
    # 'navy' hits the supplier of Terry Loop only
    assert names(apply_filters(catalog, MaterialFilter(search="Navy"))) == ["Terry Loop"]


def test_search_matches_specification_color(catalog):
    view = apply_filters(catalog, MaterialFilter(search="white"))
    assert names(view) == ["Pima Yarn", "Bath Towel Blank"]


def test_blank_search_is_ignored(catalog):
    assert len(apply_filters(catalog, MaterialFilter(search="   "))) == len(catalog)


def test_category_exact_match(catalog):
    view = apply_filters(catalog, MaterialFilter(category="Bath Towel"))
    assert names(view) == ["Bath Towel Blank"]


def test_category_all_and_unknown_disable_predicate(catalog):
    assert len(apply_filters(catalog, MaterialFilter(category="all"))) == 4
    assert len(apply_filters(catalog, MaterialFilter(category="Velvet"))) == 4


def test_category_needs_the_exact_label(catalog):
    assert MaterialFilter(category="cottonregular").category is None
    assert MaterialFilter(category="bath towel").category is None
    assert len(apply_filters(catalog, MaterialFilter(category="bath-towel"))) == 4


@pytest.mark.parametrize(
    "group, expected",
    [
        ("fabric", ["Pima Yarn"]),
        ("towel", ["Bath Towel Blank"]),
        ("manufacturing", ["Terry Loop"]),
        ("other", ["reactive dye"]),
    ],
)
def test_category_group_membership(catalog, group, expected):
    assert names(apply_filters(catalog, MaterialFilter(category_group=group))) == expected


# ==============================================================================
# RANGES
# ==============================================================================

def test_price_range_is_inclusive(catalog):
    view = apply_filters(catalog, MaterialFilter(price_min=2.1, price_max=6))
    assert names(view) == ["Pima Yarn", "Bath Towel Blank", "Terry Loop"]


def test_price_range_with_single_bound(catalog):
    assert names(apply_filters(catalog, MaterialFilter(price_min="9"))) == ["reactive dye"]


def test_stock_range(catalog):
    view = apply_filters(catalog, MaterialFilter(stock_min="1", stock_max="50"))
    assert names(view) == ["Bath Towel Blank", "reactive dye"]


def test_malformed_numeric_bounds_are_ignored(catalog):
    filters = MaterialFilter(price_min="cheap", price_max="", stock_min="NaN", stock_max="1e400")

    assert filters.price_min is None
    assert filters.price_max is None
    assert filters.stock_min is None
    assert filters.stock_max is None
    assert len(apply_filters(catalog, filters)) == len(catalog)


def test_created_date_range(catalog):
    view = apply_filters(catalog, MaterialFilter(created_from="2025-02-01", created_to="2025-03-01"))
    assert names(view) == ["Bath Towel Blank", "Terry Loop"]


def test_date_only_upper_bound_covers_the_whole_day(make_material):
    late = make_material(name="Late", created_at=datetime(2025, 3, 1, 23, 30))
    view = apply_filters([late], MaterialFilter(created_to="2025-03-01"))
    assert names(view) == ["Late"]


def test_restock_date_range_excludes_never_restocked(catalog):
    view = apply_filters(catalog, MaterialFilter(restocked_from="2025-01-15"))
    assert names(view) == ["Pima Yarn", "Terry Loop"]

    view = apply_filters(catalog, MaterialFilter(restocked_to="2025-02-28"))
    assert names(view) == ["Pima Yarn"]


def test_malformed_dates_are_ignored(catalog):
    filters = MaterialFilter(created_from="last tuesday", restocked_to="2025-13-45")
    assert filters.created_from is None
    assert filters.restocked_to is None
    assert len(apply_filters(catalog, filters)) == len(catalog)


# ==============================================================================
# SPECIFICATIONS
# ==============================================================================

def test_color_is_case_insensitive_substring(catalog):
    assert names(apply_filters(catalog, MaterialFilter(color="BLUE"))) == ["Terry Loop"]


def test_quality_is_exact(catalog):
    assert names(apply_filters(catalog, MaterialFilter(quality="Hotel"))) == ["Bath Towel Blank"]
    assert apply_filters(catalog, MaterialFilter(quality="hotel")) == []


def test_weight_range_passes_unparseable_weights(catalog):
    view = apply_filters(catalog, MaterialFilter(weight_min=200))
    # Pima (180) is excluded; 'heavy' and missing weights do not restrict
    assert names(view) == ["Bath Towel Blank", "Terry Loop", "reactive dye"]


def test_width_reads_field_then_dimensions(catalog):
    view = apply_filters(catalog, MaterialFilter(width_min=100))
    assert "Bath Towel Blank" not in names(view)
    assert "Pima Yarn" in names(view)


def test_length_reads_second_dimension(catalog):
    view = apply_filters(catalog, MaterialFilter(length_max=1000))
    assert "Pima Yarn" not in names(view)
    assert "Bath Towel Blank" in names(view)


def test_predicates_combine_with_and(catalog):
    filters = MaterialFilter(category_group="fabric", stock_level="out")
    assert apply_filters(catalog, filters) == []


# ==============================================================================
# SORTING
# ==============================================================================

def test_default_sort_is_name_ascending_case_insensitive(catalog):
    view = query_materials(catalog)
    assert names(view) == ["Bath Towel Blank", "Pima Yarn", "reactive dye", "Terry Loop"]


def test_name_descending_is_exact_reverse(catalog):
    ascending = sort_materials(catalog, SortSpec(key=SortKey.NAME))
    descending = sort_materials(catalog, SortSpec(key=SortKey.NAME, direction=SortDirection.DESC))
    assert names(descending) == list(reversed(names(ascending)))


def test_names_differing_only_in_case_still_reverse_exactly(make_material):
    materials = [make_material(name="cotton"), make_material(name="Cotton")]
    ascending = sort_materials(materials, SortSpec(key="name"))
    descending = sort_materials(materials, SortSpec(key="name", direction="desc"))
    assert names(ascending) == ["Cotton", "cotton"]
    assert names(descending) == ["cotton", "Cotton"]


def test_numeric_sorts(catalog):
    assert names(sort_materials(catalog, SortSpec(key="stock"))) == [
        "Terry Loop", "Bath Towel Blank", "reactive dye", "Pima Yarn"]
    assert names(sort_materials(catalog, SortSpec(key="unitPrice", direction="desc"))) == [
        "reactive dye", "Terry Loop", "Pima Yarn", "Bath Towel Blank"]


def test_missing_restock_date_sorts_first(catalog):
    view = sort_materials(catalog, SortSpec(key=SortKey.LAST_RESTOCKED))
    assert names(view)[2:] == ["Pima Yarn", "Terry Loop"]


def test_sort_is_stable_for_equal_keys(make_material):
    materials = [make_material(name=f"M{i}", stock=1) for i in range(5)]
    assert names(sort_materials(materials, SortSpec(key="stock"))) == ["M0", "M1", "M2", "M3", "M4"]


def test_toggle_flips_direction_and_resets_on_new_key():
    spec = SortSpec()
    assert spec.key == SortKey.NAME and spec.direction == SortDirection.ASC

    spec = spec.toggle(SortKey.NAME)
    assert spec.direction == SortDirection.DESC

    spec = spec.toggle(SortKey.STOCK)
    assert spec.key == SortKey.STOCK and spec.direction == SortDirection.ASC


def test_unknown_sort_values_fall_back_to_defaults():
    spec = SortSpec(key="colour", direction="sideways")
    assert spec == SortSpec()


def test_sort_values_ignore_case_and_separators():
    assert SortSpec(key="UNIT_PRICE", direction="DESC") == SortSpec(
        key=SortKey.UNIT_PRICE, direction=SortDirection.DESC)
    assert SortSpec(key="last-restocked").key == SortKey.LAST_RESTOCKED


# ==============================================================================
# PURITY, PAGING, SUMMARY
# ==============================================================================

def test_query_is_idempotent_and_leaves_input_untouched(catalog):
    original = list(catalog)
    filters = MaterialFilter(search="o", price_max="10")
    sort = SortSpec(key="stock", direction="desc")

    first = query_materials(catalog, filters, sort)
    second = query_materials(catalog, filters, sort)

    assert names(first) == names(second)
    assert catalog == original


def test_filter_is_immutable():
    filters = MaterialFilter(search="cotton")
    with pytest.raises(Exception):
        filters.search = "polyester"


def test_paginate_slices_view(catalog):
    view = query_materials(catalog)
    page = paginate(view, offset=1, limit=2)

    assert page.total == 4
    assert names(page.items) == ["Pima Yarn", "reactive dye"]

    assert paginate(view, offset=10, limit=2).items == []


def test_summary_counts(catalog):
    summary = summarize(catalog)

    assert summary.total_materials == 4
    assert summary.in_stock == 3
    assert summary.low_stock == 1
    assert summary.out_of_stock == 1
    assert summary.total_value == pytest.approx(400 * 4.5 + 8 * 2.1 + 40 * 9.75)
