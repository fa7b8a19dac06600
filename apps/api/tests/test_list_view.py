"""Tests for filtering, sorting and paginating list views."""
from __future__ import annotations

import pytest

from rentboard.schemas.apartments import Apartment
from rentboard.services.apartments import APARTMENT_LIST_SPEC
from rentboard.services.list_view import (
    ELLIPSIS,
    CategoricalFilter,
    ListQuery,
    ListSpec,
    ListViewController,
    SortKey,
    SortKind,
    SortOrder,
    apply_filters,
    apply_sort,
    page_numbers,
    paginate,
    total_pages,
)

SPEC = ListSpec(
    search_fields=("name", "address.city"),
    filters={
        "status": CategoricalFilter("status"),
        "tags": CategoricalFilter("tags"),
        "price": CategoricalFilter("price", {"cheap": lambda price: price < 100}),
    },
    sort_keys={
        "name": SortKey("name"),
        "price": SortKey("price", SortKind.NUMBER),
        "created_at": SortKey("created_at", SortKind.DATE),
    },
)

ITEMS = [
    {"id": 1, "name": "beta", "price": 150, "status": "active", "tags": ["pets"],
     "address": {"city": "Astana"}, "created_at": "2025-03-01T10:00:00"},
    {"id": 2, "name": "Alpha", "price": 90, "status": "inactive", "tags": [],
     "address": {"city": "Almaty"}, "created_at": "2025-01-15"},
    {"id": 3, "name": "gamma", "price": None, "status": "active", "tags": ["pets", "wifi"],
     "address": {"city": "Astana"}, "created_at": None},
    {"id": 4, "name": "Delta", "price": 90, "status": "active", "tags": ["wifi"],
     "address": {"city": "ALMATY"}, "created_at": "2025-02-01T00:00:00+00:00"},
]


def _ids(items) -> list[int]:
    return [item["id"] for item in items]


def test_search_is_case_insensitive_over_nested_fields() -> None:
    result = apply_filters(ITEMS, ListQuery(search_text="  almaty "), SPEC)

    assert _ids(result) == [2, 4]


def test_filters_combine_conjunctively() -> None:
    query = ListQuery(search_text="astana", filters={"status": "active", "tags": "wifi"})

    assert _ids(apply_filters(ITEMS, query, SPEC)) == [3]


def test_all_value_is_a_noop() -> None:
    query = ListQuery(filters={"status": "all", "tags": "all"})

    assert _ids(apply_filters(ITEMS, query, SPEC)) == [1, 2, 3, 4]


def test_named_choice_predicates_skip_missing_values() -> None:
    query = ListQuery(filters={"price": "cheap"})

    assert _ids(apply_filters(ITEMS, query, SPEC)) == [2, 4]


def test_numeric_sort_is_stable_and_puts_missing_last() -> None:
    ascending = apply_sort(ITEMS, "price", SortOrder.ASC, SPEC)
    descending = apply_sort(ITEMS, "price", SortOrder.DESC, SPEC)

    assert _ids(ascending) == [2, 4, 1, 3]
    assert _ids(descending) == [1, 2, 4, 3]


def test_text_sort_ignores_case() -> None:
    assert _ids(apply_sort(ITEMS, "name", SortOrder.ASC, SPEC)) == [2, 1, 4, 3]


def test_date_sort_parses_mixed_formats() -> None:
    assert _ids(apply_sort(ITEMS, "created_at", SortOrder.DESC, SPEC)) == [1, 4, 2, 3]


def test_unknown_sort_field_raises() -> None:
    with pytest.raises(KeyError):
        apply_sort(ITEMS, "nope", SortOrder.ASC, SPEC)


def test_paginate_out_of_range_is_empty() -> None:
    assert _ids(paginate(ITEMS, 2, 3)) == [4]
    assert paginate(ITEMS, 3, 3) == []
    assert paginate(ITEMS, 0, 3) == []


@pytest.mark.parametrize(
    ("current", "total", "expected"),
    [
        (1, 0, []),
        (2, 5, [1, 2, 3, 4, 5]),
        (1, 10, [1, 2, 3, 4, ELLIPSIS, 10]),
        (9, 10, [1, ELLIPSIS, 7, 8, 9, 10]),
        (5, 10, [1, ELLIPSIS, 4, 5, 6, ELLIPSIS, 10]),
    ],
)
def test_page_numbers(current, total, expected) -> None:
    assert page_numbers(current, total) == expected


def test_total_pages_rounds_up() -> None:
    assert total_pages(11, 5) == 3
    assert total_pages(0, 5) == 0


def test_query_changes_reset_page() -> None:
    controller = ListViewController(SPEC, page_size=1)
    controller.set_items(ITEMS)

    controller.set_page(3)
    controller.set_search("a")
    assert controller.query.page == 1

    controller.set_page(3)
    controller.set_filter("status", "active")
    assert controller.query.page == 1

    controller.set_page(2)
    controller.set_sort("price", SortOrder.DESC)
    assert controller.query.page == 1

    controller.set_page(2)
    controller.set_page_size(2)
    assert controller.query.page == 1


def test_unchanged_values_keep_page() -> None:
    controller = ListViewController(SPEC, page_size=1)
    controller.set_filter("status", "active")
    controller.set_page(2)

    controller.set_filter("status", "active")
    controller.set_search("")

    assert controller.query.page == 2


def test_toggle_sort_flips_then_switches() -> None:
    controller = ListViewController(SPEC, sort_field="price", sort_order=SortOrder.ASC)

    controller.toggle_sort("price")
    assert controller.query.sort_order is SortOrder.DESC

    controller.toggle_sort("name")
    assert (controller.query.sort_field, controller.query.sort_order) == ("name", SortOrder.ASC)


def test_controller_rejects_unknown_names() -> None:
    controller = ListViewController(SPEC)

    with pytest.raises(KeyError):
        controller.set_filter("colour", "red")
    with pytest.raises(ValueError):
        controller.set_page_size(0)


def test_visible_page_applies_everything() -> None:
    controller = ListViewController(SPEC, page_size=2, sort_field="name")
    controller.set_items(ITEMS)
    controller.set_filter("status", "active")

    assert _ids(controller.visible_page()) == [1, 4]
    assert controller.total_pages() == 2
    controller.set_page(2)
    assert _ids(controller.visible_page()) == [3]


def test_apartment_search_and_price_range_compose(demo_apartments) -> None:
    apartments = [Apartment.model_validate(item) for item in demo_apartments]
    controller = ListViewController(APARTMENT_LIST_SPEC)
    controller.set_items(apartments)

    controller.set_search("Almaty")
    controller.set_filter("price_range", "100k-200k")
    assert [apartment.apartmentId for apartment in controller.visible_page()] == ["3"]

    controller.set_filter("price_range", "under100k")
    assert controller.visible_page() == []


def test_apartment_status_filter_reads_flags(demo_apartments) -> None:
    apartments = [Apartment.model_validate(item) for item in demo_apartments]
    controller = ListViewController(APARTMENT_LIST_SPEC, sort_field="price")
    controller.set_items(apartments)

    controller.set_filter("status", "promoted")
    assert [a.apartmentId for a in controller.filtered()] == ["2"]

    controller.set_filter("status", "inactive")
    assert [a.apartmentId for a in controller.filtered()] == ["3"]

    controller.set_filter("status", "all")
    controller.set_filter("rooms", "4+")
    assert [a.apartmentId for a in controller.filtered()] == ["3"]
