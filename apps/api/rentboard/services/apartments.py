"""Apartment presets: the owner list view, dashboard stats and the edit kind."""
from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from ..core.config import settings
from ..core.errors import ApiError, user_message
from ..repositories import apartments as apartments_repo
from ..schemas.apartments import (
    Apartment,
    ApartmentSearchCriteria,
    ApartmentSearchParams,
    AvailabilitySearchParams,
    NearbySearchParams,
    PaginationParams,
)
from ..schemas.views import (
    ApartmentListPage,
    ApartmentSearchPage,
    ApartmentStats,
    ListQueryOut,
    NotificationOut,
    PageInfo,
)
from .edit_sessions import EditKind
from .edit_state import EditStateStore
from .list_view import CategoricalFilter, ListSpec, ListViewController, SortKey, SortKind, SortOrder
from .notifications import CollectingNotifier, Notifier
from .validation import AtLeastOneOf, MinLength, NumericRange, Required, ValidationSchema

logger = logging.getLogger(__name__)

PAGE_SIZES = (1, 5, 10, 15)
DEFAULT_SORT = ("created_at", SortOrder.DESC)

PRICE_RANGES = {
    "under100k": lambda price: price < 100_000,
    "100k-200k": lambda price: 100_000 <= price < 200_000,
    "200k-300k": lambda price: 200_000 <= price < 300_000,
    "over300k": lambda price: price >= 300_000,
}

ROOMS = {
    "1": lambda rooms: rooms == 1,
    "2": lambda rooms: rooms == 2,
    "3": lambda rooms: rooms == 3,
    "4+": lambda rooms: rooms >= 4,
}

STATUSES = {
    "active": lambda apartment: bool(_get(apartment, "is_active", True)),
    "inactive": lambda apartment: not _get(apartment, "is_active", True),
    "promoted": lambda apartment: bool(_get(apartment, "is_promoted", False)),
}

APARTMENT_LIST_SPEC = ListSpec(
    search_fields=("apartment_name", "address.street", "district_name", "university_nearby"),
    filters={
        "status": CategoricalFilter(None, STATUSES),
        "price_range": CategoricalFilter("price_per_month", PRICE_RANGES),
        "rooms": CategoricalFilter("number_of_rooms", ROOMS),
    },
    sort_keys={
        "name": SortKey("apartment_name"),
        "price": SortKey("price_per_month", SortKind.NUMBER),
        "created_at": SortKey("created_at", SortKind.DATE),
        "available_from": SortKey("available_from", SortKind.DATE),
        "district_name": SortKey("district_name"),
        "university_nearby": SortKey("university_nearby"),
        "number_of_rooms": SortKey("number_of_rooms", SortKind.NUMBER),
        "area": SortKey("area", SortKind.NUMBER),
    },
)

APARTMENT_SCHEMA = ValidationSchema(
    rules=(
        Required("apartment_name", "Apartment name is required"),
        MinLength("apartment_name", 3, "Apartment name must have at least 3 characters"),
        Required("address.street", "Street is required"),
        Required("address.house_number", "House number is required"),
        Required("district_name", "District is required"),
        NumericRange("price_per_month", minimum=0, exclusive_minimum=True,
                     message="Price per month must be greater than 0"),
        NumericRange("area", minimum=0, exclusive_minimum=True, message="Area must be greater than 0"),
        NumericRange("number_of_rooms", minimum=1, message="Number of rooms must be at least 1"),
        NumericRange("max_users", minimum=1, message="Max users must be at least 1"),
        AtLeastOneOf(("contact_phone", "contact_telegram"), "Provide a phone number or a Telegram contact"),
    ),
    model=Apartment,
)

SEARCH_LIST_SPEC = ListSpec(
    search_fields=APARTMENT_LIST_SPEC.search_fields,
    filters={name: spec for name, spec in APARTMENT_LIST_SPEC.filters.items() if name != "status"},
    sort_keys=APARTMENT_LIST_SPEC.sort_keys,
)

UNORDERED_FIELDS = ("pictures", "included_utilities", "rules")
READ_ONLY_FIELDS = ("created_at", "updated_at")
LIST_ITEM_LABELS = {"included_utilities": "utility", "rules": "rule"}


def _get(item: Any, key: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        return item.get(key, default)
    return getattr(item, key, default)


async def _load(client: httpx.AsyncClient, record_id: str | None) -> Apartment:
    if not record_id:
        raise ValueError("An apartment id is required")
    return await apartments_repo.get_by_id(client, record_id)


async def _write(client: httpx.AsyncClient, record_id: str | None, payload: dict[str, Any]) -> Apartment:
    if not record_id:
        raise ValueError("An apartment id is required")
    payload = {**payload, "apartmentId": record_id}
    return await apartments_repo.update_apartment(client, record_id, payload)


APARTMENT_EDIT = EditKind(
    name="apartment",
    schema=APARTMENT_SCHEMA,
    load=_load,
    write=_write,
    requires_record_id=True,
    read_only_fields=READ_ONLY_FIELDS,
    unordered_fields=UNORDERED_FIELDS,
    success_message="Apartment updated successfully",
    not_found_message="Apartment not found",
)


def dashboard_stats(apartments: Iterable[Apartment]) -> ApartmentStats:
    """Totals shown above the owner's list; computed over all their apartments."""

    apartments = list(apartments)
    if not apartments:
        return ApartmentStats()
    prices = [apartment.price_per_month for apartment in apartments]
    return ApartmentStats(
        total=len(apartments),
        active=sum(1 for apartment in apartments if apartment.is_active),
        featured=sum(1 for apartment in apartments if apartment.is_promoted),
        avg_price=round(sum(prices) / len(prices)),
    )


def add_list_item(store: EditStateStore, notifier: Notifier, path: str, value: str) -> bool:
    """Append a utility or rule to the working copy, refusing blanks and duplicates."""

    item = value.strip()
    label = LIST_ITEM_LABELS.get(path, "item")
    if not item:
        notifier.notify("error", f"Please enter a {label} to add")
        return False
    current = store.full_record().get(path) or []
    if item in current:
        notifier.notify("error", f"This {label} is already in the list")
        return False
    return store.update_field(path, [*current, item])


def remove_list_item(store: EditStateStore, path: str, index: int) -> bool:
    current = list(store.full_record().get(path) or [])
    if not 0 <= index < len(current):
        return False
    del current[index]
    return store.update_field(path, current)


class SearchMode(str, enum.Enum):
    GENERAL = "general"
    NEARBY = "nearby"
    AVAILABILITY = "availability"
    PROMOTED = "promoted"


GENERAL_CRITERIA = ("min_price", "max_price", "location", "university", "room_type")


def search_mode(criteria: ApartmentSearchCriteria) -> SearchMode:
    """Coordinates win over dates, dates over general filters; an empty form lists promoted apartments."""

    if criteria.latitude is not None and criteria.longitude is not None:
        return SearchMode.NEARBY
    if criteria.check_in and criteria.check_out:
        return SearchMode.AVAILABILITY
    if all(getattr(criteria, name) in (None, "") for name in GENERAL_CRITERIA):
        return SearchMode.PROMOTED
    return SearchMode.GENERAL


async def _fetch_search_results(
    client: httpx.AsyncClient, criteria: ApartmentSearchCriteria, mode: SearchMode, limit: int
) -> list[Apartment]:
    if mode is SearchMode.NEARBY:
        params = NearbySearchParams(
            latitude=criteria.latitude,
            longitude=criteria.longitude,
            radius_km=criteria.radius_km,
            limit=limit,
        )
        return await apartments_repo.list_nearby(client, params)
    if mode is SearchMode.AVAILABILITY:
        params = AvailabilitySearchParams(
            check_in=criteria.check_in, check_out=criteria.check_out, limit=limit
        )
        return await apartments_repo.list_available(client, params)
    if mode is SearchMode.PROMOTED:
        return await apartments_repo.list_promoted(client, PaginationParams(limit=limit))
    params = ApartmentSearchParams(
        **criteria.model_dump(include=set(GENERAL_CRITERIA)), limit=limit
    )
    return await apartments_repo.search(client, params)


async def search_apartments_page(
    client: httpx.AsyncClient,
    criteria: ApartmentSearchCriteria,
    *,
    search: str = "",
    filters: Mapping[str, str] | None = None,
    sort_field: str | None = DEFAULT_SORT[0],
    sort_order: SortOrder = DEFAULT_SORT[1],
    page: int = 1,
    page_size: int = 5,
) -> ApartmentSearchPage:
    """Public listing search.

    The backend query is chosen from the filled-in criteria. Its results are
    then narrowed, sorted and paged locally like the owner list.
    """

    mode = search_mode(criteria)
    notifier = CollectingNotifier()
    try:
        apartments = await _fetch_search_results(client, criteria, mode, settings.search_fetch_limit)
    except ApiError as exc:
        logger.warning("Apartment search (%s) failed: %s", mode.value, exc)
        notifier.notify("error", user_message(exc))
        apartments = []

    controller = _controller(
        SEARCH_LIST_SPEC, apartments, search, filters, sort_field, sort_order, page, page_size
    )
    return ApartmentSearchPage(
        mode=mode.value,
        items=controller.visible_page(),
        pagination=_page_info(controller),
        query=_query_out(controller),
        notifications=[NotificationOut(kind=n.kind, message=n.message) for n in notifier.drain()],
    )


def _controller(
    spec: ListSpec,
    items: list[Apartment],
    search: str,
    filters: Mapping[str, str] | None,
    sort_field: str | None,
    sort_order: SortOrder,
    page: int,
    page_size: int,
) -> ListViewController:
    controller = ListViewController(
        spec, page_size=page_size, sort_field=sort_field, sort_order=sort_order
    )
    controller.set_items(items)
    controller.set_search(search)
    for name, value in (filters or {}).items():
        controller.set_filter(name, value)
    controller.set_page(page)
    return controller


def _page_info(controller: ListViewController) -> PageInfo:
    return PageInfo(
        page=controller.query.page,
        page_size=controller.query.page_size,
        total_items=len(controller.filtered()),
        total_pages=controller.total_pages(),
        page_numbers=controller.page_numbers(),
    )


def _query_out(controller: ListViewController) -> ListQueryOut:
    return ListQueryOut(
        search=controller.query.search_text,
        filters=dict(controller.query.filters),
        sort_field=controller.query.sort_field,
        sort_order=controller.query.sort_order.value,
    )


async def owner_apartments_page(
    client: httpx.AsyncClient,
    owner_id: str,
    *,
    search: str = "",
    filters: Mapping[str, str] | None = None,
    sort_field: str | None = DEFAULT_SORT[0],
    sort_order: SortOrder = DEFAULT_SORT[1],
    page: int = 1,
    page_size: int = 5,
) -> ApartmentListPage:
    """Fetch the owner's apartments and derive the requested list page.

    A failed fetch yields an empty page with an error notification rather
    than an exception.
    """

    notifier = CollectingNotifier()
    try:
        apartments = await apartments_repo.list_by_owner(client, owner_id)
    except ApiError as exc:
        logger.warning("Failed to load apartments for owner %s: %s", owner_id, exc)
        notifier.notify("error", user_message(exc))
        apartments = []

    controller = _controller(
        APARTMENT_LIST_SPEC, apartments, search, filters, sort_field, sort_order, page, page_size
    )
    return ApartmentListPage(
        items=controller.visible_page(),
        pagination=_page_info(controller),
        query=_query_out(controller),
        stats=dashboard_stats(apartments),
        notifications=[NotificationOut(kind=n.kind, message=n.message) for n in notifier.drain()],
    )
