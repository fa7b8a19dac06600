"""Filter, sort and paginate an already-fetched collection for one list view.

None of this performs I/O: the controller derives the visible page from items
the caller fetched. Each list view owns its own controller and query state.
"""
from __future__ import annotations

import enum
import logging
import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

ALL = "all"
ELLIPSIS = "..."
MAX_VISIBLE_PAGES = 5


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class SortKind(str, enum.Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"


@dataclass(slots=True)
class SortKey:
    field: str
    kind: SortKind = SortKind.TEXT


@dataclass(slots=True)
class CategoricalFilter:
    """Named filter over one record field.

    ``choices`` maps a filter value to a predicate over the field value (e.g.
    price buckets). With no ``field`` the predicate receives the whole record.
    Values without a predicate match by equality, or by membership when the
    field holds a list.
    """

    field: str | None
    choices: Mapping[str, Callable[[Any], bool]] = field(default_factory=dict)

    def matches(self, item: Any, value: str | None) -> bool:
        if value is None or value == "" or value == ALL:
            return True
        field_value = resolve_field(item, self.field) if self.field else item
        predicate = self.choices.get(value)
        if predicate is not None:
            return field_value is not None and bool(predicate(field_value))
        if isinstance(field_value, (list, tuple, set, frozenset)):
            return value in field_value or value in {str(entry) for entry in field_value}
        if isinstance(field_value, enum.Enum):
            field_value = field_value.value
        return field_value == value or str(field_value).lower() == str(value).lower()


@dataclass(slots=True)
class ListSpec:
    """Which fields a list view can search, filter and sort on."""

    search_fields: tuple[str, ...] = ()
    filters: dict[str, CategoricalFilter] = field(default_factory=dict)
    sort_keys: dict[str, SortKey] = field(default_factory=dict)


@dataclass(slots=True)
class ListQuery:
    search_text: str = ""
    filters: dict[str, str] = field(default_factory=dict)
    sort_field: str | None = None
    sort_order: SortOrder = SortOrder.ASC
    page: int = 1
    page_size: int = 5


def resolve_field(item: Any, path: str) -> Any:
    """Read a dotted path from a mapping or an object; missing parts give None."""

    current = item
    for key in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(key)
        else:
            current = getattr(current, key, None)
    return current


def apply_filters(items: Iterable[Any], query: ListQuery, spec: ListSpec) -> list[Any]:
    """Return items matching the search text AND every active categorical filter."""

    needle = query.search_text.strip().lower()
    active = [
        (spec.filters[name], value)
        for name, value in query.filters.items()
        if name in spec.filters and value not in (None, "", ALL)
    ]

    result = []
    for item in items:
        if needle and not any(
            needle in str(resolve_field(item, path) or "").lower() for path in spec.search_fields
        ):
            continue
        if not all(flt.matches(item, value) for flt, value in active):
            continue
        result.append(item)
    return result


def apply_sort(
    items: Iterable[Any], sort_field: str | None, order: SortOrder, spec: ListSpec
) -> list[Any]:
    """Stable, type-aware sort; records missing the value go last in both orders."""

    items = list(items)
    if sort_field is None:
        return items
    key = spec.sort_keys.get(sort_field)
    if key is None:
        raise KeyError(f"Unknown sort field: {sort_field}")

    present: list[tuple[Any, Any]] = []
    missing: list[Any] = []
    for item in items:
        sort_value = _sort_value(resolve_field(item, key.field), key.kind)
        if sort_value is None:
            missing.append(item)
        else:
            present.append((sort_value, item))

    present.sort(key=lambda pair: pair[0], reverse=order is SortOrder.DESC)
    return [item for _, item in present] + missing


def _sort_value(value: Any, kind: SortKind) -> Any:
    if value is None:
        return None
    if kind is SortKind.TEXT:
        if isinstance(value, enum.Enum):
            value = value.value
        return str(value).casefold()
    if kind is SortKind.NUMBER:
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
    return _timestamp(value)


def _timestamp(value: Any) -> float | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            logger.debug("Unparseable date %r sorted as missing", value)
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def paginate(items: Sequence[Any], page: int, page_size: int) -> list[Any]:
    """Return ``items[(page-1)*size : page*size]``; out-of-range pages are empty."""

    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    return list(items[start : start + page_size])


def total_pages(count: int, page_size: int) -> int:
    if page_size < 1:
        return 0
    return math.ceil(count / page_size)


def page_numbers(current: int, total: int) -> list[int | str]:
    """Pager entries: every page when few, otherwise a window with ``...`` gaps."""

    if total <= MAX_VISIBLE_PAGES:
        return list(range(1, total + 1))
    if current <= 3:
        return [1, 2, 3, 4, ELLIPSIS, total]
    if current >= total - 2:
        return [1, ELLIPSIS, *range(total - 3, total + 1)]
    return [1, ELLIPSIS, current - 1, current, current + 1, ELLIPSIS, total]


class ListViewController:
    """Query state plus the fetched collection of one list view.

    Changing the search text, a filter, the sort or the page size puts the
    view back on page 1.
    """

    def __init__(
        self,
        spec: ListSpec,
        *,
        page_size: int = 5,
        sort_field: str | None = None,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> None:
        if sort_field is not None and sort_field not in spec.sort_keys:
            raise KeyError(f"Unknown sort field: {sort_field}")
        self.spec = spec
        self.query = ListQuery(sort_field=sort_field, sort_order=sort_order, page_size=page_size)
        self._items: list[Any] = []

    @property
    def items(self) -> list[Any]:
        return list(self._items)

    def set_items(self, items: Iterable[Any]) -> None:
        self._items = list(items)

    def set_search(self, text: str) -> None:
        if text != self.query.search_text:
            self.query.search_text = text
            self.query.page = 1

    def set_filter(self, name: str, value: str) -> None:
        if name not in self.spec.filters:
            raise KeyError(f"Unknown filter: {name}")
        if self.query.filters.get(name, ALL) != value:
            self.query.filters[name] = value
            self.query.page = 1

    def clear_filters(self) -> None:
        changed = bool(self.query.search_text) or any(
            value != ALL for value in self.query.filters.values()
        )
        self.query.search_text = ""
        self.query.filters = {}
        if changed:
            self.query.page = 1

    def set_sort(self, sort_field: str | None, order: SortOrder | None = None) -> None:
        if sort_field is not None and sort_field not in self.spec.sort_keys:
            raise KeyError(f"Unknown sort field: {sort_field}")
        order = order or self.query.sort_order
        if (sort_field, order) != (self.query.sort_field, self.query.sort_order):
            self.query.sort_field = sort_field
            self.query.sort_order = order
            self.query.page = 1

    def toggle_sort(self, sort_field: str) -> None:
        """Flip the order on the active field, or switch to a new field ascending."""

        if sort_field == self.query.sort_field:
            flipped = SortOrder.DESC if self.query.sort_order is SortOrder.ASC else SortOrder.ASC
            self.set_sort(sort_field, flipped)
        else:
            self.set_sort(sort_field, SortOrder.ASC)

    def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        if page_size != self.query.page_size:
            self.query.page_size = page_size
            self.query.page = 1

    def set_page(self, page: int) -> None:
        self.query.page = page

    def filtered(self) -> list[Any]:
        matching = apply_filters(self._items, self.query, self.spec)
        return apply_sort(matching, self.query.sort_field, self.query.sort_order, self.spec)

    def visible_page(self) -> list[Any]:
        return paginate(self.filtered(), self.query.page, self.query.page_size)

    def total_pages(self) -> int:
        return total_pages(len(self.filtered()), self.query.page_size)

    def page_numbers(self) -> list[int | str]:
        return page_numbers(self.query.page, self.total_pages())
