"""Response and request contracts of the view-state endpoints."""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from .apartments import Apartment
from .bookings import Booking, BookingStatus


class NotificationOut(BaseModel):
    kind: Literal["success", "error", "info"]
    message: str


class PageInfo(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    page_numbers: list[int | str] = Field(default_factory=list)


class ListQueryOut(BaseModel):
    search: str = ""
    filters: dict[str, str] = Field(default_factory=dict)
    sort_field: str | None = None
    sort_order: str = "asc"


class ApartmentStats(BaseModel):
    total: int = 0
    active: int = 0
    featured: int = 0
    avg_price: int = 0


class ApartmentListPage(BaseModel):
    items: list[Apartment]
    pagination: PageInfo
    query: ListQueryOut
    stats: ApartmentStats
    notifications: list[NotificationOut] = Field(default_factory=list)


class ApartmentSearchPage(BaseModel):
    mode: str
    items: list[Apartment]
    pagination: PageInfo
    query: ListQueryOut
    notifications: list[NotificationOut] = Field(default_factory=list)


class BookingStats(BaseModel):
    total: int = 0
    pending: int = 0
    accepted: int = 0
    rejected: int = 0


class BookingListPage(BaseModel):
    items: list[Booking]
    pagination: PageInfo
    query: ListQueryOut
    stats: BookingStats
    notifications: list[NotificationOut] = Field(default_factory=list)


class BookingStatusRequest(BaseModel):
    status: BookingStatus


class BookingStatusResponse(BaseModel):
    booking: Booking | None = None
    notifications: list[NotificationOut] = Field(default_factory=list)


class BookingDraftRequest(BaseModel):
    check_in_date: str | None = None
    check_out_date: str | None = None
    message: str = ""
    user_id: str | None = None


class BookingDraftResponse(BaseModel):
    status: str
    booking: Booking | None = None
    draft: dict[str, Any] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)
    field_errors: dict[str, list[str]] = Field(default_factory=dict)
    notifications: list[NotificationOut] = Field(default_factory=list)


class OpenSessionRequest(BaseModel):
    record_id: str | None = None


class FieldUpdate(BaseModel):
    path: str = Field(min_length=1)
    value: Any = None


class FieldUpdateRequest(BaseModel):
    updates: list[FieldUpdate] = Field(min_length=1)


class ListItemRequest(BaseModel):
    path: str = Field(min_length=1)
    value: str = ""


class EditSessionOut(BaseModel):
    session_id: str
    kind: str
    record_id: str | None = None
    phase: str
    is_editing: bool
    loading: bool
    has_changes: bool
    changed_fields: list[str] = Field(default_factory=list)
    record: dict[str, Any] | None = None
    working_copy: dict[str, Any] | None = None
    from_cache: bool = False
    error: str | None = None
    notifications: list[NotificationOut] = Field(default_factory=list)


class SaveResponse(BaseModel):
    status: str
    errors: list[str] = Field(default_factory=list)
    field_errors: dict[str, list[str]] = Field(default_factory=dict)
    session: EditSessionOut


class RequestedApartmentsResponse(BaseModel):
    user_id: str
    apartment_ids: list[str] = Field(default_factory=list)
