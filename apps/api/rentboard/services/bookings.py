"""Booking presets: the owner review list, status changes and booking drafts."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from ..core.errors import ApiError, ConflictError, user_message
from ..repositories import bookings as bookings_repo
from ..schemas.bookings import AvailabilityCheckParams, Booking, BookingCreate, BookingStatus
from ..schemas.views import (
    BookingDraftResponse,
    BookingListPage,
    BookingStats,
    ListQueryOut,
    NotificationOut,
    PageInfo,
)
from .edit_state import EditStateStore
from .list_view import CategoricalFilter, ListSpec, ListViewController, SortKey, SortKind, SortOrder
from .notifications import CollectingNotifier, Notifier
from .requested import RequestedTracker
from .submission import SubmissionPipeline, SubmitStatus
from .validation import DateOrder, Required, ValidationSchema

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
UNAVAILABLE_MARKERS = ("not available", "unavailable")

BOOKING_LIST_SPEC = ListSpec(
    search_fields=("bookingId", "userId", "message"),
    filters={"status": CategoricalFilter("status")},
    sort_keys={
        "created_at": SortKey("created_at", SortKind.DATE),
        "check_in_date": SortKey("check_in_date", SortKind.DATE),
        "check_out_date": SortKey("check_out_date", SortKind.DATE),
        "status": SortKey("status"),
    },
)

BOOKING_DRAFT_SCHEMA = ValidationSchema(
    rules=(
        Required("check_in_date", "Check-in date is required"),
        Required("check_out_date", "Check-out date is required"),
        DateOrder("check_in_date", "check_out_date", "Check-out date must be after check-in date"),
    ),
    model=BookingCreate,
)


def booking_stats(bookings: Iterable[Booking]) -> BookingStats:
    bookings = list(bookings)
    counts = {status: 0 for status in BookingStatus}
    for booking in bookings:
        counts[booking.status] += 1
    return BookingStats(
        total=len(bookings),
        pending=counts[BookingStatus.PENDING],
        accepted=counts[BookingStatus.ACCEPTED],
        rejected=counts[BookingStatus.REJECTED],
    )


async def apartment_bookings_page(
    client: httpx.AsyncClient,
    apartment_id: str,
    *,
    search: str = "",
    status: str = "all",
    sort_field: str | None = "created_at",
    sort_order: SortOrder = SortOrder.DESC,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> BookingListPage:
    """Applications received for one apartment, as the owner reviews them."""

    notifier = CollectingNotifier()
    try:
        bookings = await bookings_repo.list_for_apartment(client, apartment_id)
    except ApiError as exc:
        logger.warning("Failed to load bookings for apartment %s: %s", apartment_id, exc)
        notifier.notify("error", user_message(exc))
        bookings = []

    controller = ListViewController(
        BOOKING_LIST_SPEC, page_size=page_size, sort_field=sort_field, sort_order=sort_order
    )
    controller.set_items(bookings)
    controller.set_search(search)
    controller.set_filter("status", status)
    controller.set_page(page)

    return BookingListPage(
        items=controller.visible_page(),
        pagination=PageInfo(
            page=controller.query.page,
            page_size=controller.query.page_size,
            total_items=len(controller.filtered()),
            total_pages=controller.total_pages(),
            page_numbers=controller.page_numbers(),
        ),
        query=ListQueryOut(
            search=controller.query.search_text,
            filters=dict(controller.query.filters),
            sort_field=controller.query.sort_field,
            sort_order=controller.query.sort_order.value,
        ),
        stats=booking_stats(bookings),
        notifications=[NotificationOut(kind=n.kind, message=n.message) for n in notifier.drain()],
    )


async def change_status(
    client: httpx.AsyncClient, booking_id: str, status: BookingStatus, notifier: Notifier
) -> Booking | None:
    """Accept or reject an application; failures are reported, not raised."""

    try:
        booking = await bookings_repo.update_status(client, booking_id, status)
    except ApiError as exc:
        logger.warning("Failed to set booking %s to %s: %s", booking_id, status.value, exc)
        notifier.notify("error", f"Failed to {_verb(status)} application")
        return None
    notifier.notify("success", f"Application {status.value} successfully!")
    return booking


def _verb(status: BookingStatus) -> str:
    return {
        BookingStatus.ACCEPTED: "accept",
        BookingStatus.REJECTED: "reject",
        BookingStatus.CANCELLED: "cancel",
        BookingStatus.COMPLETED: "complete",
    }.get(status, "update")


def is_available(verdict: str) -> bool:
    """Read the backend's free-text availability verdict."""

    text = verdict.lower()
    return not any(marker in text for marker in UNAVAILABLE_MARKERS)


def new_draft(apartment_id: str) -> dict[str, Any]:
    return {"apartmentId": apartment_id, "check_in_date": None, "check_out_date": None, "message": ""}


async def submit_draft(
    client: httpx.AsyncClient,
    apartment_id: str,
    values: Mapping[str, Any],
    *,
    tracker: RequestedTracker | None = None,
    user_id: str | None = None,
) -> BookingDraftResponse:
    """Validate and send a booking request for an apartment.

    Date conflicts come back as ``status="conflict"`` with the dedicated
    message. On any failure the draft is echoed back so the form keeps it.
    """

    notifier = CollectingNotifier()
    store = EditStateStore(f"booking-draft:{apartment_id}")
    store.set_record(new_draft(apartment_id))
    store.start_editing()
    for key, value in values.items():
        store.update_field(key, value)

    async def writer(payload: dict[str, Any]) -> Booking:
        draft = BookingCreate.model_validate(payload)
        verdict = await bookings_repo.check_availability(
            client,
            AvailabilityCheckParams(
                apartment_id=draft.apartmentId,
                check_in=draft.check_in_date,
                check_out=draft.check_out_date,
            ),
        )
        if not is_available(verdict):
            logger.info("Apartment %s unavailable for %s..%s: %s", apartment_id,
                        draft.check_in_date, draft.check_out_date, verdict)
            raise ConflictError(verdict)
        return await bookings_repo.create_booking(client, draft)

    pipeline = SubmissionPipeline(
        store,
        BOOKING_DRAFT_SCHEMA,
        writer,
        notifier,
        require_changes=False,
        success_message="Booking request sent",
    )
    result = await pipeline.submit()

    if result.status is SubmitStatus.SAVED:
        if tracker is not None and user_id:
            tracker.mark(user_id, apartment_id)
        status = "created"
        booking = Booking.model_validate(store.record)
    else:
        status = "conflict" if isinstance(result.error, ConflictError) else result.status.value
        booking = None

    return BookingDraftResponse(
        status=status,
        booking=booking,
        draft=store.full_record(),
        errors=result.errors,
        field_errors=result.field_errors,
        notifications=[NotificationOut(kind=n.kind, message=n.message) for n in notifier.drain()],
    )


ACTIVE_REQUEST_STATUSES = (BookingStatus.PENDING, BookingStatus.ACCEPTED)


async def requested_apartments(
    client: httpx.AsyncClient, user_id: str, tracker: RequestedTracker
) -> list[str]:
    """Apartment ids the user has an open request for.

    The backend list replaces local marks; if it cannot be fetched the local
    marks are returned as they are.
    """

    try:
        bookings = await bookings_repo.list_for_user(client, user_id)
    except ApiError as exc:
        logger.warning("Keeping local request marks for user %s: %s", user_id, exc)
        return sorted(tracker.requested_ids(user_id))
    tracker.reconcile(
        user_id, [booking.apartmentId for booking in bookings if booking.status in ACTIVE_REQUEST_STATUSES]
    )
    return sorted(tracker.requested_ids(user_id))
