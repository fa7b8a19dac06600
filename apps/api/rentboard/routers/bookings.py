"""Booking review, status change and booking request endpoints."""
from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ..core.config import settings
from ..core.http import get_client
from ..schemas import views as views_schema
from ..services import bookings as bookings_service
from ..services.list_view import SortOrder
from ..services.notifications import CollectingNotifier
from ..services.requested import RequestedTracker, requested_tracker

router = APIRouter()

DRAFT_STATUS_CODES = {
    "created": status.HTTP_201_CREATED,
    "conflict": status.HTTP_409_CONFLICT,
    "invalid": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "failed": status.HTTP_502_BAD_GATEWAY,
}


def get_tracker() -> RequestedTracker:
    return requested_tracker


@router.get("/apartments/{apartment_id}/bookings", response_model=views_schema.BookingListPage)
async def apartment_bookings(
    apartment_id: str,
    search: str = "",
    status_filter: str = Query(default="all", alias="status"),
    sort: str = "created_at",
    order: SortOrder = SortOrder.DESC,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=bookings_service.DEFAULT_PAGE_SIZE, ge=1, le=settings.max_page_size),
    client: httpx.AsyncClient = Depends(get_client),
) -> views_schema.BookingListPage:
    """Return the applications received for an apartment."""

    try:
        return await bookings_service.apartment_bookings_page(
            client,
            apartment_id,
            search=search,
            status=status_filter,
            sort_field=sort,
            sort_order=order,
            page=page,
            page_size=page_size,
        )
    except KeyError as exc:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc.args[0])) from exc


@router.patch("/bookings/{booking_id}/status", response_model=views_schema.BookingStatusResponse)
async def update_booking_status(
    booking_id: str,
    payload: views_schema.BookingStatusRequest,
    client: httpx.AsyncClient = Depends(get_client),
) -> views_schema.BookingStatusResponse:
    """Accept or reject an application."""

    notifier = CollectingNotifier()
    booking = await bookings_service.change_status(client, booking_id, payload.status, notifier)
    return views_schema.BookingStatusResponse(
        booking=booking,
        notifications=[views_schema.NotificationOut(kind=n.kind, message=n.message) for n in notifier.drain()],
    )


@router.post("/apartments/{apartment_id}/bookings", response_model=views_schema.BookingDraftResponse)
async def request_booking(
    apartment_id: str,
    payload: views_schema.BookingDraftRequest,
    response: Response,
    client: httpx.AsyncClient = Depends(get_client),
    tracker: RequestedTracker = Depends(get_tracker),
) -> views_schema.BookingDraftResponse:
    """Send a booking request; the draft comes back unchanged when it fails."""

    values = payload.model_dump(exclude={"user_id"})
    result = await bookings_service.submit_draft(
        client, apartment_id, values, tracker=tracker, user_id=payload.user_id
    )
    response.status_code = DRAFT_STATUS_CODES.get(result.status, status.HTTP_200_OK)
    return result


@router.get("/users/{user_id}/requested-apartments", response_model=views_schema.RequestedApartmentsResponse)
async def requested_apartments(
    user_id: str,
    client: httpx.AsyncClient = Depends(get_client),
    tracker: RequestedTracker = Depends(get_tracker),
) -> views_schema.RequestedApartmentsResponse:
    """Return the apartments the user already has an open request for."""

    apartment_ids = await bookings_service.requested_apartments(client, user_id, tracker)
    return views_schema.RequestedApartmentsResponse(user_id=user_id, apartment_ids=apartment_ids)
