"""Booking endpoints of the marketplace backend."""
from __future__ import annotations

import httpx

from ..core.errors import NotFoundError
from ..core.http import request_json
from ..schemas.bookings import AvailabilityCheckParams, Booking, BookingCreate, BookingStatus

API_BASE_URL = "/api/v1/bookings"
NOT_FOUND_MESSAGE = "Booking not found"


async def create_booking(client: httpx.AsyncClient, payload: BookingCreate) -> Booking:
    """Submit a booking request; overlapping dates surface as ConflictError."""

    data = await request_json(client, "POST", API_BASE_URL, json=payload.model_dump(mode="json"))
    return Booking.model_validate(data)


async def update_status(
    client: httpx.AsyncClient, booking_id: str, status: BookingStatus
) -> Booking:
    data = await request_json(
        client,
        "PATCH",
        f"{API_BASE_URL}/{booking_id}/status",
        params={"status": status.value},
        not_found_message=NOT_FOUND_MESSAGE,
    )
    return Booking.model_validate(data)


async def list_for_apartment(client: httpx.AsyncClient, apartment_id: str) -> list[Booking]:
    return await _list(client, f"{API_BASE_URL}/apartment/{apartment_id}")


async def list_for_user(client: httpx.AsyncClient, user_id: str) -> list[Booking]:
    return await _list(client, f"{API_BASE_URL}/user/{user_id}")


async def check_availability(client: httpx.AsyncClient, params: AvailabilityCheckParams) -> str:
    """Return the backend's availability verdict text for the requested dates."""

    data = await request_json(
        client, "GET", f"{API_BASE_URL}/check-availability", params=params.model_dump(mode="json")
    )
    return str(data or "")


async def _list(
    client: httpx.AsyncClient, url: str, params: dict[str, object] | None = None
) -> list[Booking]:
    try:
        data = await request_json(client, "GET", url, params=params)
    except NotFoundError:
        return []
    return [Booking.model_validate(item) for item in data or []]
