"""Tests for backend fetchers and HTTP error mapping."""
from __future__ import annotations

import json

import httpx
import pytest

from rentboard.core.errors import (
    ApiError,
    AuthorizationError,
    ConflictError,
    ErrorKind,
    NetworkError,
    NotFoundError,
    ServerError,
    ValidationError,
    classify,
    is_retryable,
)
from rentboard.core.http import caller_scope, create_client
from rentboard.repositories import apartments as apartments_repo
from rentboard.repositories import bookings as bookings_repo
from rentboard.repositories import users as users_repo
from rentboard.schemas.apartments import ApartmentSearchParams
from rentboard.schemas.bookings import AvailabilityCheckParams, BookingCreate, BookingStatus


def _booking(**overrides) -> dict:
    data = {
        "bookingId": "b1",
        "apartmentId": "1",
        "userId": "u1",
        "check_in_date": "2025-06-01",
        "check_out_date": "2025-06-10",
        "status": "pending",
    }
    data.update(overrides)
    return data


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status_code", "body", "expected"),
    [
        (401, {"detail": "Not authenticated"}, AuthorizationError),
        (403, {}, AuthorizationError),
        (409, {"detail": "Booking dates conflict"}, ConflictError),
        (422, {"detail": [{"loc": ["body", "price_per_month"], "msg": "must be positive"}]}, ValidationError),
        (500, {}, ServerError),
        (418, {"detail": "teapot"}, ApiError),
    ],
)
async def test_status_codes_map_to_error_kinds(backend, status_code, body, expected) -> None:
    async with backend(lambda request: httpx.Response(status_code, json=body)) as client:
        with pytest.raises(expected) as info:
            await apartments_repo.update_apartment(client, "1", {"price_per_month": -1})

    assert type(info.value) is expected


@pytest.mark.asyncio
async def test_unprocessable_entity_carries_field_messages(backend) -> None:
    body = {"detail": [{"loc": ["body", "price_per_month"], "msg": "must be positive"}]}

    async with backend(lambda request: httpx.Response(422, json=body)) as client:
        with pytest.raises(ValidationError) as info:
            await apartments_repo.update_apartment(client, "1", {"price_per_month": -1})

    assert info.value.errors == ["price_per_month: must be positive"]
    assert classify(info.value) is ErrorKind.VALIDATION


@pytest.mark.asyncio
async def test_missing_record_is_not_found(backend) -> None:
    async with backend(lambda request: httpx.Response(404, json={"detail": "nope"})) as client:
        with pytest.raises(NotFoundError) as info:
            await apartments_repo.get_by_id(client, "404")

    assert info.value.message == "Apartment not found"
    assert is_retryable(info.value) is False


@pytest.mark.asyncio
async def test_transport_failure_is_network_error(backend) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with backend(handler) as client:
        with pytest.raises(NetworkError) as info:
            await users_repo.get_profile(client)

    assert info.value.message == "No response received from server"
    assert is_retryable(info.value)


@pytest.mark.asyncio
async def test_collection_404_reads_as_empty(backend) -> None:
    async with backend(lambda request: httpx.Response(404)) as client:
        assert await apartments_repo.list_by_owner(client, "owner-1") == []
        assert await bookings_repo.list_for_apartment(client, "1") == []


@pytest.mark.asyncio
async def test_search_drops_unset_params(backend, demo_apartments) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=demo_apartments[:1])

    async with backend(handler) as client:
        result = await apartments_repo.search(client, ApartmentSearchParams(location="Yesil"))

    assert [apartment.apartmentId for apartment in result] == ["1"]
    assert seen[0].url.path == "/api/v1/apartments/search"
    assert seen[0].url.params["location"] == "Yesil"
    assert "min_price" not in seen[0].url.params


@pytest.mark.asyncio
async def test_update_apartment_patches_and_parses(backend, demo_apartments) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={**demo_apartments[0], "price_per_month": 99000})

    async with backend(handler) as client:
        apartment = await apartments_repo.update_apartment(client, "1", {"price_per_month": 99000})

    assert seen[0].method == "PATCH"
    assert seen[0].url.path == "/api/v1/apartments/1"
    assert json.loads(seen[0].content) == {"price_per_month": 99000}
    assert apartment.price_per_month == 99000


@pytest.mark.asyncio
async def test_create_booking_conflict(backend) -> None:
    async with backend(lambda request: httpx.Response(409, json={"detail": "Booking dates conflict"})) as client:
        with pytest.raises(ConflictError) as info:
            await bookings_repo.create_booking(
                client,
                BookingCreate(apartmentId="1", check_in_date="2025-06-05", check_out_date="2025-06-12"),
            )

    assert info.value.message == "Booking dates conflict"


@pytest.mark.asyncio
async def test_update_status_sends_query_param(backend) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_booking(status="accepted"))

    async with backend(handler) as client:
        booking = await bookings_repo.update_status(client, "b1", BookingStatus.ACCEPTED)

    assert seen[0].url.path == "/api/v1/bookings/b1/status"
    assert seen[0].url.params["status"] == "accepted"
    assert booking.status is BookingStatus.ACCEPTED


@pytest.mark.asyncio
async def test_client_sends_bearer_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"name": "Aruzhan"})

    transport = httpx.MockTransport(handler)
    async with create_client(base_url="http://backend.test", token="t0k", transport=transport) as client:
        profile = await users_repo.get_profile(client)

    assert seen[0].headers["authorization"] == "Bearer t0k"
    assert profile.name == "Aruzhan"


@pytest.mark.asyncio
async def test_caller_scope_follows_credentials() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200))
    async with (
        create_client(base_url="http://backend.test", token="alice", transport=transport) as alice,
        create_client(base_url="http://backend.test", token="bob", transport=transport) as bob,
        create_client(base_url="http://backend.test", transport=transport) as anonymous,
    ):
        assert caller_scope(alice) != caller_scope(bob)
        assert len(caller_scope(alice)) == 16
        assert caller_scope(anonymous) is None


@pytest.mark.asyncio
async def test_check_availability_returns_verdict_text(backend) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json="Apartment is available")

    async with backend(handler) as client:
        verdict = await bookings_repo.check_availability(
            client,
            AvailabilityCheckParams(apartment_id="1", check_in="2025-06-01", check_out="2025-06-10"),
        )

    assert verdict == "Apartment is available"
    assert seen[0].url.path == "/api/v1/bookings/check-availability"
    assert seen[0].url.params["apartment_id"] == "1"
    assert seen[0].url.params["check_out"] == "2025-06-10"
