"""Apartment endpoints of the marketplace backend."""
from __future__ import annotations

from typing import Any

import httpx

from ..core.errors import NotFoundError
from ..core.http import request_json
from ..schemas.apartments import (
    Apartment,
    ApartmentSearchParams,
    AvailabilitySearchParams,
    NearbySearchParams,
    PaginationParams,
)

API_BASE_URL = "/api/v1/apartments"
NOT_FOUND_MESSAGE = "Apartment not found"


async def get_by_id(client: httpx.AsyncClient, apartment_id: str) -> Apartment:
    """Return a single apartment; raises NotFoundError when it does not exist."""

    data = await request_json(
        client, "GET", f"{API_BASE_URL}/{apartment_id}", not_found_message=NOT_FOUND_MESSAGE
    )
    return Apartment.model_validate(data)


async def update_apartment(
    client: httpx.AsyncClient, apartment_id: str, patch: dict[str, Any]
) -> Apartment:
    """Patch an apartment and return the authoritative post-write record."""

    data = await request_json(
        client,
        "PATCH",
        f"{API_BASE_URL}/{apartment_id}",
        json=patch,
        not_found_message=NOT_FOUND_MESSAGE,
    )
    return Apartment.model_validate(data)


async def list_by_owner(client: httpx.AsyncClient, owner_id: str) -> list[Apartment]:
    """Return every apartment published by the owner."""

    return await _list(client, f"{API_BASE_URL}/owner/{owner_id}")


async def search(client: httpx.AsyncClient, params: ApartmentSearchParams) -> list[Apartment]:
    return await _list(client, f"{API_BASE_URL}/search", params.model_dump(mode="json"))


async def list_nearby(client: httpx.AsyncClient, params: NearbySearchParams) -> list[Apartment]:
    return await _list(client, f"{API_BASE_URL}/nearby", params.model_dump(mode="json"))


async def list_available(
    client: httpx.AsyncClient, params: AvailabilitySearchParams
) -> list[Apartment]:
    return await _list(client, f"{API_BASE_URL}/available", params.model_dump(mode="json"))


async def list_promoted(client: httpx.AsyncClient, params: PaginationParams) -> list[Apartment]:
    return await _list(client, f"{API_BASE_URL}/promoted", params.model_dump(mode="json"))


async def _list(
    client: httpx.AsyncClient, url: str, params: dict[str, Any] | None = None
) -> list[Apartment]:
    """Collection endpoints answer 404 when nothing matches; that is an empty page."""

    try:
        data = await request_json(client, "GET", url, params=params)
    except NotFoundError:
        return []
    return [Apartment.model_validate(item) for item in data or []]
