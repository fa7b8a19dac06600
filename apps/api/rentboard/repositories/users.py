"""User and profile endpoints of the marketplace backend."""
from __future__ import annotations

from typing import Any

import httpx

from ..core.http import request_json
from ..schemas.users import UserProfile

API_BASE_URL = "/api/v1"
NOT_FOUND_MESSAGE = "Profile not found"


async def get_profile(client: httpx.AsyncClient) -> UserProfile:
    """Return the profile of the user the client is authenticated as."""

    data = await request_json(
        client, "GET", f"{API_BASE_URL}/users/me/profile", not_found_message=NOT_FOUND_MESSAGE
    )
    return UserProfile.model_validate(data)


async def update_profile(client: httpx.AsyncClient, patch: dict[str, Any]) -> UserProfile:
    data = await request_json(
        client,
        "PATCH",
        f"{API_BASE_URL}/users/me/profile",
        json=patch,
        not_found_message=NOT_FOUND_MESSAGE,
    )
    return UserProfile.model_validate(data)
