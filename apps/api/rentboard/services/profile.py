"""Profile edit kind: only changed fields are sent back to the backend."""
from __future__ import annotations

from typing import Any

import httpx

from ..repositories import users as users_repo
from ..schemas.users import UserProfile
from .edit_sessions import EditKind
from .validation import Compare, NumericRange, Required, ValidationSchema

PROFILE_SCHEMA = ValidationSchema(
    rules=(
        Required("name", "Name is required"),
        Required("surname", "Surname is required"),
        NumericRange("budget_range.min", minimum=0, message="Minimum value must be 0 or greater"),
        NumericRange("budget_range.max", minimum=0, exclusive_minimum=True,
                     message="Maximum value must be greater than 0"),
        Compare("budget_range.max", ">=", "budget_range.min",
                "Maximum value must be greater than minimum value"),
    ),
    model=UserProfile,
)

READ_ONLY_FIELDS = (
    "userId",
    "email",
    "document_verified",
    "is_verified_landlord",
    "createdAt",
    "updatedAt",
    "last_login",
)


async def _load(client: httpx.AsyncClient, record_id: str | None) -> UserProfile:
    return await users_repo.get_profile(client)


async def _write(client: httpx.AsyncClient, record_id: str | None, payload: dict[str, Any]) -> UserProfile:
    return await users_repo.update_profile(client, payload)


PROFILE_EDIT = EditKind(
    name="profile",
    schema=PROFILE_SCHEMA,
    load=_load,
    write=_write,
    per_caller=True,
    changes_only=True,
    read_only_fields=READ_ONLY_FIELDS,
    unordered_fields=("language_preferences",),
    success_message="Profile updated successfully",
    not_found_message="Profile not found. Please contact support.",
)
