"""User profile records exchanged with ``/api/v1/users``."""
from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class BudgetRange(BaseModel):
    min: int | None = None
    max: int | None = None


class UserProfile(BaseModel):
    """Profile of the signed-in user; the password never leaves the backend."""

    model_config = ConfigDict(extra="allow")

    userId: str | None = None
    name: str = ""
    surname: str = ""
    email: str = ""
    gender: str = ""
    birth_date: date | None = None
    phone: str = ""
    nationality: str = ""
    country: str = ""
    city: str = ""
    bio: str = ""
    university: str = ""
    studentId_number: str = ""
    group: str = ""
    roommate_preferences: str = ""
    language_preferences: list[str] = Field(default_factory=list)
    budget_range: BudgetRange = Field(default_factory=BudgetRange)
    avatar_url: str = ""
    id_document_url: str = ""
    document_verified: bool = False
    social_links: dict[str, str] = Field(default_factory=dict)
    is_landlord: bool = False
    is_verified_landlord: bool = False
    createdAt: datetime | None = None
    updatedAt: datetime | None = None
    last_login: datetime | None = None
