"""Apartment records and search parameters exchanged with the backend."""
from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class Address(BaseModel):
    street: str = ""
    house_number: str = ""
    apartment_number: str = ""
    entrance: str = ""
    has_intercom: bool = False
    landmark: str = ""


class Apartment(BaseModel):
    """Listing as returned by ``/api/v1/apartments``."""

    model_config = ConfigDict(extra="allow")

    apartmentId: str | None = None
    ownerId: str | None = None
    apartment_name: str = ""
    description: str = ""
    address: Address = Field(default_factory=Address)
    district_name: str = ""
    latitude: float | None = None
    longitude: float | None = None
    price_per_month: int = Field(default=0, ge=0)
    area: float = Field(default=0, ge=0)
    kitchen_area: float | None = Field(default=None, ge=0)
    floor: int | None = None
    number_of_rooms: int = Field(default=1, ge=0)
    max_users: int = Field(default=1, ge=1)
    available_from: date | None = None
    available_until: date | None = None
    university_nearby: str = ""
    pictures: list[str] = Field(default_factory=list)
    is_promoted: bool = False
    is_pet_allowed: bool = False
    rental_type: str = ""
    roommate_preferences: str = ""
    included_utilities: list[str] = Field(default_factory=list)
    rules: list[str] = Field(default_factory=list)
    contact_phone: str = ""
    contact_telegram: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_active: bool = True


class PaginationParams(BaseModel):
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=10, ge=1, le=100)


class ApartmentSearchParams(PaginationParams):
    min_price: int | None = Field(default=None, ge=0)
    max_price: int | None = Field(default=None, ge=0)
    location: str | None = None
    university: str | None = None
    room_type: str | None = None


class NearbySearchParams(PaginationParams):
    latitude: float
    longitude: float
    radius_km: float | None = Field(default=None, gt=0)


class AvailabilitySearchParams(PaginationParams):
    check_in: date
    check_out: date


class ApartmentSearchCriteria(BaseModel):
    """Everything the public search form can send; the filled-in fields pick the backend query."""

    min_price: int | None = Field(default=None, ge=0)
    max_price: int | None = Field(default=None, ge=0)
    location: str | None = None
    university: str | None = None
    room_type: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    radius_km: float | None = Field(default=None, gt=0)
    check_in: date | None = None
    check_out: date | None = None
