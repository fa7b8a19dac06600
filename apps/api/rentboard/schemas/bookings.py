"""Booking records exchanged with ``/api/v1/bookings``."""
from __future__ import annotations

from datetime import date, datetime
import enum

from pydantic import BaseModel, ConfigDict, Field


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Booking(BaseModel):
    model_config = ConfigDict(extra="allow")

    bookingId: str | None = None
    apartmentId: str
    userId: str | None = None
    check_in_date: date
    check_out_date: date
    message: str = ""
    status: BookingStatus = BookingStatus.PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BookingCreate(BaseModel):
    """Draft booking request submitted by a tenant."""

    apartmentId: str
    check_in_date: date
    check_out_date: date
    message: str = Field(default="", max_length=1000)


class AvailabilityCheckParams(BaseModel):
    apartment_id: str
    check_in: date
    check_out: date
