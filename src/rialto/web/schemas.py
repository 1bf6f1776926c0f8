"""Pydantic request/response schemas for the web API."""

from __future__ import annotations

from datetime import date, time

from pydantic import BaseModel, EmailStr, Field

from rialto.models import (
    ClosedDate,
    ContactMessage,
    MessageStatus,
    RecurringClosure,
    Reservation,
    ReservationStatus,
    SlotAvailability,
    TimeSlot,
)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    user_id: str


class StaffProfileResponse(BaseModel):
    user_id: str
    email: str | None = None


# ---------------------------------------------------------------------------
# Availability & reservations
# ---------------------------------------------------------------------------


class AvailabilityResponse(BaseModel):
    date: date
    slots: list[SlotAvailability]


class ReservationListResponse(BaseModel):
    reservations: list[Reservation]


class DayReservationsResponse(BaseModel):
    """Admin view of a day: the filtered rows plus their tallies."""

    reservations: list[Reservation]
    total: int
    counts: dict[str, int]
    total_guests: int


class CancelRequest(BaseModel):
    email: EmailStr


class StatusUpdateRequest(BaseModel):
    status: ReservationStatus


# ---------------------------------------------------------------------------
# Admin: catalog and closures
# ---------------------------------------------------------------------------


class TimeSlotCreateRequest(BaseModel):
    time: time
    max_capacity: int = Field(gt=0)
    is_lunch: bool = False


class TimeSlotUpdateRequest(BaseModel):
    is_active: bool | None = None
    max_capacity: int | None = Field(default=None, gt=0)


class TimeSlotListResponse(BaseModel):
    time_slots: list[TimeSlot]


class ClosedDateRequest(BaseModel):
    date: date


class ClosedDateListResponse(BaseModel):
    closed_dates: list[ClosedDate]


class RecurringClosureUpdateRequest(BaseModel):
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    start_time: time | None = None
    end_time: time | None = None
    active: bool | None = None


class RecurringClosureListResponse(BaseModel):
    recurring_closures: list[RecurringClosure]


# ---------------------------------------------------------------------------
# Contact inbox
# ---------------------------------------------------------------------------


class MessageListResponse(BaseModel):
    messages: list[ContactMessage]


class MessageStatusRequest(BaseModel):
    status: MessageStatus
