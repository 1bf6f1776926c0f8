"""Pydantic models for store rows, requests and computed availability."""

from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from rialto.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


# --- Reservation status state machine ---


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    def can_transition_to(self, new: ReservationStatus) -> bool:
        return new in ALLOWED_TRANSITIONS[self]

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.COMPLETED, ReservationStatus.CANCELLED}),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.COMPLETED: frozenset(),
}

# Reservations in these states count against slot capacity.
ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})


class MessageStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"
    REPLIED = "replied"
    ARCHIVED = "archived"


class MessageSubject(str, Enum):
    RESERVATION = "reservation"
    EVENT = "event"
    FEEDBACK = "feedback"
    OTHER = "other"


# --- Store rows ---


class TimeSlot(BaseModel):
    """Bookable time of day with a seat ceiling."""

    id: str
    time: time
    max_capacity: int = Field(gt=0)
    is_lunch: bool = False
    is_active: bool = True
    created_at: datetime | None = None


class Reservation(BaseModel):
    id: str
    date: date
    time: time
    guests: int
    name: str
    email: str
    phone: str = ""
    occasion: str | None = None
    special_requests: str | None = None
    marketing_consent: bool = False
    status: ReservationStatus = ReservationStatus.PENDING
    created_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def matches(self, term: str) -> bool:
        term = term.lower()
        return any(term in field.lower() for field in (self.name, self.email, self.phone))


class ClosedDate(BaseModel):
    date: date
    id: str | None = None
    created_at: datetime | None = None


class RecurringClosure(BaseModel):
    """Weekly time window with no bookings. day_of_week: Monday=0 ... Sunday=6."""

    id: str
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    active: bool = True
    created_at: datetime | None = None

    def covers(self, slot_time: time) -> bool:
        return self.start_time <= slot_time <= self.end_time


class ContactMessage(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    subject: MessageSubject = MessageSubject.OTHER
    message: str
    marketing_consent: bool = False
    status: MessageStatus = MessageStatus.UNREAD
    created_at: datetime | None = None

    def matches(self, term: str) -> bool:
        term = term.lower()
        haystack = (self.first_name, self.last_name, self.email, self.subject.value, self.message)
        return any(term in field.lower() for field in haystack)


# --- Computed ---


class SlotAvailability(BaseModel):
    """One slot's standing on a given date. Serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    time: time
    available: bool
    remaining_capacity: int
    max_capacity: int
    is_active: bool
    is_lunch: bool
    is_recurring_closed: bool = False
    is_closed_date: bool = False


# --- Requests ---


class ReservationRequest(BaseModel):
    """Guest-facing booking form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    date: date
    time: time
    guests: int = Field(ge=1, le=20)
    name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    phone: str = Field(min_length=1, max_length=32)
    occasion: str | None = None
    special_requests: str | None = None
    marketing_consent: bool = False
    privacy_consent: bool = Field(default=False, validate_default=True)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("occasion", "special_requests")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("privacy_consent")
    @classmethod
    def _require_privacy_consent(cls, v: bool) -> bool:
        if not v:
            raise ValueError("Please accept the privacy policy to continue")
        return v

    def to_row(self) -> dict[str, Any]:
        """Insert payload; privacy consent is collected but not stored."""
        row = self.model_dump(mode="json", exclude={"privacy_consent"})
        row["status"] = ReservationStatus.PENDING.value
        return row


class ContactMessageRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str = Field(min_length=1, max_length=120)
    last_name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    subject: MessageSubject = MessageSubject.RESERVATION
    message: str = Field(min_length=1, max_length=5000)
    marketing_consent: bool = False
    privacy_consent: bool = Field(default=False, validate_default=True)

    @field_validator("privacy_consent")
    @classmethod
    def _require_privacy_consent(cls, v: bool) -> bool:
        if not v:
            raise ValueError("Please accept the privacy policy to continue")
        return v

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump(mode="json", exclude={"privacy_consent"})
        row["status"] = MessageStatus.UNREAD.value
        return row


def parse_model(model: type[ModelT], data: ModelT | dict[str, Any]) -> ModelT:
    """Validate raw input into `model`, raising our ValidationError on failure."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e


def _describe(error: PydanticValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        msg = err["msg"].removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)
