"""Shared test fixtures."""

import uuid
from datetime import date, datetime, time, timezone

import pytest

from rialto.models import (
    ClosedDate,
    ContactMessage,
    RecurringClosure,
    Reservation,
    ReservationStatus,
    TimeSlot,
)

# Monday. Dec 3 is a Wednesday, Dec 25 a Thursday.
TODAY = date(2025, 12, 1)


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryStore:
    """Dict-backed stand-in for SupabaseStore with the same async surface."""

    def __init__(self):
        self.time_slots: dict[str, TimeSlot] = {}
        self.reservations: dict[str, Reservation] = {}
        self.closed_dates: dict[date, ClosedDate] = {}
        self.recurring_closures: dict[str, RecurringClosure] = {}
        self.contact_messages: dict[str, ContactMessage] = {}
        self.inserted_reservations = 0

    # --- seeding helpers (sync) ---

    def add_slot(self, at: str = "19:00", max_capacity: int = 10, is_lunch: bool = False,
                 is_active: bool = True) -> TimeSlot:
        slot = TimeSlot(id=_new_id(), time=time.fromisoformat(at), max_capacity=max_capacity,
                        is_lunch=is_lunch, is_active=is_active)
        self.time_slots[slot.id] = slot
        return slot

    def add_reservation(self, day: date, at: str = "19:00", guests: int = 2,
                        email: str = "guest@example.com", status: str = "confirmed",
                        name: str = "Guest") -> Reservation:
        r = Reservation(id=_new_id(), date=day, time=time.fromisoformat(at), guests=guests,
                        name=name, email=email, phone="+39 041 000000",
                        status=ReservationStatus(status), created_at=_now())
        self.reservations[r.id] = r
        return r

    def add_closed_date(self, day: date) -> ClosedDate:
        closed = ClosedDate(id=_new_id(), date=day)
        self.closed_dates[day] = closed
        return closed

    def add_closure(self, day_of_week: int, start: str = "00:00", end: str = "23:59",
                    active: bool = True) -> RecurringClosure:
        closure = RecurringClosure(id=_new_id(), day_of_week=day_of_week,
                                   start_time=time.fromisoformat(start),
                                   end_time=time.fromisoformat(end), active=active)
        self.recurring_closures[closure.id] = closure
        return closure

    def add_message(self, **fields) -> ContactMessage:
        data = {"first_name": "Marco", "last_name": "Polo", "email": "marco@example.com",
                "subject": "event", "message": "Table for a party?", "created_at": _now()}
        data.update(fields)
        msg = ContactMessage(id=_new_id(), **data)
        self.contact_messages[msg.id] = msg
        return msg

    # --- time slots ---

    async def list_time_slots(self, *, active_only=False):
        slots = [s for s in self.time_slots.values() if s.is_active or not active_only]
        return sorted(slots, key=lambda s: s.time)

    async def insert_time_slot(self, fields):
        slot = TimeSlot.model_validate({**fields, "id": _new_id(), "created_at": _now()})
        self.time_slots[slot.id] = slot
        return slot

    async def update_time_slot(self, slot_id, fields):
        if slot_id not in self.time_slots:
            return None
        slot = TimeSlot.model_validate({**self.time_slots[slot_id].model_dump(), **fields})
        self.time_slots[slot_id] = slot
        return slot

    async def delete_time_slot(self, slot_id):
        return self.time_slots.pop(slot_id, None) is not None

    # --- reservations ---

    async def list_reservations_for_date(self, day, *, statuses=None):
        rows = [r for r in self.reservations.values() if r.date == day]
        if statuses is not None:
            allowed = set(statuses)
            rows = [r for r in rows if r.status in allowed]
        return sorted(rows, key=lambda r: r.time)

    async def list_reservations_for_email(self, email):
        rows = [r for r in self.reservations.values() if r.email.lower() == email.lower()]
        return sorted(rows, key=lambda r: (r.date, r.time))

    async def get_reservation(self, reservation_id):
        return self.reservations.get(reservation_id)

    async def find_reservation(self, day, slot_time, email):
        return next(
            (r for r in self.reservations.values()
             if r.date == day and r.time == slot_time and r.email.lower() == email.lower()),
            None,
        )

    async def insert_reservation(self, fields):
        r = Reservation.model_validate({**fields, "id": _new_id(), "created_at": _now()})
        self.reservations[r.id] = r
        self.inserted_reservations += 1
        return r

    async def update_reservation(self, reservation_id, fields, *, email=None):
        current = self.reservations.get(reservation_id)
        if current is None or (email is not None and current.email != email):
            return None
        updated = Reservation.model_validate({**current.model_dump(), **fields})
        self.reservations[reservation_id] = updated
        return updated

    # --- closed dates ---

    async def list_closed_dates(self):
        return sorted(self.closed_dates.values(), key=lambda c: c.date)

    async def is_closed_date(self, day):
        return day in self.closed_dates

    async def insert_closed_date(self, day):
        return self.add_closed_date(day)

    async def delete_closed_date(self, day):
        return self.closed_dates.pop(day, None) is not None

    # --- recurring closures ---

    async def list_recurring_closures(self, *, day_of_week=None, active_only=False):
        rows = [
            c for c in self.recurring_closures.values()
            if (day_of_week is None or c.day_of_week == day_of_week) and (c.active or not active_only)
        ]
        return sorted(rows, key=lambda c: c.day_of_week)

    async def get_recurring_closure(self, closure_id):
        return self.recurring_closures.get(closure_id)

    async def insert_recurring_closure(self, fields):
        closure = RecurringClosure.model_validate({**fields, "id": _new_id(), "created_at": _now()})
        self.recurring_closures[closure.id] = closure
        return closure

    async def update_recurring_closure(self, closure_id, fields):
        if closure_id not in self.recurring_closures:
            return None
        closure = RecurringClosure.model_validate(
            {**self.recurring_closures[closure_id].model_dump(), **fields}
        )
        self.recurring_closures[closure_id] = closure
        return closure

    async def delete_recurring_closure(self, closure_id):
        return self.recurring_closures.pop(closure_id, None) is not None

    # --- contact messages ---

    async def list_contact_messages(self, *, status=None):
        rows = [m for m in self.contact_messages.values() if status is None or m.status == status]
        return sorted(rows, key=lambda m: m.created_at, reverse=True)

    async def insert_contact_message(self, fields):
        msg = ContactMessage.model_validate({**fields, "id": _new_id(), "created_at": _now()})
        self.contact_messages[msg.id] = msg
        return msg

    async def update_contact_message(self, message_id, fields):
        if message_id not in self.contact_messages:
            return None
        msg = ContactMessage.model_validate({**self.contact_messages[message_id].model_dump(), **fields})
        self.contact_messages[message_id] = msg
        return msg


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def booking_request():
    """A valid booking form for 19:00 on Dec 10, 2025."""
    return {
        "date": "2025-12-10",
        "time": "19:00",
        "guests": 2,
        "name": "Giulia Rossi",
        "email": "Giulia@Example.com",
        "phone": "+39 041 5200000",
        "occasion": "Anniversary",
        "special_requests": "",
        "marketing_consent": True,
        "privacy_consent": True,
    }


@pytest.fixture
def sample_relay_success():
    """A realistic relay /send-email response."""
    return {"success": True, "response": {"id": "49a3999c-0ce1-4ea6-ab68-afcd6dc2e794"}}
