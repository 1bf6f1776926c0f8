"""Per-slot availability for a date.

Combines the active slot catalog, the day's active reservations, the
recurring closures for that weekday and the one-off closed dates. Nothing
is cached: every call reads the store, so closure and catalog edits apply
to the next query.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import date, time

from rialto.models import (
    ACTIVE_STATUSES,
    RecurringClosure,
    Reservation,
    SlotAvailability,
    TimeSlot,
)

logger = logging.getLogger(__name__)


def booked_guests(reservations: Iterable[Reservation]) -> dict[time, int]:
    """Sum guests per time over reservations that hold seats."""
    totals: dict[time, int] = defaultdict(int)
    for r in reservations:
        if r.is_active:
            totals[r.time] += r.guests
    return dict(totals)


def slot_availability(
    slot: TimeSlot,
    booked: int,
    closures: Iterable[RecurringClosure] = (),
    closed_date: bool = False,
) -> SlotAvailability:
    """Standing of one slot given its booked seat count and the day's closures."""
    recurring_closed = any(c.active and c.covers(slot.time) for c in closures)
    remaining = max(0, slot.max_capacity - booked)
    available = (
        slot.is_active
        and not closed_date
        and not recurring_closed
        and booked < slot.max_capacity
    )
    return SlotAvailability(
        id=slot.id,
        time=slot.time,
        available=available,
        remaining_capacity=remaining,
        max_capacity=slot.max_capacity,
        is_active=slot.is_active,
        is_lunch=slot.is_lunch,
        is_recurring_closed=recurring_closed,
        is_closed_date=closed_date,
    )


class AvailabilityCalculator:
    """Reads the store and computes availability for every active slot."""

    def __init__(self, store) -> None:
        self.store = store

    async def for_date(self, day: date) -> list[SlotAvailability]:
        slots, reservations, closures, closed = await asyncio.gather(
            self.store.list_time_slots(active_only=True),
            self.store.list_reservations_for_date(day, statuses=ACTIVE_STATUSES),
            self.store.list_recurring_closures(day_of_week=day.weekday(), active_only=True),
            self.store.is_closed_date(day),
        )
        booked = booked_guests(reservations)
        result = [slot_availability(s, booked.get(s.time, 0), closures, closed) for s in slots]
        logger.debug(
            "Availability for %s: %d/%d slots open%s",
            day,
            sum(1 for s in result if s.available),
            len(result),
            " (closed date)" if closed else "",
        )
        return result

    async def for_slot(self, day: date, slot_time: time) -> SlotAvailability | None:
        """Availability of the active slot at `slot_time`, or None if there is none."""
        for slot in await self.for_date(day):
            if slot.time == slot_time:
                return slot
        return None
