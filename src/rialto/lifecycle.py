"""Reservation creation, status changes and guest cancellation.

Create re-reads live availability before inserting. The read and the
insert are two separate store requests, so concurrent creates for the same
slot could both pass the capacity check. Within one process they are
serialized per (date, time) by SlotLocks; across processes the race remains.
"""

from __future__ import annotations

import asyncio
import calendar
import logging
from collections.abc import Callable, Iterable
from contextlib import asynccontextmanager
from datetime import date, time
from typing import Any

from rialto.availability import AvailabilityCalculator
from rialto.config import BookingPolicy
from rialto.errors import (
    CapacityError,
    DuplicateError,
    InvalidTransitionError,
    NotFoundError,
    NotificationError,
    UnavailableError,
    ValidationError,
)
from rialto.models import Reservation, ReservationRequest, ReservationStatus, parse_model
from rialto.notifications import ConfirmationNotifier

logger = logging.getLogger(__name__)


def add_months(day: date, months: int) -> date:
    """Same day `months` later, clamped to the end of shorter months."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


class SlotLocks:
    """One asyncio.Lock per (date, time), dropped once nobody holds or awaits it."""

    def __init__(self) -> None:
        self._locks: dict[tuple[date, time], asyncio.Lock] = {}
        self._users: dict[tuple[date, time], int] = {}

    @asynccontextmanager
    async def hold(self, key: tuple[date, time]):
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class ReservationService:
    """Guest and staff operations on reservations."""

    def __init__(
        self,
        store,
        *,
        calculator: AvailabilityCalculator | None = None,
        notifier: ConfirmationNotifier | None = None,
        policy: BookingPolicy | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.calculator = calculator or AvailabilityCalculator(store)
        self.notifier = notifier
        self.policy = policy or BookingPolicy()
        self._today = today
        self._locks = SlotLocks()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def check_policy(self, request: ReservationRequest) -> None:
        """Booking window and party size limits."""
        today = self._today()
        last_day = add_months(today, self.policy.advance_months)
        if request.date < today:
            raise ValidationError("Reservation date cannot be in the past")
        if request.date > last_day:
            raise ValidationError(
                f"Reservations can be made up to {self.policy.advance_months} months in advance"
            )
        if not self.policy.min_guests <= request.guests <= self.policy.max_guests:
            raise ValidationError(
                f"Party size must be between {self.policy.min_guests} and {self.policy.max_guests} guests"
            )

    async def create(self, data: ReservationRequest | dict[str, Any]) -> Reservation:
        """Validate, re-check the slot, reject duplicates, insert as pending, notify."""
        request = parse_model(ReservationRequest, data)
        self.check_policy(request)

        async with self._locks.hold((request.date, request.time)):
            slot = await self.calculator.for_slot(request.date, request.time)
            if slot is None:
                raise NotFoundError("Selected time slot not found")
            if not slot.available:
                raise UnavailableError("Selected time slot is no longer available")
            if slot.remaining_capacity < request.guests:
                raise CapacityError(
                    f"Not enough capacity for {request.guests} guests. "
                    f"Only {slot.remaining_capacity} spots remaining."
                )

            # Blocks rebooking even when the earlier reservation was cancelled.
            existing = await self.store.find_reservation(request.date, request.time, request.email)
            if existing is not None:
                raise DuplicateError("You already have a reservation for this date and time")

            reservation = await self.store.insert_reservation(request.to_row())

        logger.info(
            "Reservation %s created: %s %s, %d guests",
            reservation.id,
            reservation.date,
            reservation.time.strftime("%H:%M"),
            reservation.guests,
        )
        await self._notify(reservation)
        return reservation

    async def _notify(self, reservation: Reservation) -> None:
        if self.notifier is None:
            return
        # The row is already stored; nothing raised here may reach the guest.
        try:
            await self.notifier.send_confirmation(reservation)
        except NotificationError as e:
            logger.warning("Failed to send confirmation email for %s: %s", reservation.id, e)
        except Exception:
            logger.warning("Confirmation email for %s crashed", reservation.id, exc_info=True)

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    async def update_status(self, reservation_id: str, status: ReservationStatus | str) -> Reservation:
        """Staff status change, enforced against the transition table."""
        new_status = _parse_status(status)

        current = await self.store.get_reservation(reservation_id)
        if current is None:
            raise NotFoundError("Reservation not found")
        if current.status == new_status:
            return current
        if not current.status.can_transition_to(new_status):
            raise InvalidTransitionError(
                f"Cannot change reservation from {current.status.value} to {new_status.value}"
            )

        updated = await self.store.update_reservation(reservation_id, {"status": new_status.value})
        if updated is None:
            raise NotFoundError("Reservation not found")
        logger.info("Reservation %s: %s -> %s", reservation_id, current.status.value, new_status.value)
        return updated

    async def cancel(self, reservation_id: str, email: str) -> Reservation:
        """Guest cancellation; only the email that booked may cancel."""
        email = email.strip().lower()
        current = await self.store.get_reservation(reservation_id)
        if current is None or current.email.lower() != email:
            raise NotFoundError("Reservation not found")
        if current.status == ReservationStatus.CANCELLED:
            return current
        if not current.status.can_transition_to(ReservationStatus.CANCELLED):
            raise InvalidTransitionError(f"Cannot cancel a {current.status.value} reservation")

        updated = await self.store.update_reservation(
            reservation_id,
            {"status": ReservationStatus.CANCELLED.value},
            email=current.email,
        )
        if updated is None:
            raise NotFoundError("Reservation not found")
        logger.info("Reservation %s cancelled by guest", reservation_id)
        return updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get(self, reservation_id: str) -> Reservation:
        reservation = await self.store.get_reservation(reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation not found")
        return reservation

    async def list_for_date(
        self,
        day: date,
        *,
        statuses: Iterable[ReservationStatus | str] | None = None,
        search: str | None = None,
    ) -> list[Reservation]:
        """
        Reservations of a day ordered by time.

        `statuses` keeps only those states (empty or None means all);
        `search` matches name, email or phone, case-insensitively.
        """
        wanted = [_parse_status(s) for s in statuses] if statuses else None
        rows = await self.store.list_reservations_for_date(day, statuses=wanted)
        if search and search.strip():
            rows = [r for r in rows if r.matches(search.strip())]
        return rows

    async def list_for_email(self, email: str) -> list[Reservation]:
        """A guest's reservations ordered by date, then time."""
        return await self.store.list_reservations_for_email(email.strip().lower())


def summarize(reservations: Iterable[Reservation]) -> dict[str, Any]:
    """Per-status counts, row total and guest total for a list of reservations."""
    rows = list(reservations)
    counts = {s.value: 0 for s in ReservationStatus}
    for r in rows:
        counts[r.status.value] += 1
    return {"total": len(rows), "counts": counts, "total_guests": sum(r.guests for r in rows)}


def _parse_status(status: ReservationStatus | str) -> ReservationStatus:
    try:
        return ReservationStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown reservation status: {status}") from None
