"""Supabase-backed persistence for slots, reservations, closures and messages.

Every method issues one PostgREST request through the async Supabase client
and maps the returned rows onto the typed records in `rialto.models`. Raw
row dicts never leave this module. Transport and PostgREST failures are
raised as StoreError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, time
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from rialto.errors import StoreError
from rialto.models import (
    ClosedDate,
    ContactMessage,
    MessageStatus,
    RecurringClosure,
    Reservation,
    ReservationStatus,
    TimeSlot,
)

logger = logging.getLogger(__name__)

TIME_SLOTS = "time_slots"
RESERVATIONS = "reservations"
CLOSED_DATES = "closed_dates"
RECURRING_CLOSURES = "recurring_closures"
CONTACT_MESSAGES = "contact_messages"


class SupabaseStore:
    """Table helpers over a service-role Supabase client."""

    def __init__(self, client: AsyncClient) -> None:
        self._client = client

    async def _execute(self, query: Any, action: str) -> list[dict]:
        try:
            resp = await query.execute()
        except (APIError, httpx.HTTPError) as e:
            logger.warning("Store call failed (%s): %s", action, e)
            raise StoreError(f"Failed to {action}") from e
        return resp.data or []

    def _table(self, name: str):
        return self._client.table(name)

    # ------------------------------------------------------------------
    # Time slots
    # ------------------------------------------------------------------

    async def list_time_slots(self, *, active_only: bool = False) -> list[TimeSlot]:
        q = self._table(TIME_SLOTS).select("*")
        if active_only:
            q = q.eq("is_active", True)
        rows = await self._execute(q.order("time"), "fetch time slots")
        return [TimeSlot.model_validate(r) for r in rows]

    async def insert_time_slot(self, fields: dict) -> TimeSlot:
        rows = await self._execute(self._table(TIME_SLOTS).insert(fields), "create time slot")
        if not rows:
            raise StoreError("Failed to create time slot")
        return TimeSlot.model_validate(rows[0])

    async def update_time_slot(self, slot_id: str, fields: dict) -> TimeSlot | None:
        q = self._table(TIME_SLOTS).update(fields).eq("id", slot_id)
        rows = await self._execute(q, "update time slot")
        return TimeSlot.model_validate(rows[0]) if rows else None

    async def delete_time_slot(self, slot_id: str) -> bool:
        q = self._table(TIME_SLOTS).delete().eq("id", slot_id)
        return bool(await self._execute(q, "delete time slot"))

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    async def list_reservations_for_date(
        self,
        day: date,
        *,
        statuses: Iterable[ReservationStatus] | None = None,
    ) -> list[Reservation]:
        """Reservations on `day` ordered by time, optionally filtered by status."""
        q = self._table(RESERVATIONS).select("*").eq("date", day.isoformat())
        if statuses is not None:
            q = q.in_("status", sorted(s.value for s in statuses))
        rows = await self._execute(q.order("time"), "fetch reservations")
        return [Reservation.model_validate(r) for r in rows]

    async def list_reservations_for_email(self, email: str) -> list[Reservation]:
        q = (
            self._table(RESERVATIONS)
            .select("*")
            .ilike("email", _escape_like(email))
            .order("date")
            .order("time")
        )
        rows = await self._execute(q, "fetch reservations")
        return [Reservation.model_validate(r) for r in rows]

    async def get_reservation(self, reservation_id: str) -> Reservation | None:
        q = self._table(RESERVATIONS).select("*").eq("id", reservation_id).limit(1)
        rows = await self._execute(q, "fetch reservation")
        return Reservation.model_validate(rows[0]) if rows else None

    async def find_reservation(self, day: date, slot_time: time, email: str) -> Reservation | None:
        """Any reservation for (date, time, email), whatever its status."""
        q = (
            self._table(RESERVATIONS)
            .select("*")
            .eq("date", day.isoformat())
            .eq("time", slot_time.isoformat())
            .ilike("email", _escape_like(email))
            .limit(1)
        )
        rows = await self._execute(q, "verify reservation availability")
        return Reservation.model_validate(rows[0]) if rows else None

    async def insert_reservation(self, fields: dict) -> Reservation:
        rows = await self._execute(self._table(RESERVATIONS).insert(fields), "create reservation")
        if not rows:
            raise StoreError("Failed to create reservation")
        return Reservation.model_validate(rows[0])

    async def update_reservation(
        self, reservation_id: str, fields: dict, *, email: str | None = None
    ) -> Reservation | None:
        """Update a reservation; when `email` is given the row must also match it."""
        q = self._table(RESERVATIONS).update(fields).eq("id", reservation_id)
        if email is not None:
            q = q.eq("email", email)
        rows = await self._execute(q, "update reservation")
        return Reservation.model_validate(rows[0]) if rows else None

    # ------------------------------------------------------------------
    # Closed dates
    # ------------------------------------------------------------------

    async def list_closed_dates(self) -> list[ClosedDate]:
        q = self._table(CLOSED_DATES).select("*").order("date")
        rows = await self._execute(q, "fetch closed dates")
        return [ClosedDate.model_validate(r) for r in rows]

    async def is_closed_date(self, day: date) -> bool:
        q = self._table(CLOSED_DATES).select("date").eq("date", day.isoformat()).limit(1)
        return bool(await self._execute(q, "check closed dates"))

    async def insert_closed_date(self, day: date) -> ClosedDate:
        q = self._table(CLOSED_DATES).insert({"date": day.isoformat()})
        rows = await self._execute(q, "add closed date")
        if not rows:
            raise StoreError("Failed to add closed date")
        return ClosedDate.model_validate(rows[0])

    async def delete_closed_date(self, day: date) -> bool:
        q = self._table(CLOSED_DATES).delete().eq("date", day.isoformat())
        return bool(await self._execute(q, "remove closed date"))

    # ------------------------------------------------------------------
    # Recurring closures
    # ------------------------------------------------------------------

    async def list_recurring_closures(
        self, *, day_of_week: int | None = None, active_only: bool = False
    ) -> list[RecurringClosure]:
        q = self._table(RECURRING_CLOSURES).select("*")
        if day_of_week is not None:
            q = q.eq("day_of_week", day_of_week)
        if active_only:
            q = q.eq("active", True)
        rows = await self._execute(q.order("day_of_week"), "fetch recurring closures")
        return [RecurringClosure.model_validate(r) for r in rows]

    async def get_recurring_closure(self, closure_id: str) -> RecurringClosure | None:
        q = self._table(RECURRING_CLOSURES).select("*").eq("id", closure_id).limit(1)
        rows = await self._execute(q, "fetch recurring closure")
        return RecurringClosure.model_validate(rows[0]) if rows else None

    async def insert_recurring_closure(self, fields: dict) -> RecurringClosure:
        q = self._table(RECURRING_CLOSURES).insert(fields)
        rows = await self._execute(q, "create recurring closure")
        if not rows:
            raise StoreError("Failed to create recurring closure")
        return RecurringClosure.model_validate(rows[0])

    async def update_recurring_closure(self, closure_id: str, fields: dict) -> RecurringClosure | None:
        q = self._table(RECURRING_CLOSURES).update(fields).eq("id", closure_id)
        rows = await self._execute(q, "update recurring closure")
        return RecurringClosure.model_validate(rows[0]) if rows else None

    async def delete_recurring_closure(self, closure_id: str) -> bool:
        q = self._table(RECURRING_CLOSURES).delete().eq("id", closure_id)
        return bool(await self._execute(q, "delete recurring closure"))

    # ------------------------------------------------------------------
    # Contact messages
    # ------------------------------------------------------------------

    async def list_contact_messages(self, *, status: MessageStatus | None = None) -> list[ContactMessage]:
        q = self._table(CONTACT_MESSAGES).select("*")
        if status is not None:
            q = q.eq("status", status.value)
        rows = await self._execute(q.order("created_at", desc=True), "fetch messages")
        return [ContactMessage.model_validate(r) for r in rows]

    async def insert_contact_message(self, fields: dict) -> ContactMessage:
        rows = await self._execute(self._table(CONTACT_MESSAGES).insert(fields), "send message")
        if not rows:
            raise StoreError("Failed to send message")
        return ContactMessage.model_validate(rows[0])

    async def update_contact_message(self, message_id: str, fields: dict) -> ContactMessage | None:
        q = self._table(CONTACT_MESSAGES).update(fields).eq("id", message_id)
        rows = await self._execute(q, "update message status")
        return ContactMessage.model_validate(rows[0]) if rows else None


def _escape_like(value: str) -> str:
    """Literal pattern for ilike: an exact, case-insensitive match."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
