"""Administration of one-off closed dates and weekly recurring closures."""

from __future__ import annotations

import logging
from datetime import date, time
from typing import Any

from pydantic import BaseModel, Field

from rialto.errors import DuplicateError, NotFoundError, ValidationError
from rialto.models import ClosedDate, RecurringClosure, parse_model

logger = logging.getLogger(__name__)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class RecurringClosureFields(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    active: bool = True


def _check_window(start: time, end: time) -> None:
    if start > end:
        raise ValidationError("Closure start time must not be after its end time")


class ClosureManager:
    def __init__(self, store) -> None:
        self.store = store

    # --- Closed dates ---

    async def list_closed_dates(self) -> list[ClosedDate]:
        return await self.store.list_closed_dates()

    async def add_closed_date(self, day: date) -> ClosedDate:
        if await self.store.is_closed_date(day):
            raise DuplicateError(f"{day.isoformat()} is already closed")
        closed = await self.store.insert_closed_date(day)
        logger.info("Closed date added: %s", day)
        return closed

    async def remove_closed_date(self, day: date) -> None:
        if not await self.store.delete_closed_date(day):
            raise NotFoundError(f"{day.isoformat()} is not a closed date")
        logger.info("Closed date removed: %s", day)

    # --- Recurring closures ---

    async def list_recurring_closures(self) -> list[RecurringClosure]:
        return await self.store.list_recurring_closures()

    async def create_recurring_closure(
        self, data: RecurringClosureFields | dict[str, Any]
    ) -> RecurringClosure:
        fields = parse_model(RecurringClosureFields, data)
        _check_window(fields.start_time, fields.end_time)
        closure = await self.store.insert_recurring_closure(fields.model_dump(mode="json"))
        logger.info(
            "Recurring closure %s: %s %s-%s",
            closure.id,
            WEEKDAYS[closure.day_of_week],
            closure.start_time.strftime("%H:%M"),
            closure.end_time.strftime("%H:%M"),
        )
        return closure

    async def update_recurring_closure(self, closure_id: str, changes: dict[str, Any]) -> RecurringClosure:
        """Partial update; the merged result must still be a valid closure."""
        changes = {k: v for k, v in changes.items() if k in RecurringClosureFields.model_fields}
        if not changes:
            raise ValidationError("Nothing to update")
        current = await self.store.get_recurring_closure(closure_id)
        if current is None:
            raise NotFoundError("Recurring closure not found")

        merged = {**current.model_dump(include=set(RecurringClosureFields.model_fields)), **changes}
        fields = parse_model(RecurringClosureFields, merged)
        _check_window(fields.start_time, fields.end_time)

        payload = fields.model_dump(mode="json", include=set(changes))
        updated = await self.store.update_recurring_closure(closure_id, payload)
        if updated is None:
            raise NotFoundError("Recurring closure not found")
        return updated

    async def delete_recurring_closure(self, closure_id: str) -> None:
        if not await self.store.delete_recurring_closure(closure_id):
            raise NotFoundError("Recurring closure not found")
        logger.info("Recurring closure %s deleted", closure_id)
