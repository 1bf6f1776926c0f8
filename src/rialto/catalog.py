"""Time-slot catalog administration."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import time

from rialto.config import SlotSeed
from rialto.errors import DuplicateError, NotFoundError, ValidationError
from rialto.models import TimeSlot

logger = logging.getLogger(__name__)


class SlotCatalog:
    """
    Create, toggle and resize bookable slots.

    Lowering max_capacity below what is already booked for some date is
    allowed; existing reservations are left untouched.
    """

    def __init__(self, store) -> None:
        self.store = store

    async def list_slots(self) -> list[TimeSlot]:
        return await self.store.list_time_slots()

    async def create_slot(self, slot_time: time, max_capacity: int, is_lunch: bool = False) -> TimeSlot:
        if max_capacity <= 0:
            raise ValidationError("Capacity must be greater than zero")
        existing = await self.store.list_time_slots()
        if any(s.time == slot_time for s in existing):
            raise DuplicateError(f"A time slot at {slot_time.strftime('%H:%M')} already exists")

        slot = await self.store.insert_time_slot({
            "time": slot_time.isoformat(),
            "max_capacity": max_capacity,
            "is_lunch": is_lunch,
            "is_active": True,
        })
        logger.info("Time slot %s created (%d seats)", slot.time.strftime("%H:%M"), slot.max_capacity)
        return slot

    async def update_slot(
        self,
        slot_id: str,
        *,
        is_active: bool | None = None,
        max_capacity: int | None = None,
    ) -> TimeSlot:
        fields: dict = {}
        if is_active is not None:
            fields["is_active"] = is_active
        if max_capacity is not None:
            if max_capacity <= 0:
                raise ValidationError("Capacity must be greater than zero")
            fields["max_capacity"] = max_capacity
        if not fields:
            raise ValidationError("Nothing to update")

        slot = await self.store.update_time_slot(slot_id, fields)
        if slot is None:
            raise NotFoundError("Time slot not found")
        return slot

    async def delete_slot(self, slot_id: str) -> None:
        if not await self.store.delete_time_slot(slot_id):
            raise NotFoundError("Time slot not found")

    async def seed(self, seeds: Iterable[SlotSeed]) -> list[TimeSlot]:
        """Insert configured slots whose time is not in the catalog yet."""
        known = {s.time for s in await self.store.list_time_slots()}
        created = []
        for seed in seeds:
            if seed.time in known:
                logger.debug("Slot %s already present, skipping", seed.time)
                continue
            created.append(await self.create_slot(seed.time, seed.max_capacity, seed.is_lunch))
            known.add(seed.time)
        return created
