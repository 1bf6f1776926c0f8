"""Tests for the time-slot catalog."""

from datetime import date, time

import pytest

from rialto.availability import AvailabilityCalculator
from rialto.catalog import SlotCatalog
from rialto.config import SlotSeed
from rialto.errors import DuplicateError, NotFoundError, ValidationError


@pytest.mark.asyncio
class TestSlotCatalog:
    async def test_create_and_list(self, store):
        catalog = SlotCatalog(store)
        await catalog.create_slot(time(19, 30), 12)
        await catalog.create_slot(time(12, 30), 8, is_lunch=True)

        slots = await catalog.list_slots()

        assert [(s.time, s.max_capacity, s.is_lunch) for s in slots] == [
            (time(12, 30), 8, True),
            (time(19, 30), 12, False),
        ]
        assert all(s.is_active for s in slots)

    async def test_zero_capacity_rejected(self, store):
        with pytest.raises(ValidationError, match="greater than zero"):
            await SlotCatalog(store).create_slot(time(19, 0), 0)

    async def test_duplicate_time_rejected(self, store):
        store.add_slot("19:00")
        with pytest.raises(DuplicateError, match="19:00"):
            await SlotCatalog(store).create_slot(time(19, 0), 10)

    async def test_deactivate_hides_slot_from_availability(self, store):
        slot = store.add_slot("19:00")

        updated = await SlotCatalog(store).update_slot(slot.id, is_active=False)

        assert updated.is_active is False
        assert await AvailabilityCalculator(store).for_date(date(2025, 12, 3)) == []

    async def test_lowering_capacity_keeps_reservations(self, store):
        day = date(2025, 12, 3)
        slot = store.add_slot("19:00", max_capacity=10)
        store.add_reservation(day, "19:00", guests=6)

        await SlotCatalog(store).update_slot(slot.id, max_capacity=4)
        standing = await AvailabilityCalculator(store).for_slot(day, time(19, 0))

        assert len(store.reservations) == 1
        assert standing.available is False
        assert standing.remaining_capacity == 0

    async def test_update_requires_a_field(self, store):
        slot = store.add_slot("19:00")
        with pytest.raises(ValidationError, match="Nothing to update"):
            await SlotCatalog(store).update_slot(slot.id)

    async def test_update_rejects_bad_capacity(self, store):
        slot = store.add_slot("19:00")
        with pytest.raises(ValidationError):
            await SlotCatalog(store).update_slot(slot.id, max_capacity=-1)

    async def test_update_missing(self, store):
        with pytest.raises(NotFoundError):
            await SlotCatalog(store).update_slot("missing", is_active=True)

    async def test_delete(self, store):
        slot = store.add_slot("19:00")
        catalog = SlotCatalog(store)

        await catalog.delete_slot(slot.id)

        assert await catalog.list_slots() == []
        with pytest.raises(NotFoundError):
            await catalog.delete_slot(slot.id)

    async def test_seed_skips_existing(self, store):
        store.add_slot("19:00")
        seeds = [
            SlotSeed(time=time(12, 30), max_capacity=8, is_lunch=True),
            SlotSeed(time=time(19, 0), max_capacity=10),
            SlotSeed(time=time(21, 0), max_capacity=10),
        ]

        created = await SlotCatalog(store).seed(seeds)

        assert [s.time for s in created] == [time(12, 30), time(21, 0)]
        assert len(store.time_slots) == 3
