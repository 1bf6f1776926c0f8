"""Tests for the Supabase-backed store, against a recording query builder."""

from datetime import date, time
from types import SimpleNamespace

import httpx
import pytest
from postgrest.exceptions import APIError

from rialto.errors import StoreError
from rialto.models import ACTIVE_STATUSES, MessageStatus
from rialto.store import SupabaseStore


class FakeQuery:
    """Records chained builder calls; `execute` returns the canned rows."""

    def __init__(self, table, rows=None, error=None):
        self.table = table
        self.calls = []
        self._rows = rows or []
        self._error = error

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    async def execute(self):
        if self._error is not None:
            raise self._error
        return SimpleNamespace(data=self._rows)


class FakeClient:
    def __init__(self, rows=None, error=None):
        self._rows = rows
        self._error = error
        self.queries = []

    def table(self, name):
        query = FakeQuery(name, self._rows, self._error)
        self.queries.append(query)
        return query

    @property
    def last(self):
        return self.queries[-1]


SLOT_ROW = {"id": "s1", "time": "19:00:00", "max_capacity": 30, "is_lunch": False, "is_active": True}
RESERVATION_ROW = {
    "id": "r1", "date": "2025-12-10", "time": "19:00:00", "guests": 2, "name": "Giulia",
    "email": "giulia@example.com", "phone": "123", "occasion": None, "special_requests": None,
    "marketing_consent": False, "status": "pending", "created_at": "2025-12-01T10:00:00+00:00",
}


@pytest.mark.asyncio
class TestSupabaseStore:
    async def test_list_active_time_slots(self):
        client = FakeClient([SLOT_ROW])

        slots = await SupabaseStore(client).list_time_slots(active_only=True)

        assert slots[0].time == time(19, 0)
        assert client.last.table == "time_slots"
        assert ("eq", ("is_active", True), {}) in client.last.calls
        assert ("order", ("time",), {}) in client.last.calls

    async def test_reservations_for_date_filters_statuses(self):
        client = FakeClient([RESERVATION_ROW])

        rows = await SupabaseStore(client).list_reservations_for_date(
            date(2025, 12, 10), statuses=ACTIVE_STATUSES
        )

        assert rows[0].id == "r1"
        assert ("eq", ("date", "2025-12-10"), {}) in client.last.calls
        assert ("in_", ("status", ["confirmed", "pending"]), {}) in client.last.calls

    async def test_find_reservation_matches_all_keys(self):
        client = FakeClient([RESERVATION_ROW])

        found = await SupabaseStore(client).find_reservation(
            date(2025, 12, 10), time(19, 0), "giulia@example.com"
        )

        assert found.email == "giulia@example.com"
        calls = client.last.calls
        assert ("eq", ("time", "19:00:00"), {}) in calls
        assert ("ilike", ("email", "giulia@example.com"), {}) in calls

    async def test_email_lookups_escape_like_wildcards(self):
        client = FakeClient([])

        await SupabaseStore(client).list_reservations_for_email("first_last%1@example.com")

        assert ("ilike", ("email", "first\\_last\\%1@example.com"), {}) in client.last.calls
        assert ("order", ("date",), {}) in client.last.calls

    async def test_get_missing_returns_none(self):
        assert await SupabaseStore(FakeClient([])).get_reservation("nope") is None

    async def test_update_reservation_scoped_by_email(self):
        client = FakeClient([{**RESERVATION_ROW, "status": "cancelled"}])

        updated = await SupabaseStore(client).update_reservation(
            "r1", {"status": "cancelled"}, email="giulia@example.com"
        )

        assert updated.status.value == "cancelled"
        assert ("update", ({"status": "cancelled"},), {}) in client.last.calls
        assert ("eq", ("email", "giulia@example.com"), {}) in client.last.calls

    async def test_delete_reports_whether_a_row_went(self):
        assert await SupabaseStore(FakeClient([{"date": "2025-12-25"}])).delete_closed_date(date(2025, 12, 25))
        assert not await SupabaseStore(FakeClient([])).delete_closed_date(date(2025, 12, 25))

    async def test_insert_without_rows_fails(self):
        with pytest.raises(StoreError, match="create reservation"):
            await SupabaseStore(FakeClient([])).insert_reservation({"guests": 2})

    async def test_messages_newest_first(self):
        client = FakeClient([])

        await SupabaseStore(client).list_contact_messages(status=MessageStatus.UNREAD)

        assert ("eq", ("status", "unread"), {}) in client.last.calls
        assert ("order", ("created_at",), {"desc": True}) in client.last.calls

    async def test_transport_error_becomes_store_error(self):
        client = FakeClient(error=httpx.ConnectError("connection refused"))

        with pytest.raises(StoreError, match="Failed to fetch time slots"):
            await SupabaseStore(client).list_time_slots()

    async def test_api_error_becomes_store_error(self):
        client = FakeClient(error=APIError({"message": "permission denied", "code": "42501"}))

        with pytest.raises(StoreError, match="Failed to fetch reservations"):
            await SupabaseStore(client).list_reservations_for_email("giulia@example.com")
