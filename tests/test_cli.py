"""Tests for the click commands."""

from datetime import date
from unittest.mock import AsyncMock

import pytest
from click.testing import CliRunner

from rialto import cli
from rialto.errors import StoreError


@pytest.fixture
def run(store, monkeypatch):
    monkeypatch.delenv("RIALTO_CONFIG", raising=False)
    monkeypatch.setattr(cli, "_open_store", AsyncMock(return_value=store))

    def _run(*args):
        return CliRunner().invoke(cli.main, list(args))

    return _run


class TestCli:
    def test_availability_table(self, store, run):
        store.add_slot("19:00", max_capacity=10)
        store.add_reservation(date(2025, 12, 3), "19:00", guests=4)

        result = run("availability", "2025-12-03")

        assert result.exit_code == 0
        assert "19:00" in result.output
        assert "6/10" in result.output

    def test_closed_day(self, store, run):
        store.add_slot("19:00")
        store.add_closed_date(date(2025, 12, 25))

        result = run("availability", "2025-12-25")

        assert "closed (date)" in result.output

    def test_bad_date(self, run):
        result = run("availability", "25/12/2025")
        assert result.exit_code != 0
        assert "YYYY-MM-DD" in result.output

    def test_reservations(self, store, run):
        store.add_reservation(date(2025, 12, 10), "19:00", name="Giulia")

        result = run("reservations", "2025-12-10")

        assert result.exit_code == 0
        assert "Giulia" in result.output

    def test_no_reservations(self, run):
        result = run("reservations", "2025-12-10")
        assert "No reservations on 2025-12-10" in result.output

    def test_seed_slots_from_config(self, store, run, tmp_path):
        config = tmp_path / "rialto.yaml"
        config.write_text(
            "time_slots:\n"
            "  - time: '12:30'\n"
            "    max_capacity: 20\n"
            "    is_lunch: true\n"
            "  - time: '19:00'\n"
            "    max_capacity: 30\n"
        )
        store.add_slot("19:00")

        result = run("-c", str(config), "seed-slots")

        assert result.exit_code == 0
        assert "Created 1 time slots" in result.output
        assert len(store.time_slots) == 2

    def test_store_failure_exits_1(self, monkeypatch, run):
        failing = AsyncMock()
        failing.list_time_slots.side_effect = StoreError("Failed to fetch time slots")
        monkeypatch.setattr(cli, "_open_store", AsyncMock(return_value=failing))

        result = run("availability", "2025-12-03")

        assert result.exit_code == 1
        assert "Failed to fetch time slots" in result.output

    def test_bad_config_exits_1(self, run, tmp_path):
        result = run("-c", str(tmp_path / "missing.yaml"), "availability", "2025-12-03")
        assert result.exit_code == 1
        assert "not found" in result.output
