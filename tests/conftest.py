"""Pytest fixtures for timecard engine tests."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable
from zoneinfo import ZoneInfo

import pytest

from timecard_engine.calculators.types import STANDARD_POLICY, Policy, TimeEntry
from timecard_engine.config import Settings

# 2024-01-08 is a Monday in ISO week 2024-W02
MONDAY = "2024-01-08"
TUESDAY = "2024-01-09"
WEDNESDAY = "2024-01-10"
THURSDAY = "2024-01-11"
FRIDAY = "2024-01-12"
SATURDAY = "2024-01-13"
SUNDAY = "2024-01-14"
WEEKDAYS = [MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY]


def ts(day: str, clock: str, tz: str | None = None) -> datetime:
    """Build an aware timestamp from a date and HH:MM[:SS] string (UTC by default)."""
    tzinfo = ZoneInfo(tz) if tz else timezone.utc
    return datetime.fromisoformat(f"{day}T{clock}").replace(tzinfo=tzinfo)


EntryFactory = Callable[..., TimeEntry]


@pytest.fixture
def policy() -> Policy:
    """The standard 8h/40h policy in UTC."""
    return STANDARD_POLICY


@pytest.fixture
def settings() -> Settings:
    """Deterministic settings, independent of the environment."""
    return Settings(
        engine_version="1.0.0",
        default_timezone="UTC",
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="INFO",
    )


@pytest.fixture
def make_entry() -> EntryFactory:
    """Factory for entries on a given day; pass ``end_day`` for overnight shifts."""
    counter = {"n": 0}

    def _make(
        day: str = MONDAY,
        start: str = "09:00",
        end: str | None = "17:00",
        *,
        entry_id: str | None = None,
        worker_id: str = "worker-1",
        break_start: str | None = None,
        break_end: str | None = None,
        hourly_rate: Decimal | None = None,
        tz: str | None = None,
        end_day: str | None = None,
    ) -> TimeEntry:
        counter["n"] += 1
        clock_in = ts(day, start, tz)
        clock_out = ts(end_day or day, end, tz) if end is not None else None
        return TimeEntry(
            entry_id=entry_id or f"entry-{counter['n']}",
            worker_id=worker_id,
            clock_in=clock_in,
            clock_out=clock_out,
            break_start=ts(day, break_start, tz) if break_start else None,
            break_end=ts(day, break_end, tz) if break_end else None,
            hourly_rate=hourly_rate,
        )

    return _make
