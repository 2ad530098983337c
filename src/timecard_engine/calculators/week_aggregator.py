"""Weekly reconciliation of daily hour tiers.

Daily tiering classifies each entry on its own. Weekly reconciliation then
walks the week's entries in clock-in order and consumes a weekly regular
headroom greedily:

- An entry's daily-regular hours count as regular while headroom remains;
  the rest of them become (weekly) overtime.
- An entry's daily overtime and double-time are never promoted back to
  regular.

Entries are attributed to the ISO week containing their local clock-in,
even when the shift ends in the following week.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from functools import reduce

from timecard_engine.calculators.entry_calculator import (
    as_utc,
    calculate_entry,
    check_timezone_aware,
)
from timecard_engine.calculators.errors import IncompleteEntryError, InvalidEntrySetError
from timecard_engine.calculators.rounding import ZERO
from timecard_engine.calculators.types import (
    EntryAllocation,
    EntryHoursResult,
    Policy,
    STANDARD_POLICY,
    TimeEntry,
    WeekKey,
    WeeklyHoursResult,
)

logger = logging.getLogger(__name__)


def week_key_for_instant(instant: datetime, policy: Policy = STANDARD_POLICY) -> WeekKey:
    """ISO week containing ``instant`` in the policy timezone."""
    return WeekKey.for_date(instant.astimezone(policy.zone).date())


def week_key_for(entry: TimeEntry, policy: Policy = STANDARD_POLICY) -> WeekKey:
    """ISO week of the entry's clock-in."""
    return week_key_for_instant(entry.clock_in, policy)


def chronological(entries: Iterable[TimeEntry]) -> list[TimeEntry]:
    """Sort by clock-in instant, entry id breaking ties for a stable order.

    Raises:
        InvalidIntervalError: If an entry carries a naive timestamp
    """
    entries = list(entries)
    for entry in entries:
        check_timezone_aware(entry)
    return sorted(entries, key=lambda e: (as_utc(e.clock_in), e.entry_id))


def completed_entries(
    entries: Iterable[TimeEntry], skip_open_entries: bool = False
) -> list[TimeEntry]:
    """Return closed entries, rejecting open ones unless told to skip them."""
    closed: list[TimeEntry] = []
    for entry in entries:
        check_timezone_aware(entry)
        if entry.is_open:
            if not skip_open_entries:
                raise IncompleteEntryError(entry.entry_id)
            logger.debug("Skipping open entry %s", entry.entry_id)
            continue
        closed.append(entry)
    return closed


def group_entries_by_week(
    entries: Iterable[TimeEntry], policy: Policy = STANDARD_POLICY
) -> dict[WeekKey, list[TimeEntry]]:
    """Group entries by clock-in week, weeks and entries in chronological order."""
    weeks: dict[WeekKey, list[TimeEntry]] = {}
    for entry in chronological(entries):
        weeks.setdefault(week_key_for(entry, policy), []).append(entry)
    return dict(sorted(weeks.items()))


@dataclass(frozen=True)
class _WeekFold:
    """Accumulator threaded through the weekly fold."""

    regular_used: Decimal = ZERO
    allocations: tuple[EntryAllocation, ...] = ()


def calculate_week(
    entries: Sequence[TimeEntry],
    policy: Policy = STANDARD_POLICY,
    skip_open_entries: bool = False,
) -> WeeklyHoursResult:
    """Reconcile one worker's entries for one ISO week.

    Raises:
        IncompleteEntryError: If an entry is open and ``skip_open_entries`` is False
        InvalidIntervalError: If an entry's intervals are malformed
        InvalidEntrySetError: If the entries are empty, or span several
            workers or ISO weeks
    """
    closed = completed_entries(entries, skip_open_entries)
    if not closed:
        raise InvalidEntrySetError("No completed entries to aggregate for the week")

    workers = {e.worker_id for e in closed}
    if len(workers) > 1:
        raise InvalidEntrySetError(
            f"Weekly calculation needs a single worker, got {sorted(workers)}"
        )

    weeks = {week_key_for(e, policy) for e in closed}
    if len(weeks) > 1:
        raise InvalidEntrySetError(
            f"Weekly calculation needs a single ISO week, got {sorted(str(w) for w in weeks)}"
        )
    week = weeks.pop()

    ordered = chronological(closed)
    results = [(entry, calculate_entry(entry, policy)) for entry in ordered]

    def allocate(acc: _WeekFold, item: tuple[TimeEntry, EntryHoursResult]) -> _WeekFold:
        entry, result = item
        headroom = max(ZERO, policy.weekly_regular_hours - acc.regular_used)
        regular = min(result.regular_hours, headroom)
        weekly_overtime = result.regular_hours - regular
        end_week = week_key_for_instant(result.clock_out, policy)
        spans = end_week != week
        if spans:
            logger.info(
                "Entry %s ends in week %s but is attributed to clock-in week %s",
                entry.entry_id,
                end_week,
                week,
            )
        allocation = EntryAllocation(
            entry=result,
            regular_hours=regular,
            overtime_hours=result.overtime_hours + weekly_overtime,
            double_time_hours=result.double_time_hours,
            weekly_overtime_hours=weekly_overtime,
            hourly_rate=entry.hourly_rate,
            spans_week_boundary=spans,
        )
        return _WeekFold(
            regular_used=acc.regular_used + regular,
            allocations=acc.allocations + (allocation,),
        )

    folded = reduce(allocate, results, _WeekFold())
    allocations = folded.allocations

    regular_hours = sum((a.regular_hours for a in allocations), ZERO)
    overtime_hours = sum((a.overtime_hours for a in allocations), ZERO)
    double_time_hours = sum((a.double_time_hours for a in allocations), ZERO)

    logger.debug(
        "Week %s for worker %s: %d entries, %s regular / %s overtime / %s double-time",
        week,
        ordered[0].worker_id,
        len(allocations),
        regular_hours,
        overtime_hours,
        double_time_hours,
    )

    return WeeklyHoursResult(
        worker_id=ordered[0].worker_id,
        week=week,
        total_hours=regular_hours + overtime_hours + double_time_hours,
        regular_hours=regular_hours,
        overtime_hours=overtime_hours,
        double_time_hours=double_time_hours,
        allocations=allocations,
    )