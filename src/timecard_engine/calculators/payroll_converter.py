"""Conversion of reconciled hours into pay."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from timecard_engine.calculators.entry_calculator import check_timezone_aware
from timecard_engine.calculators.errors import InvalidEntrySetError
from timecard_engine.calculators.rounding import ZERO, round_to_cents, to_decimal
from timecard_engine.calculators.types import (
    EntryAllocation,
    PayrollResult,
    Policy,
    STANDARD_POLICY,
    ShiftDifferentialMode,
    TimeEntry,
    WeeklyHoursResult,
)
from timecard_engine.calculators.week_aggregator import (
    calculate_week,
    completed_entries,
    group_entries_by_week,
)

logger = logging.getLogger(__name__)


def calculate_payroll(
    worker_id: str,
    entries: Iterable[TimeEntry],
    hourly_rate: Decimal | int | float | str,
    policy: Policy = STANDARD_POLICY,
    period_start: date | None = None,
    period_end: date | None = None,
    skip_open_entries: bool = False,
) -> PayrollResult:
    """Calculate pay for one worker over every week the entries touch.

    Only entries belonging to ``worker_id`` are considered. When a period
    is given, entries whose local clock-in date falls outside it are
    excluded.

    Pay per tier (before rounding to cents):
        regular     = hours x rate x shift*
        overtime    = hours x rate x overtime_multiplier x shift*
        double_time = hours x rate x double_time_multiplier x shift*

    * shift applies per ``policy.shift_differential_mode``: never
      (informational), to regular only, or to every tier (compound).
      The rate is the entry's override when present, else ``hourly_rate``.

    Raises:
        ValueError: If the hourly rate is negative
        InvalidEntrySetError: If the period end is before its start
        InvalidIntervalError: If a timestamp is naive or an interval is malformed
        IncompleteEntryError: If an entry is open and not skipped
    """
    rate = to_decimal(hourly_rate)
    if rate < ZERO:
        raise ValueError(f"Hourly rate must not be negative, got {rate}")
    if period_start is not None and period_end is not None and period_end < period_start:
        raise InvalidEntrySetError(
            f"Pay period end {period_end} is before start {period_start}"
        )

    selected = _select_entries(worker_id, entries, policy, period_start, period_end)
    closed = completed_entries(selected, skip_open_entries)

    weeks = tuple(
        calculate_week(week_entries, policy)
        for week_entries in group_entries_by_week(closed, policy).values()
    )

    regular_pay = ZERO
    overtime_pay = ZERO
    double_time_pay = ZERO
    for week in weeks:
        for allocation in week.allocations:
            reg, ot, dt = _allocation_pay(allocation, rate, policy)
            regular_pay += reg
            overtime_pay += ot
            double_time_pay += dt

    totals = summarize_weeks(weeks)
    regular_hours = totals["regular_hours"]
    overtime_hours = totals["overtime_hours"]
    double_time_hours = totals["double_time_hours"]

    regular_pay = round_to_cents(regular_pay)
    overtime_pay = round_to_cents(overtime_pay)
    double_time_pay = round_to_cents(double_time_pay)
    gross_pay = regular_pay + overtime_pay + double_time_pay

    logger.debug(
        "Payroll for worker %s: %d weeks, hours %s/%s/%s, gross %s",
        worker_id,
        len(weeks),
        regular_hours,
        overtime_hours,
        double_time_hours,
        gross_pay,
    )

    return PayrollResult(
        worker_id=worker_id,
        hourly_rate=rate,
        regular_hours=regular_hours,
        overtime_hours=overtime_hours,
        double_time_hours=double_time_hours,
        regular_pay=regular_pay,
        overtime_pay=overtime_pay,
        double_time_pay=double_time_pay,
        gross_pay=gross_pay,
        shift_differential_mode=policy.shift_differential_mode,
        weeks=weeks,
        period_start=period_start,
        period_end=period_end,
    )


def _select_entries(
    worker_id: str,
    entries: Iterable[TimeEntry],
    policy: Policy,
    period_start: date | None,
    period_end: date | None,
) -> list[TimeEntry]:
    selected: list[TimeEntry] = []
    other_workers = 0
    out_of_period = 0
    zone = policy.zone
    for entry in entries:
        if entry.worker_id != worker_id:
            other_workers += 1
            continue
        check_timezone_aware(entry)
        work_date = entry.clock_in.astimezone(zone).date()
        if (period_start is not None and work_date < period_start) or (
            period_end is not None and work_date > period_end
        ):
            out_of_period += 1
            continue
        selected.append(entry)

    if other_workers or out_of_period:
        logger.debug(
            "Payroll for worker %s excluded %d entries of other workers, %d outside the period",
            worker_id,
            other_workers,
            out_of_period,
        )
    return selected


def _allocation_pay(
    allocation: EntryAllocation, worker_rate: Decimal, policy: Policy
) -> tuple[Decimal, Decimal, Decimal]:
    rate = allocation.hourly_rate if allocation.hourly_rate is not None else worker_rate
    shift = allocation.entry.shift_multiplier
    mode = policy.shift_differential_mode

    regular_factor = shift if mode != ShiftDifferentialMode.INFORMATIONAL else Decimal("1")
    premium_factor = shift if mode == ShiftDifferentialMode.COMPOUND else Decimal("1")

    return (
        allocation.regular_hours * rate * regular_factor,
        allocation.overtime_hours * rate * policy.overtime_multiplier * premium_factor,
        allocation.double_time_hours * rate * policy.double_time_multiplier * premium_factor,
    )


def summarize_weeks(weeks: Iterable[WeeklyHoursResult]) -> dict[str, Decimal]:
    """Total the hour buckets across weeks."""
    totals = {"regular_hours": ZERO, "overtime_hours": ZERO, "double_time_hours": ZERO}
    for week in weeks:
        totals["regular_hours"] += week.regular_hours
        totals["overtime_hours"] += week.overtime_hours
        totals["double_time_hours"] += week.double_time_hours
    return totals
