"""Hours breakdown for a single completed time entry."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from timecard_engine.calculators.errors import IncompleteEntryError, InvalidIntervalError
from timecard_engine.calculators.rounding import (
    MINUTES_PER_HOUR,
    ZERO,
    duration_to_hours,
    quantize_hours,
    round_duration_to_granularity,
)
from timecard_engine.calculators.types import (
    BreakSource,
    EntryHoursResult,
    Policy,
    STANDARD_POLICY,
    TimeEntry,
)

logger = logging.getLogger(__name__)

ONE = Decimal("1")


def calculate_entry(entry: TimeEntry, policy: Policy = STANDARD_POLICY) -> EntryHoursResult:
    """Calculate the hours breakdown for one completed entry.

    Pipeline:
    1) Gross hours: recorded duration rounded half-up to policy granularity
    2) Minimum-shift floor
    3) Break deduction (recorded break wins over the implied flat break)
    4) Net hours = max(0, gross - break)
    5) Daily tiering into regular / overtime / double-time
    6) Shift multiplier from the clock-in local time

    Raises:
        IncompleteEntryError: If the entry has no clock-out
        InvalidIntervalError: If the shift or break interval is malformed
    """
    clock_out = validate_entry(entry)

    raw_hours = round_duration_to_granularity(
        as_utc(clock_out) - as_utc(entry.clock_in), policy.round_to_nearest_minutes
    )
    gross_hours = max(raw_hours, policy.minimum_shift_hours)

    break_hours, break_source = _break_deduction(entry, gross_hours, policy)
    net_hours = max(ZERO, gross_hours - break_hours)

    regular, overtime, double_time = split_daily_tiers(net_hours, policy)
    shift = shift_multiplier(entry.clock_in, policy)

    logger.debug(
        "Entry %s: raw=%s gross=%s break=%s (%s) net=%s tiers=%s/%s/%s shift=%s",
        entry.entry_id,
        raw_hours,
        gross_hours,
        break_hours,
        break_source.value,
        net_hours,
        regular,
        overtime,
        double_time,
        shift,
    )

    return EntryHoursResult(
        entry_id=entry.entry_id,
        worker_id=entry.worker_id,
        clock_in=entry.clock_in,
        clock_out=clock_out,
        raw_hours=raw_hours,
        gross_hours=gross_hours,
        break_hours=break_hours,
        break_source=break_source,
        net_hours=net_hours,
        regular_hours=regular,
        overtime_hours=overtime,
        double_time_hours=double_time,
        shift_multiplier=shift,
        regular_multiplier=shift,
        overtime_multiplier=policy.overtime_multiplier * shift,
        double_time_multiplier=policy.double_time_multiplier * shift,
    )


def validate_entry(entry: TimeEntry) -> datetime:
    """Check the entry's intervals and return its clock-out.

    The storage layer validates too; this runs regardless.
    """
    if entry.clock_out is None:
        raise IncompleteEntryError(entry.entry_id)

    check_timezone_aware(entry)
    clock_in = as_utc(entry.clock_in)
    clock_out = as_utc(entry.clock_out)

    if clock_out <= clock_in:
        raise InvalidIntervalError(
            entry.entry_id,
            f"clock-out {entry.clock_out.isoformat()} is not after "
            f"clock-in {entry.clock_in.isoformat()}",
        )

    if entry.has_recorded_break:
        if entry.break_start is None or entry.break_end is None:
            raise InvalidIntervalError(
                entry.entry_id, "break requires both break_start and break_end"
            )
        break_start = as_utc(entry.break_start)
        break_end = as_utc(entry.break_end)
        if break_end <= break_start:
            raise InvalidIntervalError(entry.entry_id, "break end is not after break start")
        if break_start < clock_in or break_end > clock_out:
            raise InvalidIntervalError(entry.entry_id, "break falls outside the shift")

    return entry.clock_out


def check_timezone_aware(entry: TimeEntry) -> None:
    """Reject an entry carrying any naive timestamp.

    Raises:
        InvalidIntervalError: If a present timestamp has no UTC offset
    """
    for name in ("clock_in", "clock_out", "break_start", "break_end"):
        value = getattr(entry, name)
        if value is not None and (value.tzinfo is None or value.utcoffset() is None):
            raise InvalidIntervalError(entry.entry_id, f"{name} must be timezone-aware")


def as_utc(value: datetime) -> datetime:
    """The same instant in UTC.

    Subtraction and comparison between datetimes sharing one tzinfo use wall
    time and ignore DST offsets; UTC values compare as instants.
    """
    return value.astimezone(timezone.utc)


def split_daily_tiers(
    net_hours: Decimal, policy: Policy
) -> tuple[Decimal, Decimal, Decimal]:
    """Partition net hours into (regular, overtime, double_time).

    The parts always sum to ``net_hours``.
    """
    regular = min(net_hours, policy.overtime_after_hours_per_day)
    overtime_cap = policy.double_time_after_hours_per_day - policy.overtime_after_hours_per_day
    overtime = min(net_hours - regular, overtime_cap)
    double_time = net_hours - regular - overtime
    return regular, overtime, double_time


def shift_multiplier(clock_in: datetime, policy: Policy) -> Decimal:
    """Pay-rate multiplier for a shift starting at ``clock_in``.

    Weekend (by local calendar day) takes precedence over night hours.
    """
    local = clock_in.astimezone(policy.zone)
    if local.weekday() >= 5:
        return policy.weekend_multiplier
    if _is_night_hour(local.hour, policy):
        return policy.night_multiplier
    return ONE


def _is_night_hour(hour: int, policy: Policy) -> bool:
    start, end = policy.night_start_hour, policy.night_end_hour
    if start == end:
        return False
    if start < end:
        return start <= hour < end
    # Window wraps midnight, e.g. 20:00-06:00
    return hour >= start or hour < end


def _break_deduction(
    entry: TimeEntry, gross_hours: Decimal, policy: Policy
) -> tuple[Decimal, BreakSource]:
    if entry.break_start is not None and entry.break_end is not None:
        recorded = as_utc(entry.break_end) - as_utc(entry.break_start)
        return duration_to_hours(recorded), BreakSource.RECORDED
    if gross_hours >= policy.break_deduction_after_hours and policy.break_duration_minutes > 0:
        return (
            quantize_hours(policy.break_duration_minutes / MINUTES_PER_HOUR),
            BreakSource.IMPLIED,
        )
    return ZERO, BreakSource.NONE
