"""Type definitions for the time and payroll calculation pipeline.

Every type here is immutable. Results are rebuilt from entries and policy on
each call, never updated in place.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timecard_engine.calculators.errors import InvalidPolicyError
from timecard_engine.calculators.rounding import ZERO, to_decimal


class ShiftDifferentialMode(str, Enum):
    """How the night/weekend multiplier interacts with pay."""

    INFORMATIONAL = "informational"  # Reported only, pay unaffected
    REGULAR_ONLY = "regular_only"  # Scales regular-hours pay
    COMPOUND = "compound"  # Scales every tier, multiplied with statutory rates


class BreakSource(str, Enum):
    """Where an entry's break deduction came from."""

    NONE = "none"
    RECORDED = "recorded"
    IMPLIED = "implied"


_HOUR_FIELDS = (
    "standard_hours_per_day",
    "standard_hours_per_week",
    "overtime_after_hours_per_day",
    "overtime_after_hours_per_week",
    "double_time_after_hours_per_day",
    "minimum_shift_hours",
    "break_deduction_after_hours",
    "break_duration_minutes",
    "round_to_nearest_minutes",
)

_MULTIPLIER_FIELDS = (
    "overtime_multiplier",
    "double_time_multiplier",
    "weekend_multiplier",
    "night_multiplier",
)


@dataclass(frozen=True)
class Policy:
    """
    Pay-period rules for hour classification.

    Attributes:
        overtime_after_hours_per_day: Net hours in one entry after which
            hours are overtime.
        double_time_after_hours_per_day: Net hours in one entry after which
            hours are double-time. Must be >= the overtime threshold and <= 24.
        standard_hours_per_week: Weekly regular headroom, consumed in
            clock-in order across the week's entries.
        minimum_shift_hours: Floor applied to any entry's gross duration.
        break_deduction_after_hours: Gross hours at which an unrecorded
            break of ``break_duration_minutes`` is deducted.
        round_to_nearest_minutes: Granularity for gross duration rounding.
        timezone: IANA zone used for weekend, night and calendar-week rules.
        shift_differential_mode: Whether the shift multiplier affects pay.
    """

    standard_hours_per_day: Decimal = Decimal("8")
    standard_hours_per_week: Decimal = Decimal("40")
    overtime_after_hours_per_day: Decimal = Decimal("8")
    overtime_after_hours_per_week: Decimal = Decimal("40")
    double_time_after_hours_per_day: Decimal = Decimal("12")
    minimum_shift_hours: Decimal = Decimal("2")
    break_deduction_after_hours: Decimal = Decimal("4")
    break_duration_minutes: Decimal = Decimal("30")
    round_to_nearest_minutes: Decimal = Decimal("15")

    overtime_multiplier: Decimal = Decimal("1.5")
    double_time_multiplier: Decimal = Decimal("2.0")
    weekend_multiplier: Decimal = Decimal("1.25")
    night_multiplier: Decimal = Decimal("1.15")
    night_start_hour: int = 20
    night_end_hour: int = 6

    timezone: str = "UTC"
    shift_differential_mode: ShiftDifferentialMode = ShiftDifferentialMode.INFORMATIONAL

    def __post_init__(self) -> None:
        """Normalize numeric fields and validate thresholds."""
        for name in _HOUR_FIELDS + _MULTIPLIER_FIELDS:
            raw = getattr(self, name)
            try:
                value = to_decimal(raw)
            except (ArithmeticError, ValueError, TypeError):
                raise InvalidPolicyError(name, raw, "must be numeric") from None
            if not value.is_finite():
                raise InvalidPolicyError(name, raw, "must be finite")
            object.__setattr__(self, name, value)

        for name in _HOUR_FIELDS:
            if getattr(self, name) < ZERO:
                raise InvalidPolicyError(name, getattr(self, name), "must not be negative")

        if self.round_to_nearest_minutes <= ZERO:
            raise InvalidPolicyError(
                "round_to_nearest_minutes",
                self.round_to_nearest_minutes,
                "rounding granularity must be positive",
            )
        if self.overtime_after_hours_per_day > self.double_time_after_hours_per_day:
            raise InvalidPolicyError(
                "double_time_after_hours_per_day",
                self.double_time_after_hours_per_day,
                "must be >= overtime_after_hours_per_day "
                f"({self.overtime_after_hours_per_day})",
            )
        if self.double_time_after_hours_per_day > Decimal("24"):
            raise InvalidPolicyError(
                "double_time_after_hours_per_day",
                self.double_time_after_hours_per_day,
                "must not exceed 24",
            )

        for name in _MULTIPLIER_FIELDS:
            if getattr(self, name) < Decimal("1"):
                raise InvalidPolicyError(name, getattr(self, name), "must be at least 1")

        for name in ("night_start_hour", "night_end_hour"):
            hour = getattr(self, name)
            if not isinstance(hour, int) or isinstance(hour, bool) or not 0 <= hour <= 23:
                raise InvalidPolicyError(name, hour, "must be an hour between 0 and 23")

        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError, TypeError):
            raise InvalidPolicyError("timezone", self.timezone, "unknown IANA timezone") from None

        try:
            mode = ShiftDifferentialMode(self.shift_differential_mode)
        except ValueError:
            raise InvalidPolicyError(
                "shift_differential_mode",
                self.shift_differential_mode,
                f"must be one of {[m.value for m in ShiftDifferentialMode]}",
            ) from None
        object.__setattr__(self, "shift_differential_mode", mode)

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def weekly_regular_hours(self) -> Decimal:
        """Weekly regular headroom before weekly overtime applies."""
        return min(self.standard_hours_per_week, self.overtime_after_hours_per_week)

    def replace(self, **changes: Any) -> Policy:
        """Return a re-validated copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict for hashing (deterministic ordering)."""
        data: dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            data[f.name] = str(value) if isinstance(value, Decimal) else value
        return data


STANDARD_POLICY = Policy()


@dataclass(frozen=True)
class TimeEntry:
    """A clock-in/clock-out record supplied by the storage or API layer.

    Timestamps must be timezone-aware. ``clock_out`` is None while the
    shift is open.
    """

    entry_id: str
    worker_id: str
    clock_in: datetime
    clock_out: datetime | None = None
    break_start: datetime | None = None
    break_end: datetime | None = None
    hourly_rate: Decimal | None = None  # Overrides the worker rate
    tags: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.hourly_rate is not None:
            rate = to_decimal(self.hourly_rate)
            if rate < ZERO:
                raise ValueError(
                    f"Hourly rate override for entry {self.entry_id} must not be "
                    f"negative, got {rate}"
                )
            object.__setattr__(self, "hourly_rate", rate)
        object.__setattr__(self, "tags", tuple(self.tags))

    @property
    def is_open(self) -> bool:
        return self.clock_out is None

    @property
    def has_recorded_break(self) -> bool:
        return self.break_start is not None or self.break_end is not None

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict for hashing (deterministic ordering)."""

        def _ts(value: datetime | None) -> str | None:
            return value.isoformat() if value is not None else None

        return {
            "entry_id": self.entry_id,
            "worker_id": self.worker_id,
            "clock_in": _ts(self.clock_in),
            "clock_out": _ts(self.clock_out),
            "break_start": _ts(self.break_start),
            "break_end": _ts(self.break_end),
            "hourly_rate": str(self.hourly_rate) if self.hourly_rate is not None else None,
            "tags": sorted(self.tags),
        }


@dataclass(frozen=True, order=True)
class WeekKey:
    """ISO 8601 week identity (ISO year, not calendar year)."""

    iso_year: int
    week: int

    def __str__(self) -> str:
        return f"{self.iso_year}-W{self.week:02d}"

    @property
    def start_date(self) -> date:
        """Monday of the week."""
        return date.fromisocalendar(self.iso_year, self.week, 1)

    @property
    def end_date(self) -> date:
        """Sunday of the week."""
        return date.fromisocalendar(self.iso_year, self.week, 7)

    @classmethod
    def for_date(cls, day: date) -> WeekKey:
        iso = day.isocalendar()
        return cls(iso_year=iso[0], week=iso[1])


@dataclass(frozen=True)
class EntryHoursResult:
    """Hours breakdown and rate multipliers for one completed entry."""

    entry_id: str
    worker_id: str
    clock_in: datetime
    clock_out: datetime

    raw_hours: Decimal  # Recorded duration, rounded to policy granularity
    gross_hours: Decimal  # After the minimum-shift floor
    break_hours: Decimal
    break_source: BreakSource
    net_hours: Decimal

    # Daily tiers: regular + overtime + double_time == net_hours
    regular_hours: Decimal
    overtime_hours: Decimal
    double_time_hours: Decimal

    shift_multiplier: Decimal
    regular_multiplier: Decimal
    overtime_multiplier: Decimal
    double_time_multiplier: Decimal


@dataclass(frozen=True)
class EntryAllocation:
    """One entry's contribution to its week after weekly reconciliation."""

    entry: EntryHoursResult
    regular_hours: Decimal
    overtime_hours: Decimal
    double_time_hours: Decimal
    weekly_overtime_hours: Decimal  # Daily-regular hours moved past weekly headroom
    hourly_rate: Decimal | None = None
    spans_week_boundary: bool = False

    @property
    def net_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours + self.double_time_hours


@dataclass(frozen=True)
class WeeklyHoursResult:
    """Reconciled hours for one worker in one ISO week."""

    worker_id: str
    week: WeekKey
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    double_time_hours: Decimal
    allocations: tuple[EntryAllocation, ...] = ()

    @property
    def entry_count(self) -> int:
        return len(self.allocations)


@dataclass(frozen=True)
class PayrollResult:
    """Pay for one worker over a set of weeks.

    Pay amounts are rounded to cents; hours keep internal precision.
    """

    worker_id: str
    hourly_rate: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    double_time_hours: Decimal
    regular_pay: Decimal
    overtime_pay: Decimal
    double_time_pay: Decimal
    gross_pay: Decimal
    shift_differential_mode: ShiftDifferentialMode
    weeks: tuple[WeeklyHoursResult, ...] = ()
    period_start: date | None = None
    period_end: date | None = None

    @property
    def total_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours + self.double_time_hours

    @property
    def hours_breakdown(self) -> dict[str, Decimal]:
        return {
            "regular_hours": self.regular_hours,
            "overtime_hours": self.overtime_hours,
            "double_time_hours": self.double_time_hours,
        }
