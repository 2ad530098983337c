"""Time and payroll calculation engine."""

from timecard_engine.calculators.engine import (
    CalculationResult,
    PayPeriodCalculationResult,
    TimecardEngine,
)
from timecard_engine.calculators.entry_calculator import calculate_entry
from timecard_engine.calculators.errors import (
    IncompleteEntryError,
    InvalidEntrySetError,
    InvalidIntervalError,
    InvalidPolicyError,
    TimecardError,
)
from timecard_engine.calculators.payroll_converter import calculate_payroll
from timecard_engine.calculators.types import (
    STANDARD_POLICY,
    BreakSource,
    EntryAllocation,
    EntryHoursResult,
    PayrollResult,
    Policy,
    ShiftDifferentialMode,
    TimeEntry,
    WeekKey,
    WeeklyHoursResult,
)
from timecard_engine.calculators.week_aggregator import calculate_week

__all__ = [
    "TimecardEngine",
    "CalculationResult",
    "PayPeriodCalculationResult",
    "calculate_entry",
    "calculate_week",
    "calculate_payroll",
    "Policy",
    "STANDARD_POLICY",
    "ShiftDifferentialMode",
    "BreakSource",
    "TimeEntry",
    "EntryHoursResult",
    "EntryAllocation",
    "WeekKey",
    "WeeklyHoursResult",
    "PayrollResult",
    "TimecardError",
    "IncompleteEntryError",
    "InvalidIntervalError",
    "InvalidPolicyError",
    "InvalidEntrySetError",
]
