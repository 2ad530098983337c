"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from dataclasses import fields
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field

from timecard_engine.calculators.engine import CalculationResult, PayPeriodCalculationResult
from timecard_engine.calculators.types import (
    STANDARD_POLICY,
    EntryAllocation,
    EntryHoursResult,
    PayrollResult,
    Policy,
    ShiftDifferentialMode,
    TimeEntry,
    WeeklyHoursResult,
)


# ============================================================================
# Input schemas
# ============================================================================


class PolicyInput(BaseModel):
    """Pay policy; omitted fields take the standard policy's values."""

    standard_hours_per_day: Decimal = STANDARD_POLICY.standard_hours_per_day
    standard_hours_per_week: Decimal = STANDARD_POLICY.standard_hours_per_week
    overtime_after_hours_per_day: Decimal = STANDARD_POLICY.overtime_after_hours_per_day
    overtime_after_hours_per_week: Decimal = STANDARD_POLICY.overtime_after_hours_per_week
    double_time_after_hours_per_day: Decimal = STANDARD_POLICY.double_time_after_hours_per_day
    minimum_shift_hours: Decimal = STANDARD_POLICY.minimum_shift_hours
    break_deduction_after_hours: Decimal = STANDARD_POLICY.break_deduction_after_hours
    break_duration_minutes: Decimal = STANDARD_POLICY.break_duration_minutes
    round_to_nearest_minutes: Decimal = STANDARD_POLICY.round_to_nearest_minutes
    overtime_multiplier: Decimal = STANDARD_POLICY.overtime_multiplier
    double_time_multiplier: Decimal = STANDARD_POLICY.double_time_multiplier
    weekend_multiplier: Decimal = STANDARD_POLICY.weekend_multiplier
    night_multiplier: Decimal = STANDARD_POLICY.night_multiplier
    night_start_hour: int = STANDARD_POLICY.night_start_hour
    night_end_hour: int = STANDARD_POLICY.night_end_hour
    timezone: str | None = None  # Falls back to the configured default
    shift_differential_mode: ShiftDifferentialMode = STANDARD_POLICY.shift_differential_mode

    def to_policy(self, default_timezone: str) -> Policy:
        """Build a validated engine policy (raises InvalidPolicyError)."""
        data = self.model_dump()
        data["timezone"] = self.timezone or default_timezone
        return Policy(**data)


class TimeEntryInput(BaseModel):
    """A time entry as submitted by the caller."""

    entry_id: str
    worker_id: str
    clock_in: datetime
    clock_out: datetime | None = None
    break_start: datetime | None = None
    break_end: datetime | None = None
    hourly_rate: Decimal | None = Field(default=None, ge=0)
    tags: list[str] = Field(default_factory=list)

    def to_entry(self) -> TimeEntry:
        return TimeEntry(
            entry_id=self.entry_id,
            worker_id=self.worker_id,
            clock_in=self.clock_in,
            clock_out=self.clock_out,
            break_start=self.break_start,
            break_end=self.break_end,
            hourly_rate=self.hourly_rate,
            tags=tuple(self.tags),
        )


class EntryCalculationRequest(BaseModel):
    """Schema for calculating one entry."""

    entry: TimeEntryInput
    policy: PolicyInput = Field(default_factory=PolicyInput)


class WeekCalculationRequest(BaseModel):
    """Schema for reconciling one worker's week."""

    entries: list[TimeEntryInput]
    policy: PolicyInput = Field(default_factory=PolicyInput)
    skip_open_entries: bool = False


class PayrollCalculationRequest(BaseModel):
    """Schema for one worker's payroll."""

    worker_id: str
    hourly_rate: Decimal = Field(ge=0)
    entries: list[TimeEntryInput]
    policy: PolicyInput = Field(default_factory=PolicyInput)
    period_start: date | None = None
    period_end: date | None = None
    skip_open_entries: bool = False


class PayPeriodCalculationRequest(BaseModel):
    """Schema for payroll across several workers."""

    hourly_rates: dict[str, Annotated[Decimal, Field(ge=0)]]
    entries: list[TimeEntryInput]
    policy: PolicyInput = Field(default_factory=PolicyInput)
    period_start: date | None = None
    period_end: date | None = None
    skip_open_entries: bool = False


# ============================================================================
# Result schemas
# ============================================================================


class EntryHoursResponse(BaseModel):
    """Hours breakdown for one entry."""

    entry_id: str
    worker_id: str
    clock_in: datetime
    clock_out: datetime
    raw_hours: Decimal
    gross_hours: Decimal
    break_hours: Decimal
    break_source: str
    net_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    double_time_hours: Decimal
    shift_multiplier: Decimal
    regular_multiplier: Decimal
    overtime_multiplier: Decimal
    double_time_multiplier: Decimal

    @classmethod
    def from_result(cls, result: EntryHoursResult) -> EntryHoursResponse:
        data = {f.name: getattr(result, f.name) for f in fields(result)}
        data["break_source"] = result.break_source.value
        return cls(**data)


class EntryAllocationResponse(BaseModel):
    """One entry's share of its week after reconciliation."""

    entry_id: str
    regular_hours: Decimal
    overtime_hours: Decimal
    double_time_hours: Decimal
    weekly_overtime_hours: Decimal
    shift_multiplier: Decimal
    hourly_rate: Decimal | None = None
    spans_week_boundary: bool

    @classmethod
    def from_allocation(cls, allocation: EntryAllocation) -> EntryAllocationResponse:
        return cls(
            entry_id=allocation.entry.entry_id,
            regular_hours=allocation.regular_hours,
            overtime_hours=allocation.overtime_hours,
            double_time_hours=allocation.double_time_hours,
            weekly_overtime_hours=allocation.weekly_overtime_hours,
            shift_multiplier=allocation.entry.shift_multiplier,
            hourly_rate=allocation.hourly_rate,
            spans_week_boundary=allocation.spans_week_boundary,
        )


class WeeklyHoursResponse(BaseModel):
    """Reconciled hours for one ISO week."""

    worker_id: str
    week: str
    week_start: date
    week_end: date
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    double_time_hours: Decimal
    allocations: list[EntryAllocationResponse]

    @classmethod
    def from_result(cls, result: WeeklyHoursResult) -> WeeklyHoursResponse:
        return cls(
            worker_id=result.worker_id,
            week=str(result.week),
            week_start=result.week.start_date,
            week_end=result.week.end_date,
            total_hours=result.total_hours,
            regular_hours=result.regular_hours,
            overtime_hours=result.overtime_hours,
            double_time_hours=result.double_time_hours,
            allocations=[EntryAllocationResponse.from_allocation(a) for a in result.allocations],
        )


class PayrollResponse(BaseModel):
    """Payroll for one worker."""

    calculation_id: UUID
    inputs_fingerprint: str
    policy_fingerprint: str
    worker_id: str
    hourly_rate: Decimal
    period_start: date | None = None
    period_end: date | None = None
    shift_differential_mode: str
    regular_hours: Decimal
    overtime_hours: Decimal
    double_time_hours: Decimal
    regular_pay: Decimal
    overtime_pay: Decimal
    double_time_pay: Decimal
    gross_pay: Decimal
    weeks: list[WeeklyHoursResponse]

    @classmethod
    def from_calculation(cls, calc: CalculationResult) -> PayrollResponse:
        payroll: PayrollResult = calc.payroll
        return cls(
            calculation_id=calc.calculation_id,
            inputs_fingerprint=calc.inputs_fingerprint,
            policy_fingerprint=calc.policy_fingerprint,
            worker_id=payroll.worker_id,
            hourly_rate=payroll.hourly_rate,
            period_start=payroll.period_start,
            period_end=payroll.period_end,
            shift_differential_mode=payroll.shift_differential_mode.value,
            regular_hours=payroll.regular_hours,
            overtime_hours=payroll.overtime_hours,
            double_time_hours=payroll.double_time_hours,
            regular_pay=payroll.regular_pay,
            overtime_pay=payroll.overtime_pay,
            double_time_pay=payroll.double_time_pay,
            gross_pay=payroll.gross_pay,
            weeks=[WeeklyHoursResponse.from_result(w) for w in payroll.weeks],
        )


class PayPeriodResponse(BaseModel):
    """Payroll across several workers."""

    period_start: date | None = None
    period_end: date | None = None
    total_gross: Decimal
    error_count: int
    results: dict[str, PayrollResponse]
    errors: dict[str, str]

    @classmethod
    def from_calculation(cls, calc: PayPeriodCalculationResult) -> PayPeriodResponse:
        return cls(
            period_start=calc.period_start,
            period_end=calc.period_end,
            total_gross=calc.total_gross,
            error_count=calc.error_count,
            results={
                worker_id: PayrollResponse.from_calculation(result)
                for worker_id, result in calc.results.items()
            },
            errors=dict(calc.errors),
        )


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    detail: str
    code: str
