"""Stateless calculation endpoints.

Entries and policy arrive in the request body; nothing is persisted.
Engine errors are turned into 422 responses by the app's exception handler.
"""

from fastapi import APIRouter, status

from timecard_engine.api.dependencies import AppSettings
from timecard_engine.api.schemas import (
    EntryCalculationRequest,
    EntryHoursResponse,
    ErrorResponse,
    PayPeriodCalculationRequest,
    PayPeriodResponse,
    PayrollCalculationRequest,
    PayrollResponse,
    WeekCalculationRequest,
    WeeklyHoursResponse,
)
from timecard_engine.calculators.engine import TimecardEngine

router = APIRouter(prefix="/calculations", tags=["calculations"])

_ERRORS = {422: {"model": ErrorResponse}}


@router.post(
    "/entry",
    response_model=EntryHoursResponse,
    status_code=status.HTTP_200_OK,
    responses=_ERRORS,
)
async def calculate_entry(
    payload: EntryCalculationRequest, settings: AppSettings
) -> EntryHoursResponse:
    """Calculate hours and multipliers for one completed entry."""
    engine = TimecardEngine(payload.policy.to_policy(settings.default_timezone), settings)
    result = engine.calculate_entry(payload.entry.to_entry())
    return EntryHoursResponse.from_result(result)


@router.post(
    "/week",
    response_model=WeeklyHoursResponse,
    status_code=status.HTTP_200_OK,
    responses=_ERRORS,
)
async def calculate_week(
    payload: WeekCalculationRequest, settings: AppSettings
) -> WeeklyHoursResponse:
    """Reconcile one worker's entries for one ISO week."""
    engine = TimecardEngine(payload.policy.to_policy(settings.default_timezone), settings)
    result = engine.calculate_week(
        [e.to_entry() for e in payload.entries],
        skip_open_entries=payload.skip_open_entries,
    )
    return WeeklyHoursResponse.from_result(result)


@router.post(
    "/payroll",
    response_model=PayrollResponse,
    status_code=status.HTTP_200_OK,
    responses=_ERRORS,
)
async def calculate_payroll(
    payload: PayrollCalculationRequest, settings: AppSettings
) -> PayrollResponse:
    """Calculate one worker's payroll across every week the entries touch."""
    engine = TimecardEngine(payload.policy.to_policy(settings.default_timezone), settings)
    calc = engine.calculate_payroll(
        payload.worker_id,
        [e.to_entry() for e in payload.entries],
        payload.hourly_rate,
        period_start=payload.period_start,
        period_end=payload.period_end,
        skip_open_entries=payload.skip_open_entries,
    )
    return PayrollResponse.from_calculation(calc)


@router.post(
    "/pay-period",
    response_model=PayPeriodResponse,
    status_code=status.HTTP_200_OK,
    responses=_ERRORS,
)
async def calculate_pay_period(
    payload: PayPeriodCalculationRequest, settings: AppSettings
) -> PayPeriodResponse:
    """Calculate payroll for several workers; failures are reported per worker."""
    engine = TimecardEngine(payload.policy.to_policy(settings.default_timezone), settings)
    calc = engine.calculate_pay_period(
        [e.to_entry() for e in payload.entries],
        payload.hourly_rates,
        period_start=payload.period_start,
        period_end=payload.period_end,
        skip_open_entries=payload.skip_open_entries,
    )
    return PayPeriodResponse.from_calculation(calc)
