"""Decimal quantization helpers for hours and money.

Rounding rules:
- Hours carried at 4 decimal places internally
- Gross duration rounded half-up to the policy's minute granularity
- Money computed unrounded, rounded once to cents at output
"""

from __future__ import annotations

from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

HOURS_PRECISION = Decimal("0.0001")
OUTPUT_PRECISION = Decimal("0.01")

ZERO = Decimal("0")
SECONDS_PER_HOUR = Decimal("3600")
MINUTES_PER_HOUR = Decimal("60")


def quantize_hours(hours: Decimal) -> Decimal:
    """Round an hour quantity to internal precision."""
    return hours.quantize(HOURS_PRECISION, rounding=ROUND_HALF_UP)


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents)."""
    return amount.quantize(OUTPUT_PRECISION, rounding=ROUND_HALF_UP)


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a numeric input to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _total_seconds(duration: timedelta) -> Decimal:
    # timedelta.total_seconds() returns a float
    return Decimal(duration.days * 86400 + duration.seconds) + (
        Decimal(duration.microseconds) / Decimal(1_000_000)
    )


def duration_to_hours(duration: timedelta) -> Decimal:
    """Convert an exact duration to hours at internal precision."""
    return quantize_hours(_total_seconds(duration) / SECONDS_PER_HOUR)


def round_duration_to_granularity(duration: timedelta, minutes: Decimal) -> Decimal:
    """Round a duration half-up to the nearest multiple of ``minutes``, in hours.

    15 minutes rounds to the nearest quarter-hour: 7m29s -> 0.0, 7m30s -> 0.25.
    """
    increment_seconds = minutes * MINUTES_PER_HOUR
    increments = (_total_seconds(duration) / increment_seconds).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    return quantize_hours(increments * minutes / MINUTES_PER_HOUR)
