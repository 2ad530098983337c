"""Timecard calculation engine - main orchestrator."""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from timecard_engine.calculators.entry_calculator import calculate_entry
from timecard_engine.calculators.errors import TimecardError
from timecard_engine.calculators.payroll_converter import calculate_payroll
from timecard_engine.calculators.rounding import ZERO, to_decimal
from timecard_engine.calculators.types import (
    EntryHoursResult,
    PayrollResult,
    Policy,
    STANDARD_POLICY,
    TimeEntry,
    WeeklyHoursResult,
)
from timecard_engine.calculators.week_aggregator import calculate_week
from timecard_engine.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationResult:
    """Payroll for one worker plus the identity of the calculation."""

    worker_id: str
    calculation_id: UUID
    payroll: PayrollResult
    inputs_fingerprint: str
    policy_fingerprint: str


@dataclass
class PayPeriodCalculationResult:
    """Result of calculating payroll for several workers."""

    period_start: date | None
    period_end: date | None
    results: dict[str, CalculationResult] = field(default_factory=dict)  # worker_id -> result
    errors: dict[str, str] = field(default_factory=dict)  # worker_id -> message
    total_gross: Decimal = ZERO

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def success(self) -> bool:
        return not self.errors


class TimecardEngine:
    """Time and payroll calculation engine bound to one policy.

    The engine holds no per-calculation state; one instance may be shared
    across threads. Pipeline per worker:
    1) Select the worker's entries within the period
    2) Calculate each entry (gross, break, net, daily tiers, shift)
    3) Reconcile each ISO week against the weekly regular headroom
    4) Price the hour buckets and round to cents
    5) Fingerprint inputs and policy, derive a deterministic calculation id
    """

    def __init__(self, policy: Policy = STANDARD_POLICY, settings: Settings | None = None):
        self.policy = policy
        self.settings = settings or get_settings()

    def calculate_entry(self, entry: TimeEntry) -> EntryHoursResult:
        return calculate_entry(entry, self.policy)

    def calculate_week(
        self, entries: Sequence[TimeEntry], skip_open_entries: bool = False
    ) -> WeeklyHoursResult:
        return calculate_week(entries, self.policy, skip_open_entries=skip_open_entries)

    def calculate_payroll(
        self,
        worker_id: str,
        entries: Iterable[TimeEntry],
        hourly_rate: Decimal | int | float | str,
        period_start: date | None = None,
        period_end: date | None = None,
        skip_open_entries: bool = False,
    ) -> CalculationResult:
        """Calculate payroll for one worker and stamp it with a calculation id."""
        entries = list(entries)
        rate = to_decimal(hourly_rate)
        payroll = calculate_payroll(
            worker_id,
            entries,
            rate,
            self.policy,
            period_start=period_start,
            period_end=period_end,
            skip_open_entries=skip_open_entries,
        )

        used_ids = {
            allocation.entry.entry_id
            for week in payroll.weeks
            for allocation in week.allocations
        }
        inputs_fingerprint = self._compute_inputs_fingerprint(
            [e for e in entries if e.entry_id in used_ids], rate
        )
        policy_fingerprint = self._compute_policy_fingerprint(self.policy)

        return CalculationResult(
            worker_id=worker_id,
            calculation_id=self._generate_calculation_id(
                worker_id, period_start, period_end, inputs_fingerprint, policy_fingerprint
            ),
            payroll=payroll,
            inputs_fingerprint=inputs_fingerprint,
            policy_fingerprint=policy_fingerprint,
        )

    def calculate_pay_period(
        self,
        entries: Iterable[TimeEntry],
        hourly_rates: Mapping[str, Decimal | int | float | str],
        period_start: date | None = None,
        period_end: date | None = None,
        skip_open_entries: bool = False,
    ) -> PayPeriodCalculationResult:
        """Calculate payroll for every worker that has an hourly rate.

        A failing worker is recorded in ``errors`` and does not stop the
        others. Entries of workers without a rate are reported as errors.
        """
        entries = list(entries)
        result = PayPeriodCalculationResult(period_start=period_start, period_end=period_end)

        for worker_id in sorted({e.worker_id for e in entries} - set(hourly_rates)):
            result.errors[worker_id] = f"No hourly rate for worker {worker_id}"

        for worker_id in sorted(hourly_rates):
            try:
                calc = self.calculate_payroll(
                    worker_id,
                    entries,
                    hourly_rates[worker_id],
                    period_start=period_start,
                    period_end=period_end,
                    skip_open_entries=skip_open_entries,
                )
            except (TimecardError, ValueError) as e:
                logger.warning("Payroll for worker %s failed: %s", worker_id, e)
                result.errors[worker_id] = str(e)
                continue
            except Exception as e:
                logger.exception("Unexpected error calculating payroll for worker %s", worker_id)
                result.errors[worker_id] = f"Unexpected error: {e}"
                continue

            result.results[worker_id] = calc
            result.total_gross += calc.payroll.gross_pay

        logger.info(
            "Pay period %s..%s: %d workers calculated, %d errors, total gross %s",
            period_start,
            period_end,
            len(result.results),
            result.error_count,
            result.total_gross,
        )
        return result

    def _generate_calculation_id(
        self,
        worker_id: str,
        period_start: date | None,
        period_end: date | None,
        inputs_fingerprint: str,
        policy_fingerprint: str,
    ) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "worker_id": worker_id,
            "period_start": str(period_start) if period_start else None,
            "period_end": str(period_end) if period_end else None,
            "engine_version": self.settings.engine_version,
            "inputs_fingerprint": inputs_fingerprint,
            "policy_fingerprint": policy_fingerprint,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])

    def _compute_inputs_fingerprint(
        self, entries: Iterable[TimeEntry], hourly_rate: Decimal
    ) -> str:
        """Compute fingerprint of entries and rate, independent of entry order."""
        inputs_data: list[dict[str, Any]] = sorted(
            (e.to_canonical_dict() for e in entries), key=lambda d: d["entry_id"]
        )
        json_str = json.dumps(
            {"hourly_rate": str(hourly_rate), "entries": inputs_data}, sort_keys=True
        )
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    def _compute_policy_fingerprint(self, policy: Policy) -> str:
        """Compute fingerprint of the policy in effect."""
        json_str = json.dumps(policy.to_canonical_dict(), sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]
