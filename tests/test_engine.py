"""Unit tests for TimecardEngine.

Tests orchestration, fingerprints and pay-period error isolation.
"""

import dataclasses
import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest

from timecard_engine.calculators import engine as engine_module
from timecard_engine.calculators.engine import (
    CalculationResult,
    PayPeriodCalculationResult,
    TimecardEngine,
)
from timecard_engine.calculators.types import Policy

from tests.conftest import MONDAY, TUESDAY, WEEKDAYS


class TestCalculationIdGeneration:
    """Test deterministic calculation ID generation."""

    def test_same_inputs_produce_same_id(self, settings):
        """Same inputs should always produce the same calculation ID."""
        engine = TimecardEngine(settings=settings)

        id1 = engine._generate_calculation_id("w1", date(2024, 1, 8), None, "abc", "def")
        id2 = engine._generate_calculation_id("w1", date(2024, 1, 8), None, "abc", "def")

        assert id1 == id2
        assert isinstance(id1, UUID)

    def test_different_inputs_produce_different_id(self, settings):
        """Changing any component changes the ID."""
        engine = TimecardEngine(settings=settings)
        base = engine._generate_calculation_id("w1", None, None, "abc", "def")

        assert engine._generate_calculation_id("w2", None, None, "abc", "def") != base
        assert engine._generate_calculation_id("w1", None, None, "xyz", "def") != base
        assert engine._generate_calculation_id("w1", None, None, "abc", "xyz") != base

    def test_engine_version_affects_id(self, settings):
        """A new engine version yields a new calculation ID."""
        old = TimecardEngine(settings=settings)
        new = TimecardEngine(settings=dataclasses.replace(settings, engine_version="2.0.0"))

        assert old._generate_calculation_id("w1", None, None, "a", "b") != (
            new._generate_calculation_id("w1", None, None, "a", "b")
        )


class TestFingerprints:
    """Test input and policy fingerprints."""

    def test_entry_order_does_not_matter(self, make_entry, settings):
        """Shuffled entries give the same inputs fingerprint and ID."""
        engine = TimecardEngine(settings=settings)
        entries = [make_entry(day) for day in WEEKDAYS]

        forward = engine.calculate_payroll("worker-1", entries, Decimal("15"))
        backward = engine.calculate_payroll("worker-1", list(reversed(entries)), Decimal("15"))

        assert forward.inputs_fingerprint == backward.inputs_fingerprint
        assert forward.calculation_id == backward.calculation_id
        assert len(forward.inputs_fingerprint) == 32

    def test_other_workers_excluded_from_fingerprint(self, make_entry, settings):
        """Only the entries that were paid enter the fingerprint."""
        engine = TimecardEngine(settings=settings)
        own = [make_entry(MONDAY)]
        other = make_entry(TUESDAY, worker_id="someone-else")

        alone = engine.calculate_payroll("worker-1", own, Decimal("15"))
        mixed = engine.calculate_payroll("worker-1", own + [other], Decimal("15"))

        assert alone.inputs_fingerprint == mixed.inputs_fingerprint

    def test_rate_changes_fingerprint(self, make_entry, settings):
        """The worker rate is part of the inputs fingerprint."""
        engine = TimecardEngine(settings=settings)
        entries = [make_entry(MONDAY)]

        a = engine.calculate_payroll("worker-1", entries, Decimal("15"))
        b = engine.calculate_payroll("worker-1", entries, Decimal("16"))

        assert a.inputs_fingerprint != b.inputs_fingerprint
        assert a.calculation_id != b.calculation_id

    def test_policy_changes_fingerprint(self, make_entry, settings):
        """A different policy yields a different policy fingerprint."""
        entries = [make_entry(MONDAY)]
        standard = TimecardEngine(settings=settings).calculate_payroll(
            "worker-1", entries, Decimal("15")
        )
        strict = TimecardEngine(
            Policy(overtime_after_hours_per_day=Decimal("7")), settings
        ).calculate_payroll("worker-1", entries, Decimal("15"))

        assert standard.policy_fingerprint != strict.policy_fingerprint
        assert standard.calculation_id != strict.calculation_id


class TestEngineCalculations:
    """Test engine delegation to the calculators."""

    def test_calculate_payroll_result(self, make_entry, settings):
        """calculate_payroll wraps the payroll with its identity."""
        engine = TimecardEngine(settings=settings)
        entries = [make_entry(day, "09:00", "18:30") for day in WEEKDAYS]

        calc = engine.calculate_payroll("worker-1", entries, "10")

        assert isinstance(calc, CalculationResult)
        assert calc.worker_id == "worker-1"
        assert calc.payroll.gross_pay == Decimal("475.00")

    def test_calculate_entry_and_week_use_engine_policy(self, make_entry, settings):
        """The engine's policy applies to entry and week calculations."""
        engine = TimecardEngine(Policy(minimum_shift_hours=Decimal("4")), settings)

        entry = engine.calculate_entry(make_entry(MONDAY, "09:00", "10:00"))
        week = engine.calculate_week([make_entry(MONDAY, "09:00", "10:00")])

        assert entry.gross_hours == Decimal("4")
        assert week.total_hours == Decimal("3.5")

    def test_default_settings(self):
        """Without explicit settings the engine loads them from the environment."""
        engine = TimecardEngine()
        assert engine.settings.engine_version


class TestPayPeriodCalculation:
    """Test multi-worker pay periods."""

    def test_all_workers_calculated(self, make_entry, settings):
        """Every worker with a rate gets a result and the gross is totalled."""
        engine = TimecardEngine(settings=settings)
        entries = [
            make_entry(MONDAY, worker_id="alice"),
            make_entry(MONDAY, worker_id="bob"),
        ]

        result = engine.calculate_pay_period(entries, {"alice": "10", "bob": Decimal("20")})

        assert isinstance(result, PayPeriodCalculationResult)
        assert result.success
        assert set(result.results) == {"alice", "bob"}
        assert result.total_gross == Decimal("225.00")

    def test_worker_without_rate_reported(self, make_entry, settings):
        """Entries of workers without a rate are reported as errors."""
        engine = TimecardEngine(settings=settings)
        entries = [
            make_entry(MONDAY, worker_id="alice"),
            make_entry(MONDAY, worker_id="carol"),
        ]

        result = engine.calculate_pay_period(entries, {"alice": Decimal("10")})

        assert "alice" in result.results
        assert result.errors == {"carol": "No hourly rate for worker carol"}
        assert result.error_count == 1
        assert not result.success

    def test_failing_worker_isolated(self, make_entry, settings, caplog):
        """A worker with a bad entry does not stop the others."""
        engine = TimecardEngine(settings=settings)
        entries = [
            make_entry(MONDAY, worker_id="alice"),
            make_entry(MONDAY, "09:00", "08:00", worker_id="bob", entry_id="bad"),
        ]

        with caplog.at_level(logging.WARNING):
            result = engine.calculate_pay_period(
                entries, {"alice": Decimal("10"), "bob": Decimal("10")}
            )

        assert result.total_gross == Decimal("75.00")
        assert "bob" in result.errors
        assert "bad" in result.errors["bob"]
        assert "Payroll for worker bob failed" in caplog.text

    def test_negative_rate_isolated(self, make_entry, settings):
        """A negative rate fails only that worker."""
        engine = TimecardEngine(settings=settings)
        entries = [make_entry(MONDAY, worker_id="alice"), make_entry(MONDAY, worker_id="bob")]

        result = engine.calculate_pay_period(entries, {"alice": "10", "bob": "-5"})

        assert set(result.results) == {"alice"}
        assert "negative" in result.errors["bob"]

    def test_unexpected_error_recorded(self, make_entry, settings, monkeypatch):
        """Unexpected exceptions are recorded, not raised."""
        engine = TimecardEngine(settings=settings)

        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(engine_module, "calculate_payroll", boom)
        result = engine.calculate_pay_period([make_entry(MONDAY)], {"worker-1": "10"})

        assert result.errors == {"worker-1": "Unexpected error: boom"}
        assert result.total_gross == Decimal("0")

    def test_period_passed_through(self, make_entry, settings):
        """The period filters every worker's entries."""
        engine = TimecardEngine(settings=settings)
        entries = [make_entry(MONDAY), make_entry(TUESDAY)]

        result = engine.calculate_pay_period(
            entries,
            {"worker-1": "10"},
            period_start=date(2024, 1, 9),
            period_end=date(2024, 1, 9),
        )

        assert result.period_start == date(2024, 1, 9)
        assert result.results["worker-1"].payroll.regular_hours == Decimal("7.5")

    @pytest.mark.parametrize("skip,expect_error", [(False, True), (True, False)])
    def test_open_entries(self, make_entry, settings, skip, expect_error):
        """Open entries fail the worker unless skipped."""
        engine = TimecardEngine(settings=settings)
        entries = [make_entry(MONDAY), make_entry(TUESDAY, end=None)]

        result = engine.calculate_pay_period(
            entries, {"worker-1": "10"}, skip_open_entries=skip
        )

        assert ("worker-1" in result.errors) is expect_error
