#!/usr/bin/env python
"""Weekly Payroll Example - Library-first demonstration.

This example shows how to use the timecard engine as a library:
1. Build an explicit policy (no env vars)
2. Calculate single entries
3. Reconcile a week against the weekly overtime threshold
4. Price a pay period for several workers

Usage:
    python main.py
    python main.py --rate 22.50 --timezone America/Chicago
    python main.py --mode compound
"""

from __future__ import annotations

import argparse
import sys
from datetime import date, datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

from timecard_engine.calculators import (
    Policy,
    ShiftDifferentialMode,
    TimecardEngine,
    TimeEntry,
)
from timecard_engine.config import Settings


# =============================================================================
# Output Helpers
# =============================================================================

def print_header(title: str) -> None:
    """Print a section header."""
    print()
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)


def print_step(step: int, description: str) -> None:
    """Print a step header."""
    print()
    print(f"[Step {step}] {description}")
    print("-" * 40)


# =============================================================================
# Sample Data
# =============================================================================

def sample_entries(zone: ZoneInfo) -> list[TimeEntry]:
    """Six 7.5h shifts for Alice and a short, a long and a weekend shift for Bob."""
    monday = date(2024, 1, 8)

    def at(day: date, hour: int, minute: int = 0) -> datetime:
        return datetime(day.year, day.month, day.day, hour, minute, tzinfo=zone)

    entries = []
    for offset in range(6):
        day = monday + timedelta(days=offset)
        entries.append(
            TimeEntry(
                entry_id=f"alice-{day.isoformat()}",
                worker_id="alice",
                clock_in=at(day, 9),
                clock_out=at(day, 16, 30),
            )
        )

    tuesday = monday + timedelta(days=1)
    saturday = monday + timedelta(days=5)
    entries += [
        TimeEntry("bob-short", "bob", at(monday, 10), at(monday, 10, 40)),
        TimeEntry(
            "bob-long",
            "bob",
            at(tuesday, 6),
            at(tuesday, 20),
            break_start=at(tuesday, 12),
            break_end=at(tuesday, 12, 45),
        ),
        TimeEntry(
            "bob-weekend",
            "bob",
            at(saturday, 8),
            at(saturday, 14),
            hourly_rate=Decimal("30"),
        ),
    ]
    return entries


# =============================================================================
# Demo
# =============================================================================

def run_demo(rate: Decimal, timezone: str, mode: ShiftDifferentialMode) -> None:
    """Run the weekly payroll demonstration."""
    print_header("Timecard Engine - Weekly Payroll")

    print_step(1, "Create explicit policy")
    policy = Policy(timezone=timezone, shift_differential_mode=mode)
    engine = TimecardEngine(
        policy,
        Settings(
            engine_version="example",
            default_timezone=timezone,
            host="127.0.0.1",
            port=8000,
            debug=False,
            log_level="WARNING",
        ),
    )
    print(f"  Daily overtime after: {policy.overtime_after_hours_per_day}h")
    print(f"  Double-time after: {policy.double_time_after_hours_per_day}h")
    print(f"  Weekly regular hours: {policy.weekly_regular_hours}h")
    print(f"  Shift differential mode: {policy.shift_differential_mode.value}")

    entries = sample_entries(policy.zone)

    print_step(2, "Calculate individual entries")
    for entry in entries:
        if entry.worker_id != "bob":
            continue
        result = engine.calculate_entry(entry)
        print(
            f"  {entry.entry_id}: raw {result.raw_hours}h, gross {result.gross_hours}h, "
            f"break {result.break_hours}h ({result.break_source.value}), net {result.net_hours}h"
        )
        print(
            f"    tiers {result.regular_hours}/{result.overtime_hours}/"
            f"{result.double_time_hours}, shift x{result.shift_multiplier}"
        )

    print_step(3, "Reconcile Alice's week")
    week = engine.calculate_week([e for e in entries if e.worker_id == "alice"])
    print(f"  Week: {week.week} ({week.week.start_date} to {week.week.end_date})")
    print(f"  Regular: {week.regular_hours}h  Overtime: {week.overtime_hours}h")
    for allocation in week.allocations:
        if allocation.weekly_overtime_hours:
            print(
                f"    {allocation.entry.entry_id}: "
                f"{allocation.weekly_overtime_hours}h moved to weekly overtime"
            )

    print_step(4, "Price the pay period")
    period = engine.calculate_pay_period(
        entries,
        {"alice": rate, "bob": rate},
        period_start=date(2024, 1, 8),
        period_end=date(2024, 1, 14),
    )
    for worker_id, calc in period.results.items():
        payroll = calc.payroll
        print(f"  {worker_id}: ${payroll.gross_pay:,.2f} (calculation {calc.calculation_id})")
        print(
            f"    regular ${payroll.regular_pay:,.2f}, overtime ${payroll.overtime_pay:,.2f}, "
            f"double-time ${payroll.double_time_pay:,.2f}"
        )
    for worker_id, message in period.errors.items():
        print(f"  {worker_id}: ERROR {message}")
    print(f"  Total gross: ${period.total_gross:,.2f}")


def main() -> int:
    """Entry point."""
    parser = argparse.ArgumentParser(
        description="Timecard Engine Library Demonstration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
This example uses the engine as a library:
  - Explicit policy (no env vars)
  - Stateless calculations over in-memory entries
  - Deterministic calculation ids

There is no HTTP and no database here.
        """,
    )
    parser.add_argument("--rate", type=Decimal, default=Decimal("20"), help="Hourly rate")
    parser.add_argument("--timezone", default="UTC", help="IANA timezone for the policy")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ShiftDifferentialMode],
        default=ShiftDifferentialMode.INFORMATIONAL.value,
        help="Shift differential mode",
    )

    args = parser.parse_args()

    try:
        run_demo(args.rate, args.timezone, ShiftDifferentialMode(args.mode))
        return 0
    except Exception as e:
        print(f"\nERROR: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
