"""Timecard Command Line Interface.

Runs the calculators over JSON request files shaped like the HTTP request
bodies, printing the JSON result.

Usage:
    python -m timecard_engine.cli entry request.json
    python -m timecard_engine.cli week request.json
    python -m timecard_engine.cli payroll request.json --output result.json
    python -m timecard_engine.cli pay-period request.json
    cat request.json | python -m timecard_engine.cli payroll -
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, ValidationError

from timecard_engine.api.schemas import (
    EntryCalculationRequest,
    EntryHoursResponse,
    PayPeriodCalculationRequest,
    PayPeriodResponse,
    PayrollCalculationRequest,
    PayrollResponse,
    WeekCalculationRequest,
    WeeklyHoursResponse,
)
from timecard_engine.calculators.engine import TimecardEngine
from timecard_engine.calculators.errors import TimecardError
from timecard_engine.config import Settings, get_settings


class TimecardCli:
    """Timecard Command Line Interface."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m timecard_engine.cli",
            description="Hours and payroll calculations over JSON files",
        )
        parser.add_argument(
            "--log-level",
            type=str,
            default=None,
            help="Logging level (default: $LOG_LEVEL)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        for name, help_text in (
            ("entry", "Calculate hours for one completed entry"),
            ("week", "Reconcile one worker's entries for one ISO week"),
            ("payroll", "Calculate one worker's payroll"),
            ("pay-period", "Calculate payroll for several workers"),
        ):
            command = subparsers.add_parser(name, help=help_text)
            command.add_argument(
                "input",
                type=str,
                help="Request JSON file, or - for stdin",
            )
            command.add_argument(
                "--output",
                type=str,
                help="Write the result to this file instead of stdout",
            )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        logging.basicConfig(level=(parsed.log_level or self.settings.log_level).upper())

        # Dispatch to command handler
        handlers: dict[str, Callable[[str], BaseModel]] = {
            "entry": self._cmd_entry,
            "week": self._cmd_week,
            "payroll": self._cmd_payroll,
            "pay-period": self._cmd_pay_period,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            raw = sys.stdin.read() if parsed.input == "-" else Path(parsed.input).read_text()
            response = handler(raw)
        except OSError as e:
            print(f"ERROR: cannot read {parsed.input}: {e}", file=sys.stderr)
            return 1
        except ValidationError as e:
            print(f"ERROR: invalid request: {e}", file=sys.stderr)
            return 1
        except (TimecardError, ValueError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

        output = response.model_dump_json(indent=2)
        if parsed.output:
            Path(parsed.output).write_text(output + "\n")
        else:
            print(output)
        return 0

    def _engine(self, request: BaseModel) -> TimecardEngine:
        policy = request.policy.to_policy(self.settings.default_timezone)
        return TimecardEngine(policy, self.settings)

    def _cmd_entry(self, raw: str) -> EntryHoursResponse:
        request = EntryCalculationRequest.model_validate_json(raw)
        result = self._engine(request).calculate_entry(request.entry.to_entry())
        return EntryHoursResponse.from_result(result)

    def _cmd_week(self, raw: str) -> WeeklyHoursResponse:
        request = WeekCalculationRequest.model_validate_json(raw)
        result = self._engine(request).calculate_week(
            [e.to_entry() for e in request.entries],
            skip_open_entries=request.skip_open_entries,
        )
        return WeeklyHoursResponse.from_result(result)

    def _cmd_payroll(self, raw: str) -> PayrollResponse:
        request = PayrollCalculationRequest.model_validate_json(raw)
        calc = self._engine(request).calculate_payroll(
            request.worker_id,
            [e.to_entry() for e in request.entries],
            request.hourly_rate,
            period_start=request.period_start,
            period_end=request.period_end,
            skip_open_entries=request.skip_open_entries,
        )
        return PayrollResponse.from_calculation(calc)

    def _cmd_pay_period(self, raw: str) -> PayPeriodResponse:
        request = PayPeriodCalculationRequest.model_validate_json(raw)
        calc = self._engine(request).calculate_pay_period(
            [e.to_entry() for e in request.entries],
            request.hourly_rates,
            period_start=request.period_start,
            period_end=request.period_end,
            skip_open_entries=request.skip_open_entries,
        )
        return PayPeriodResponse.from_calculation(calc)


def main() -> int:
    """CLI entry point."""
    cli = TimecardCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
