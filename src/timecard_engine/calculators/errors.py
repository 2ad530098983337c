"""Error types raised by the time and payroll calculators."""

from __future__ import annotations

from typing import Any


class TimecardError(Exception):
    """Base class for calculation errors."""

    code = "TIMECARD_ERROR"


class IncompleteEntryError(TimecardError):
    """Raised when an open entry (no clock-out) is passed to a calculation."""

    code = "INCOMPLETE_ENTRY"

    def __init__(self, entry_id: str | None):
        self.entry_id = entry_id
        super().__init__(
            f"Time entry {entry_id or '<unidentified>'} has no clock-out; "
            "open shifts cannot be calculated"
        )


class InvalidIntervalError(TimecardError):
    """Raised when a shift or break interval is malformed."""

    code = "INVALID_INTERVAL"

    def __init__(self, entry_id: str | None, reason: str):
        self.entry_id = entry_id
        self.reason = reason
        super().__init__(f"Time entry {entry_id or '<unidentified>'}: {reason}")


class InvalidPolicyError(TimecardError):
    """Raised when a policy fails validation at construction."""

    code = "INVALID_POLICY"

    def __init__(self, field_name: str, value: Any, reason: str):
        self.field_name = field_name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid policy {field_name}={value!r}: {reason}")


class InvalidEntrySetError(TimecardError):
    """Raised when a set of entries cannot be aggregated as one unit."""

    code = "INVALID_ENTRY_SET"
