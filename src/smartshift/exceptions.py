"""Exception types raised by the scheduling engine and its callers.

Scheduling shortfalls are never exceptions: an unstaffed shift is reported
as a warning in the result. Exceptions are reserved for caller bugs
(malformed input) and for the caller-side pre-flight guards.
"""

from typing import Optional


class SmartShiftError(Exception):
    """Base class for all smartshift errors."""


class InputContractError(SmartShiftError, ValueError):
    """Input does not match the expected shape.

    Attributes:
        field: Path of the offending field (e.g. ``shiftInstancesRaw[2].startTime``).
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class PreflightError(SmartShiftError):
    """Generation was blocked by a pre-flight check.

    Attributes:
        reason: Machine-readable reason code.
        details: Human-readable hints, e.g. the blocked shifts.
    """

    NO_REQUIREMENTS = "no_requirements"
    NO_STAFF = "no_staff"
    NO_AVAILABILITY = "no_availability"
    ALL_SHIFTS_BLOCKED = "all_shifts_blocked"

    def __init__(self, reason: str, message: str, details: Optional[list[str]] = None):
        self.reason = reason
        self.message = message
        self.details = details or []
        super().__init__(message)
