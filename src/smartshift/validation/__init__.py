"""Validation module for verifying schedule correctness."""

from smartshift.validation.validator import ScheduleValidator, ValidationError

__all__ = [
    "ScheduleValidator",
    "ValidationError",
]
