"""Validation module for verifying schedule correctness.

This module checks the hard guarantees of a generated schedule. Every
schedule the engines produce should pass; a failure means an engine bug,
not a staffing shortfall.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from smartshift.domain.models import (
    AvailabilityMatrix,
    EngineConfig,
    InstanceKey,
    ScheduleResult,
    ShiftInstance,
)


class ValidationErrorType(Enum):
    """Types of validation errors."""

    UNKNOWN_STAFF = "unknown_staff"
    UNKNOWN_INSTANCE = "unknown_instance"
    DUPLICATE_ASSIGNMENT = "duplicate_assignment"
    STAFF_NOT_AVAILABLE = "staff_not_available"
    OVERLAPPING_SHIFTS = "overlapping_shifts"
    MULTIPLE_SHIFTS_PER_DAY = "multiple_shifts_per_day"
    OVERFILLED = "overfilled"
    HOURS_MISMATCH = "hours_mismatch"
    SHIFT_COUNT_MISMATCH = "shift_count_mismatch"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    staff_id: Optional[str] = None
    date: Optional[date] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.staff_id:
            parts.append(f"Staff {self.staff_id}:")
        parts.append(self.message)
        if self.date is not None:
            parts.append(f"({self.date.isoformat()})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a schedule."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)


class ScheduleValidator:
    """Validates generated schedules against the engine's guarantees.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate(schedule, instances, availability, staff_ids)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def validate(
        self,
        schedule: ScheduleResult,
        instances: list[ShiftInstance],
        availability: AvailabilityMatrix,
        staff_ids: list[str],
    ) -> ValidationResult:
        """Validate a complete schedule.

        Args:
            schedule: The schedule to validate.
            instances: Shift instances it was generated for.
            availability: Availability it was generated from.
            staff_ids: Staff it was generated for.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult(is_valid=True)
        by_key = {i.key: i for i in instances}
        known_staff = set(staff_ids)

        for sid, days in sorted(schedule.assignments.items()):
            if sid not in known_staff:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.UNKNOWN_STAFF,
                        message=f"Unknown staff ID: {sid}",
                        staff_id=sid,
                    )
                )
                continue

            for shift_date, template_ids in sorted(days.items()):
                held = self._validate_day(
                    result, sid, shift_date, template_ids, by_key, availability
                )
                self._validate_overlaps(result, sid, shift_date, held)

        self._validate_fill_counts(result, schedule, instances)
        self._validate_totals(result, schedule, by_key)

        if not schedule.assignments and instances and staff_ids:
            result.add_warning("Schedule has no assignments")

        return result

    def _validate_day(
        self,
        result: ValidationResult,
        sid: str,
        shift_date: date,
        template_ids: list[str],
        by_key: dict[InstanceKey, ShiftInstance],
        availability: AvailabilityMatrix,
    ) -> list[ShiftInstance]:
        """Check one staff member's shifts on one date."""
        held = []
        if len(set(template_ids)) != len(template_ids):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DUPLICATE_ASSIGNMENT,
                    message=f"Same shift assigned twice: {template_ids}",
                    staff_id=sid,
                    date=shift_date,
                )
            )

        if len(template_ids) > 1 and not self.config.allow_multiple_shifts_per_day:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.MULTIPLE_SHIFTS_PER_DAY,
                    message=f"{len(template_ids)} shifts on one day",
                    staff_id=sid,
                    date=shift_date,
                )
            )

        for template_id in template_ids:
            instance = by_key.get(InstanceKey(shift_date, template_id))
            if instance is None:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.UNKNOWN_INSTANCE,
                        message=f"No shift {template_id} is required on this date",
                        staff_id=sid,
                        date=shift_date,
                    )
                )
                continue

            if not availability.is_available(sid, shift_date, template_id):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.STAFF_NOT_AVAILABLE,
                        message=f"Assigned to {instance.label} but not available",
                        staff_id=sid,
                        date=shift_date,
                    )
                )
            held.append(instance)
        return held

    def _validate_overlaps(
        self,
        result: ValidationResult,
        sid: str,
        shift_date: date,
        held: list[ShiftInstance],
    ) -> None:
        for i, first in enumerate(held):
            for second in held[i + 1 :]:
                if first.overlaps(second):
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.OVERLAPPING_SHIFTS,
                            message=(
                                f"{first.shift_template_id} overlaps "
                                f"{second.shift_template_id}"
                            ),
                            staff_id=sid,
                            date=shift_date,
                        )
                    )

    def _validate_fill_counts(
        self,
        result: ValidationResult,
        schedule: ScheduleResult,
        instances: list[ShiftInstance],
    ) -> None:
        for instance in instances:
            assigned = len(schedule.staff_for(instance.key))
            if assigned > instance.required_count:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.OVERFILLED,
                        message=(
                            f"{instance.label} has {assigned} staff, "
                            f"needs {instance.required_count}"
                        ),
                        date=instance.date,
                        details={"assigned": assigned, "required": instance.required_count},
                    )
                )

    def _validate_totals(
        self,
        result: ValidationResult,
        schedule: ScheduleResult,
        by_key: dict[InstanceKey, ShiftInstance],
    ) -> None:
        """Check staff_hours and staff_shift_count against the assignments."""
        for sid, hours in sorted(schedule.staff_hours.items()):
            days = schedule.assignments.get(sid, {})
            instances = [
                by_key[InstanceKey(d, tid)]
                for d, tids in days.items()
                for tid in tids
                if InstanceKey(d, tid) in by_key
            ]
            expected_hours = sum(i.duration_hours for i in instances)
            if abs(expected_hours - hours) > 1e-6:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.HOURS_MISMATCH,
                        message=f"Reported {hours:g}h, assignments add up to {expected_hours:g}h",
                        staff_id=sid,
                    )
                )

            count = schedule.staff_shift_count.get(sid, 0)
            expected_count = sum(len(tids) for tids in days.values())
            if count != expected_count:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.SHIFT_COUNT_MISMATCH,
                        message=f"Reported {count} shifts, assignments hold {expected_count}",
                        staff_id=sid,
                    )
                )
