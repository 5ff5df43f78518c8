"""Tests for schedule validation."""

from datetime import time

import pytest

from smartshift.domain.models import AvailabilityMatrix, EngineConfig, ScheduleResult
from smartshift.validation.validator import (
    ScheduleValidator,
    ValidationErrorType,
)


class TestScheduleValidator:
    """Tests for ScheduleValidator."""

    @pytest.fixture
    def validator(self):
        return ScheduleValidator()

    @pytest.fixture
    def shifts(self, make_instance):
        return [
            make_instance(template_id="morning", start=time(8), end=time(12)),
            make_instance(template_id="lunch", start=time(11), end=time(15)),
            make_instance(template_id="evening", start=time(16), end=time(20)),
        ]

    def _result(self, assignments, shifts):
        by_key = {(i.date, i.shift_template_id): i for i in shifts}
        hours = {}
        counts = {}
        for sid, days in assignments.items():
            hours[sid] = sum(by_key[(d, t)].duration_hours for d, ts in days.items() for t in ts)
            counts[sid] = sum(len(ts) for ts in days.values())
        return ScheduleResult(assignments=assignments, staff_hours=hours, staff_shift_count=counts)

    def _error_types(self, validation):
        return {e.error_type for e in validation.errors}

    def test_valid_schedule_passes(self, validator, shifts, week_start):
        availability = AvailabilityMatrix.all_available(["A", "B"], shifts)
        result = self._result(
            {"A": {week_start: ["morning", "evening"]}, "B": {week_start: ["lunch"]}}, shifts
        )
        validation = validator.validate(result, shifts, availability, ["A", "B"])
        assert validation.is_valid, [str(e) for e in validation.errors]

    def test_unknown_staff(self, validator, shifts, week_start):
        availability = AvailabilityMatrix.all_available(["Z"], shifts)
        result = self._result({"Z": {week_start: ["morning"]}}, shifts)
        validation = validator.validate(result, shifts, availability, ["A"])
        assert ValidationErrorType.UNKNOWN_STAFF in self._error_types(validation)

    def test_unknown_instance(self, validator, shifts, week_start):
        availability = AvailabilityMatrix.all_available(["A"], shifts)
        result = ScheduleResult(
            assignments={"A": {week_start: ["night"]}},
            staff_hours={"A": 0.0},
            staff_shift_count={"A": 1},
        )
        validation = validator.validate(result, shifts, availability, ["A"])
        assert ValidationErrorType.UNKNOWN_INSTANCE in self._error_types(validation)

    def test_unavailable_staff(self, validator, shifts, week_start):
        result = self._result({"A": {week_start: ["morning"]}}, shifts)
        validation = validator.validate(result, shifts, AvailabilityMatrix(), ["A"])
        assert ValidationErrorType.STAFF_NOT_AVAILABLE in self._error_types(validation)

    def test_overlapping_shifts(self, validator, shifts, week_start):
        availability = AvailabilityMatrix.all_available(["A"], shifts)
        result = self._result({"A": {week_start: ["morning", "lunch"]}}, shifts)
        validation = validator.validate(result, shifts, availability, ["A"])
        assert ValidationErrorType.OVERLAPPING_SHIFTS in self._error_types(validation)

    def test_multiple_shifts_per_day_when_disallowed(self, shifts, week_start):
        validator = ScheduleValidator(EngineConfig(allow_multiple_shifts_per_day=False))
        availability = AvailabilityMatrix.all_available(["A"], shifts)
        result = self._result({"A": {week_start: ["morning", "evening"]}}, shifts)
        validation = validator.validate(result, shifts, availability, ["A"])
        assert self._error_types(validation) == {ValidationErrorType.MULTIPLE_SHIFTS_PER_DAY}

    def test_overfilled(self, validator, shifts, week_start):
        availability = AvailabilityMatrix.all_available(["A", "B"], shifts)
        result = self._result(
            {"A": {week_start: ["morning"]}, "B": {week_start: ["morning"]}}, shifts
        )
        validation = validator.validate(result, shifts, availability, ["A", "B"])
        assert self._error_types(validation) == {ValidationErrorType.OVERFILLED}

    def test_duplicate_assignment(self, validator, shifts, week_start):
        availability = AvailabilityMatrix.all_available(["A"], shifts)
        result = self._result({"A": {week_start: ["evening", "evening"]}}, shifts)
        validation = validator.validate(result, shifts, availability, ["A"])
        assert ValidationErrorType.DUPLICATE_ASSIGNMENT in self._error_types(validation)

    def test_totals_mismatch(self, validator, shifts, week_start):
        availability = AvailabilityMatrix.all_available(["A"], shifts)
        result = ScheduleResult(
            assignments={"A": {week_start: ["morning"]}},
            staff_hours={"A": 8.0},
            staff_shift_count={"A": 2},
        )
        validation = validator.validate(result, shifts, availability, ["A"])
        assert self._error_types(validation) == {
            ValidationErrorType.HOURS_MISMATCH,
            ValidationErrorType.SHIFT_COUNT_MISMATCH,
        }

    def test_empty_schedule_warns(self, validator, shifts):
        result = ScheduleResult(staff_hours={"A": 0.0}, staff_shift_count={"A": 0})
        validation = validator.validate(result, shifts, AvailabilityMatrix(), ["A"])
        assert validation.is_valid
        assert validation.warnings == ["Schedule has no assignments"]

    def test_error_str(self, validator, shifts, week_start):
        result = self._result({"A": {week_start: ["morning"]}}, shifts)
        validation = validator.validate(result, shifts, AvailabilityMatrix(), ["A"])
        assert str(validation.errors[0]).startswith("[staff_not_available] Staff A:")
