"""Tests for pre-flight checks."""

from datetime import time

import pytest

from smartshift.domain.models import AvailabilityMatrix
from smartshift.exceptions import PreflightError
from smartshift.scheduling.preflight import preflight_check


class TestPreflightCheck:
    """Tests for preflight_check."""

    def test_passes_when_everything_is_staffable(self, daily_morning, all_available):
        report = preflight_check(daily_morning, all_available(["A"], daily_morning), ["A"])
        assert not report.has_blocked
        assert report.blocked_labels() == []

    def test_no_requirements(self, all_available):
        with pytest.raises(PreflightError) as exc_info:
            preflight_check([], AvailabilityMatrix(), ["A"])
        assert exc_info.value.reason == PreflightError.NO_REQUIREMENTS

    def test_no_staff(self, daily_morning):
        with pytest.raises(PreflightError) as exc_info:
            preflight_check(daily_morning, AvailabilityMatrix(), [])
        assert exc_info.value.reason == PreflightError.NO_STAFF

    def test_no_availability(self, daily_morning):
        availability = AvailabilityMatrix()
        availability.set_available("A", daily_morning[0].date, "morning", False)
        with pytest.raises(PreflightError) as exc_info:
            preflight_check(daily_morning, availability, ["A"])
        assert exc_info.value.reason == PreflightError.NO_AVAILABILITY

    def test_availability_of_unknown_staff_does_not_count(self, daily_morning, all_available):
        with pytest.raises(PreflightError) as exc_info:
            preflight_check(daily_morning, all_available(["Z"], daily_morning), ["A"])
        assert exc_info.value.reason == PreflightError.NO_AVAILABILITY

    def test_all_shifts_blocked(self, make_instance, week_start):
        instances = [make_instance(template_id="morning")]
        availability = AvailabilityMatrix()
        availability.set_available("A", week_start, "evening")
        with pytest.raises(PreflightError) as exc_info:
            preflight_check(instances, availability, ["A"])
        assert exc_info.value.reason == PreflightError.ALL_SHIFTS_BLOCKED
        assert len(exc_info.value.details) == 1

    def test_some_shifts_blocked_are_reported(self, make_instance):
        morning = make_instance(template_id="morning")
        evening = make_instance(template_id="evening", start=time(16), end=time(20))
        availability = AvailabilityMatrix()
        availability.set_available("A", morning.date, "morning")

        report = preflight_check([morning, evening], availability, ["A"])
        assert report.has_blocked
        assert report.blocked_instances == [evening]
        assert "Evening" in report.blocked_labels()[0]
