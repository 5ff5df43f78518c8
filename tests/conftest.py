"""Shared fixtures for smartshift tests."""

from datetime import date, time, timedelta

import pytest

from smartshift.domain.models import AvailabilityMatrix, ShiftInstance

# Monday
WEEK_START = date(2024, 1, 15)


@pytest.fixture
def week_start():
    return WEEK_START


@pytest.fixture
def make_instance():
    """Factory for shift instances in the test week."""

    def _make(
        day: int = 0,
        template_id: str = "morning",
        start: time = time(8, 0),
        end: time = time(12, 0),
        required: int = 1,
        name: str = "",
    ) -> ShiftInstance:
        return ShiftInstance(
            date=WEEK_START + timedelta(days=day),
            shift_template_id=template_id,
            shift_name=name or template_id.title(),
            start_time=start,
            end_time=end,
            required_count=required,
        )

    return _make


@pytest.fixture
def daily_morning(make_instance):
    """One 4-hour morning shift needing one person, Monday to Sunday."""
    return [make_instance(day=d) for d in range(7)]


@pytest.fixture
def all_available():
    """Factory for a matrix where everyone can work everything."""

    def _make(staff_ids, instances) -> AvailabilityMatrix:
        return AvailabilityMatrix.all_available(staff_ids, instances)

    return _make
