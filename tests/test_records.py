"""Tests for the write-back records."""

from datetime import date

import pytest

from smartshift.domain.models import (
    ScheduleResult,
    ScheduleStats,
    ScheduleWarning,
    Severity,
    WarningType,
)
from smartshift.output.records import (
    build_generation_record,
    build_schedule_rows,
    week_bounds,
)


@pytest.fixture
def result():
    return ScheduleResult(
        assignments={
            "s2": {date(2024, 1, 16): ["morning"]},
            "s1": {date(2024, 1, 15): ["morning", "evening"]},
        },
        warnings=[ScheduleWarning(Severity.INFO, WarningType.DOUBLE_SHIFT, "double")],
        stats=ScheduleStats(
            total_shifts_required=4,
            total_shifts_filled=3,
            coverage_percent=75,
            fairness_score=80,
        ),
        staff_hours={"s1": 8.0, "s2": 4.0},
        staff_shift_count={"s1": 2, "s2": 1},
    )


class TestWeekBounds:
    def test_inclusive_range(self):
        assert week_bounds(date(2024, 1, 15)) == (date(2024, 1, 15), date(2024, 1, 21))


class TestGenerationRecord:
    """Tests for build_generation_record."""

    def test_snapshot(self, result):
        record = build_generation_record(result, "store-1", date(2024, 1, 15), auto_generated=True)
        assert record.total_shifts_required == 4
        assert record.total_shifts_filled == 3
        assert record.coverage_percent == 75
        assert record.fairness_score == 80
        assert record.total_warnings == 1
        assert record.needs_review is True
        assert record.is_auto_generated is True
        assert record.warnings[0]["type"] == "double_shift"
        assert record.stats["totalShiftsFilled"] == 3

    def test_to_dict(self, result):
        data = build_generation_record(result, "store-1", date(2024, 1, 15)).to_dict()
        assert data["week_start_date"] == "2024-01-15"
        assert data["store_id"] == "store-1"
        assert data["is_auto_generated"] is False

    def test_no_warnings_needs_no_review(self):
        record = build_generation_record(ScheduleResult(), "store-1", date(2024, 1, 15))
        assert record.needs_review is False
        assert record.total_warnings == 0


class TestScheduleRows:
    """Tests for build_schedule_rows."""

    def test_one_row_per_assignment(self, result):
        rows = build_schedule_rows(result, "store-1", generation_id="gen-9")
        assert [(r.scheduled_date.day, r.staff_id, r.shift_template_id) for r in rows] == [
            (15, "s1", "morning"),
            (15, "s1", "evening"),
            (16, "s2", "morning"),
        ]
        assert all(r.store_id == "store-1" for r in rows)
        assert all(r.generation_id == "gen-9" for r in rows)

    def test_to_dict(self, result):
        row = build_schedule_rows(result, "store-1")[0]
        assert row.to_dict() == {
            "staff_id": "s1",
            "store_id": "store-1",
            "shift_template_id": "morning",
            "scheduled_date": "2024-01-15",
            "generation_id": None,
        }

    def test_empty_assignment(self):
        assert build_schedule_rows(ScheduleResult(), "store-1") == []
