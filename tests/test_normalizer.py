"""Tests for the demand normalizer."""

from datetime import date, time

import pytest

from smartshift.domain.models import Severity, ShiftRequirement, ShiftTemplate, WarningType
from smartshift.exceptions import InputContractError
from smartshift.scheduling.normalizer import DemandNormalizer, normalize


@pytest.fixture
def templates():
    return [
        ShiftTemplate("evening", "Evening", time(16, 0), time(22, 0), "#3F51B5"),
        ShiftTemplate("morning", "Morning", time(8, 0), time(12, 0), "#4CAF50"),
    ]


class TestDemandNormalizer:
    """Tests for DemandNormalizer."""

    @pytest.fixture
    def normalizer(self):
        return DemandNormalizer()

    def test_expands_one_instance_per_requirement(self, normalizer, templates, week_start):
        requirements = [ShiftRequirement(d, "morning", 1) for d in range(7)]
        result = normalizer.normalize(requirements, templates, week_start)

        assert len(result.instances) == 7
        assert result.diagnostics == []
        assert [i.date for i in result.instances] == [
            date(2024, 1, 15 + d) for d in range(7)
        ]

    def test_sunday_requirement_lands_on_last_day(self, normalizer, templates, week_start):
        """day_of_week 0 is Sunday, the seventh day of a Monday-first week."""
        result = normalizer.normalize(
            [ShiftRequirement(0, "morning", 2)], templates, week_start
        )
        assert len(result.instances) == 1
        assert result.instances[0].date == date(2024, 1, 21)
        assert result.instances[0].day_name == "Sun"
        assert result.instances[0].required_count == 2

    def test_copies_template_fields(self, normalizer, templates, week_start):
        result = normalizer.normalize(
            [ShiftRequirement(1, "evening", 1)], templates, week_start
        )
        instance = result.instances[0]
        assert instance.shift_name == "Evening"
        assert instance.color == "#3F51B5"
        assert instance.start_time == time(16, 0)
        assert instance.duration_hours == 6.0

    def test_zero_count_skipped_without_diagnostic(self, normalizer, templates, week_start):
        result = normalizer.normalize(
            [ShiftRequirement(1, "morning", 0)], templates, week_start
        )
        assert result.instances == []
        assert result.diagnostics == []

    def test_unknown_template_dropped_with_info(self, normalizer, templates, week_start):
        result = normalizer.normalize(
            [
                ShiftRequirement(1, "ghost", 1),
                ShiftRequirement(1, "morning", 1),
            ],
            templates,
            week_start,
        )
        assert len(result.instances) == 1
        assert len(result.diagnostics) == 1
        diagnostic = result.diagnostics[0]
        assert diagnostic.severity == Severity.INFO
        assert diagnostic.warning_type == WarningType.UNKNOWN_SHIFT_TEMPLATE
        assert diagnostic.shift_template_id == "ghost"
        assert diagnostic.date == week_start

    def test_invalid_day_dropped(self, normalizer, templates, week_start):
        result = normalizer.normalize(
            [ShiftRequirement(7, "morning", 1)], templates, week_start
        )
        assert result.instances == []
        assert result.diagnostics[0].warning_type == WarningType.INVALID_REQUIREMENT

    def test_negative_count_dropped(self, normalizer, templates, week_start):
        result = normalizer.normalize(
            [ShiftRequirement(1, "morning", -2)], templates, week_start
        )
        assert result.instances == []
        assert result.diagnostics[0].warning_type == WarningType.INVALID_REQUIREMENT

    def test_later_duplicate_wins(self, normalizer, templates, week_start, caplog):
        with caplog.at_level("WARNING", logger="smartshift.scheduling.normalizer"):
            result = normalizer.normalize(
                [
                    ShiftRequirement(1, "morning", 1),
                    ShiftRequirement(1, "morning", 3),
                ],
                templates,
                week_start,
            )
        assert len(result.instances) == 1
        assert result.instances[0].required_count == 3
        assert "Duplicate requirement" in caplog.text

    def test_later_zero_duplicate_removes_demand(self, normalizer, templates, week_start):
        result = normalizer.normalize(
            [
                ShiftRequirement(1, "morning", 2),
                ShiftRequirement(1, "morning", 0),
            ],
            templates,
            week_start,
        )
        assert result.instances == []

    def test_output_order(self, normalizer, templates, week_start):
        """Date, then start time, then template id."""
        requirements = [
            ShiftRequirement(2, "evening", 1),
            ShiftRequirement(2, "morning", 1),
            ShiftRequirement(1, "evening", 1),
        ]
        result = normalizer.normalize(requirements, templates, week_start)
        assert [(i.date.day, i.shift_template_id) for i in result.instances] == [
            (15, "evening"),
            (16, "morning"),
            (16, "evening"),
        ]

    def test_week_start_must_be_monday(self, normalizer, templates):
        with pytest.raises(InputContractError) as exc_info:
            normalizer.normalize([], templates, date(2024, 1, 16))
        assert exc_info.value.field == "week_start"

    def test_module_shortcut(self, templates, week_start):
        result = normalize([ShiftRequirement(1, "morning", 1)], templates, week_start)
        assert len(result.instances) == 1
