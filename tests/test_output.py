"""Tests for the text report and PDF output."""

from datetime import time

import pytest

from smartshift.domain.models import AvailabilityMatrix
from smartshift.output.pdf_generator import PDFGenerator, hex_to_rgb
from smartshift.output.report import ReportGenerator
from smartshift.scheduling.scheduler import SmartScheduler


@pytest.fixture
def schedule(make_instance):
    """A week with one unfilled and one fully staffed shift."""
    instances = [
        make_instance(day=0, template_id="morning", name="Morning", required=2),
        make_instance(day=1, template_id="evening", name="Evening", start=time(16), end=time(22)),
    ]
    availability = AvailabilityMatrix()
    availability.set_available("s1", instances[0].date, "morning")
    availability.set_available("s2", instances[0].date, "morning")
    result = SmartScheduler().generate(instances, availability, ["s1", "s2"])
    return result, instances


class TestReportGenerator:
    """Tests for ReportGenerator."""

    def test_contains_grid_stats_and_warnings(self, schedule):
        result, instances = schedule
        text = ReportGenerator(staff_names={"s1": "Alice"}).generate_to_string(result, instances)

        assert "WEEKLY SCHEDULE - 2024-01-15 to 2024-01-16" in text
        assert "Alice, s2" in text
        assert "Coverage:          67%" in text
        assert "CRITICAL (1):" in text
        assert "<--" in text

    def test_no_warnings(self, make_instance):
        instance = make_instance()
        availability = AvailabilityMatrix.all_available(["s1"], [instance])
        result = SmartScheduler().generate([instance], availability, ["s1"])

        text = ReportGenerator().generate_to_string(result, [instance])
        assert "None - schedule looks good" in text

    def test_writes_file(self, schedule, tmp_path):
        result, instances = schedule
        path = tmp_path / "report.txt"
        content = ReportGenerator().generate(result, instances, path)
        assert path.read_text() == content


class TestHexToRgb:
    def test_valid(self):
        assert hex_to_rgb("#FF0000") == (1.0, 0.0, 0.0)

    @pytest.mark.parametrize("value", [None, "", "red", "#FFF", "#GGGGGG"])
    def test_invalid(self, value):
        assert hex_to_rgb(value) is None


class TestPDFGenerator:
    """Tests for PDFGenerator."""

    def test_generate_to_buffer(self, schedule):
        pytest.importorskip("reportlab")
        result, instances = schedule
        buffer = PDFGenerator().generate_to_buffer(result, instances)
        assert buffer.read(5) == b"%PDF-"

    def test_generate_file(self, schedule, tmp_path):
        pytest.importorskip("reportlab")
        result, instances = schedule
        path = tmp_path / "week.pdf"
        PDFGenerator().generate(result, instances, path, include_summary=False)
        assert path.exists()
        assert path.stat().st_size > 0

    def test_empty_schedule(self):
        pytest.importorskip("reportlab")
        from smartshift.domain.models import ScheduleResult

        buffer = PDFGenerator().generate_to_buffer(ScheduleResult(), [])
        assert buffer.getvalue().startswith(b"%PDF-")
