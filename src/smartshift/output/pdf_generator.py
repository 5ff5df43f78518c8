"""PDF generation for weekly schedule output.

This module creates printable PDF schedules showing:
- A weekly grid of shifts by day with assigned staff
- Per-staff hours and coverage stats
- Warnings that need review
"""

import re
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from smartshift.domain.models import (
    DAY_NAMES,
    FillStatus,
    ScheduleResult,
    Severity,
    ShiftInstance,
)

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    FillStatus.FILLED: (0.75, 0.9, 0.75),  # Green
    FillStatus.PARTIAL: (1.0, 0.9, 0.55),  # Yellow
    FillStatus.UNFILLED: (0.95, 0.6, 0.6),  # Red
    "empty": (0.95, 0.95, 0.95),  # Light gray
    Severity.CRITICAL: (0.8, 0.1, 0.1),
    Severity.WARNING: (0.85, 0.5, 0.0),
    Severity.INFO: (0.3, 0.3, 0.7),
}

_HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{6})$")


def hex_to_rgb(value: Optional[str]) -> Optional[tuple[float, float, float]]:
    """Convert ``#RRGGBB`` to a 0-1 RGB tuple; None for anything else."""
    if not value:
        return None
    match = _HEX_COLOR.match(value)
    if not match:
        return None
    digits = match.group(1)
    return tuple(int(digits[i : i + 2], 16) / 255.0 for i in (0, 2, 4))


class PDFGenerator:
    """Generates printable weekly schedule PDFs.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(result, instances, "week.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
        staff_names: Optional[dict[str, str]] = None,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.staff_names = staff_names or {}

    def generate(
        self,
        result: ScheduleResult,
        instances: list[ShiftInstance],
        output_path: Union[str, Path],
        include_summary: bool = True,
    ) -> None:
        """Generate the PDF and save it to a file.

        Args:
            result: Generated schedule.
            instances: Shift instances the schedule covers.
            output_path: Path to save the PDF.
            include_summary: Whether to include the stats and warnings page.
        """
        try:
            from reportlab.lib.pagesizes import letter, landscape
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=landscape(letter))
        self._draw_week_page(c, result, instances)
        if include_summary:
            self._draw_summary_page(c, result, instances)
        c.save()

    def generate_to_buffer(
        self,
        result: ScheduleResult,
        instances: list[ShiftInstance],
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate the PDF and return it as a bytes buffer."""
        try:
            from reportlab.lib.pagesizes import letter, landscape
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(letter))
        self._draw_week_page(c, result, instances)
        if include_summary:
            self._draw_summary_page(c, result, instances)
        c.save()
        buffer.seek(0)
        return buffer

    def _name(self, staff_id: str) -> str:
        return self.staff_names.get(staff_id, staff_id)

    def _week_dates(self, instances: list[ShiftInstance]) -> list[date]:
        if not instances:
            return []
        first = min(i.date for i in instances)
        monday = date.fromordinal(first.toordinal() - first.weekday())
        return [date.fromordinal(monday.toordinal() + d) for d in range(7)]

    def _draw_header(self, c, title: str, subtitle: str) -> None:
        c.setFont("Helvetica-Bold", 16)
        c.drawString(self.margin, self.page_height - self.margin - 20, title)
        c.setFont("Helvetica", 10)
        c.drawString(self.margin, self.page_height - self.margin - 35, subtitle)

    def _draw_week_page(
        self,
        c,
        result: ScheduleResult,
        instances: list[ShiftInstance],
    ) -> None:
        """Draw the week grid: one row per shift template, one column per day."""
        dates = self._week_dates(instances)
        title = "Weekly Schedule"
        if dates:
            title += f" - {dates[0].strftime('%b %d')} to {dates[-1].strftime('%b %d, %Y')}"
        stats = result.stats
        self._draw_header(
            c,
            title,
            f"Coverage {stats.coverage_percent}% "
            f"({stats.total_shifts_filled}/{stats.total_shifts_required})  "
            f"Fairness {stats.fairness_score}  Warnings {len(result.warnings)}",
        )

        by_key = {(i.date, i.shift_template_id): i for i in instances}
        templates: dict[str, ShiftInstance] = {}
        for instance in sorted(instances, key=lambda i: (i.start_minutes, i.shift_template_id)):
            templates.setdefault(instance.shift_template_id, instance)

        label_width = 110
        top = self.page_height - self.margin - 60
        col_width = (self.page_width - 2 * self.margin - label_width) / 7
        row_height = min(
            70, (top - self.margin - 30) / max(len(templates), 1)
        )

        # Day header row
        c.setFont("Helvetica-Bold", 9)
        c.setFillColorRGB(0, 0, 0)
        for col, shift_date in enumerate(dates):
            x = self.margin + label_width + col * col_width
            c.drawCentredString(
                x + col_width / 2,
                top + 5,
                f"{DAY_NAMES[col]} {shift_date.strftime('%m/%d')}",
            )

        for row, (template_id, sample) in enumerate(templates.items()):
            y = top - (row + 1) * row_height

            swatch = hex_to_rgb(sample.color)
            if swatch:
                c.setFillColorRGB(*swatch)
                c.rect(self.margin, y + row_height - 14, 8, 8, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica-Bold", 9)
            c.drawString(self.margin + 12, y + row_height - 13, sample.shift_name[:18])
            c.setFont("Helvetica", 7)
            c.drawString(
                self.margin + 12,
                y + row_height - 23,
                f"{sample.start_time.strftime('%H:%M')}-{sample.end_time.strftime('%H:%M')}",
            )

            for col, shift_date in enumerate(dates):
                x = self.margin + label_width + col * col_width
                instance = by_key.get((shift_date, template_id))
                self._draw_cell(c, result, instance, x, y, col_width, row_height)

        c.showPage()

    def _draw_cell(
        self,
        c,
        result: ScheduleResult,
        instance: Optional[ShiftInstance],
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        """Draw one day/shift cell with its staff."""
        if instance is None:
            c.setFillColorRGB(*COLORS["empty"])
            c.rect(x, y, width, height, fill=1, stroke=1)
            return

        staff = result.staff_for(instance.key)
        filled = min(len(staff), instance.required_count)
        if filled == 0:
            status = FillStatus.UNFILLED
        elif filled < instance.required_count:
            status = FillStatus.PARTIAL
        else:
            status = FillStatus.FILLED

        c.setStrokeColorRGB(0.6, 0.6, 0.6)
        c.setLineWidth(0.5)
        c.setFillColorRGB(*COLORS[status])
        c.rect(x, y, width, height, fill=1, stroke=1)

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 7)
        c.drawRightString(x + width - 3, y + height - 9, f"{filled}/{instance.required_count}")

        c.setFont("Helvetica", 7)
        line_y = y + height - 18
        for sid in staff:
            if line_y < y + 3:
                break
            c.drawString(x + 3, line_y, self._name(sid)[:16])
            line_y -= 9

    def _draw_summary_page(
        self,
        c,
        result: ScheduleResult,
        instances: list[ShiftInstance],
    ) -> None:
        """Draw stats, per-staff hours and the warning list."""
        self._draw_header(c, "Schedule Summary", f"{len(instances)} shifts, {len(result.staff_hours)} staff")

        y = self.page_height - self.margin - 60
        stats = result.stats

        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Overview")
        y -= 18
        c.setFont("Helvetica", 10)
        for line in [
            f"Shifts filled: {stats.total_shifts_filled}/{stats.total_shifts_required} "
            f"({stats.coverage_percent}%)",
            f"Fairness score: {stats.fairness_score}",
            f"Hours per staff: avg {stats.avg_hours_per_staff:.1f}, "
            f"min {stats.min_hours:.1f}, max {stats.max_hours:.1f}",
            f"Shifts per staff: avg {stats.avg_shifts_per_staff:.1f}, "
            f"min {stats.min_shifts}, max {stats.max_shifts}",
        ]:
            c.drawString(self.margin + 20, y, line)
            y -= 14

        # Hours per staff bar chart
        y -= 16
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Hours per Staff")
        y -= 16
        max_hours = max(result.staff_hours.values(), default=0.0) or 1.0
        bar_max = 250
        c.setFont("Helvetica", 8)
        for sid in sorted(result.staff_hours)[:20]:
            hours = result.staff_hours[sid]
            c.setFillColorRGB(0, 0, 0)
            c.drawString(self.margin + 20, y, self._name(sid)[:18])
            c.setFillColorRGB(0.4, 0.6, 0.8)
            c.rect(self.margin + 120, y - 1, bar_max * hours / max_hours, 8, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(self.margin + 125 + bar_max * hours / max_hours, y, f"{hours:.1f}h")
            y -= 11

        # Warnings in a second column
        x = self.page_width / 2 + 20
        wy = self.page_height - self.margin - 60
        c.setFont("Helvetica-Bold", 12)
        c.setFillColorRGB(0, 0, 0)
        c.drawString(x, wy, f"Warnings ({len(result.warnings)})")
        wy -= 16
        c.setFont("Helvetica", 8)
        if not result.warnings:
            c.drawString(x + 10, wy, "None")
        for warning in result.warnings:
            if wy < self.margin:
                c.drawString(x + 10, wy, "...")
                break
            c.setFillColorRGB(*COLORS[warning.severity])
            c.drawString(x, wy, warning.severity.value.upper()[:4])
            c.setFillColorRGB(0, 0, 0)
            c.drawString(x + 30, wy, warning.message[:70])
            wy -= 11

        c.showPage()
