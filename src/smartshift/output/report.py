"""Plain-text weekly schedule report for human review.

The report shows:
- A grid of dates by shift with the assigned staff
- Per-staff hours and shift counts
- Coverage and fairness stats
- Warnings grouped by severity
"""

from pathlib import Path
from typing import Optional, Union

from smartshift.domain.models import ScheduleResult, Severity, ShiftInstance


class ReportGenerator:
    """Generates the text report of a weekly schedule."""

    def __init__(self, staff_names: Optional[dict[str, str]] = None):
        """Initialize the generator.

        Args:
            staff_names: Optional display names by staff id.
        """
        self.staff_names = staff_names or {}

    def generate(
        self,
        result: ScheduleResult,
        instances: list[ShiftInstance],
        output_path: Union[str, Path],
    ) -> str:
        """Generate the report and save it to a file.

        Args:
            result: Generated schedule.
            instances: Shift instances the schedule was generated for.
            output_path: Path to save the text file.

        Returns:
            The generated text content.
        """
        content = self._generate_content(result, instances)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(
        self,
        result: ScheduleResult,
        instances: list[ShiftInstance],
    ) -> str:
        """Generate the report and return it as a string."""
        return self._generate_content(result, instances)

    def _name(self, staff_id: str) -> str:
        return self.staff_names.get(staff_id, staff_id)

    def _generate_content(
        self,
        result: ScheduleResult,
        instances: list[ShiftInstance],
    ) -> str:
        lines = []

        lines.append("=" * 80)
        if instances:
            first = min(i.date for i in instances)
            last = max(i.date for i in instances)
            lines.append(f"WEEKLY SCHEDULE - {first.isoformat()} to {last.isoformat()}")
        else:
            lines.append("WEEKLY SCHEDULE")
        lines.append("=" * 80)
        lines.append("")

        lines.extend(self._shift_grid(result, instances))
        lines.append("")
        lines.extend(self._staff_table(result))
        lines.append("")
        lines.extend(self._stats_block(result))
        lines.append("")
        lines.extend(self._warnings_block(result))

        return "\n".join(lines) + "\n"

    def _shift_grid(
        self,
        result: ScheduleResult,
        instances: list[ShiftInstance],
    ) -> list[str]:
        lines = ["-" * 80, "SHIFTS", "-" * 80]
        lines.append(f"{'Day':<16} {'Shift':<24} {'Filled':>7}  Staff")
        lines.append("-" * 80)

        ordered = sorted(instances, key=lambda i: (i.date, i.start_minutes, i.shift_template_id))
        for instance in ordered:
            staff = result.staff_for(instance.key)
            filled = min(len(staff), instance.required_count)
            marker = "" if filled == instance.required_count else "  <--"
            shift = (
                f"{instance.shift_name} "
                f"{instance.start_time.strftime('%H:%M')}-{instance.end_time.strftime('%H:%M')}"
            )
            names = ", ".join(self._name(sid) for sid in staff) or "-"
            lines.append(
                f"{instance.day_name + ' ' + instance.date.isoformat():<16} "
                f"{shift[:24]:<24} {filled:>3}/{instance.required_count:<3}  {names}{marker}"
            )
        return lines

    def _staff_table(self, result: ScheduleResult) -> list[str]:
        lines = ["-" * 80, "STAFF", "-" * 80]
        lines.append(f"{'Staff':<24} {'Shifts':>7} {'Hours':>8}")
        lines.append("-" * 80)
        for sid in sorted(result.staff_hours):
            lines.append(
                f"{self._name(sid)[:24]:<24} "
                f"{result.staff_shift_count.get(sid, 0):>7} "
                f"{result.staff_hours[sid]:>8.1f}"
            )
        return lines

    def _stats_block(self, result: ScheduleResult) -> list[str]:
        stats = result.stats
        return [
            "-" * 80,
            "STATS",
            "-" * 80,
            f"  Shifts filled:     {stats.total_shifts_filled}/{stats.total_shifts_required}",
            f"  Coverage:          {stats.coverage_percent}%",
            f"  Fairness score:    {stats.fairness_score}",
            f"  Hours per staff:   avg {stats.avg_hours_per_staff:.1f}, "
            f"min {stats.min_hours:.1f}, max {stats.max_hours:.1f}, "
            f"variance {stats.hours_variance:.1f}",
            f"  Shifts per staff:  avg {stats.avg_shifts_per_staff:.1f}, "
            f"min {stats.min_shifts}, max {stats.max_shifts}",
        ]

    def _warnings_block(self, result: ScheduleResult) -> list[str]:
        lines = ["-" * 80, f"WARNINGS ({len(result.warnings)})", "-" * 80]
        if not result.warnings:
            lines.append("  None - schedule looks good")
            return lines

        for severity in Severity:
            group = result.warnings_by_severity(severity)
            if not group:
                continue
            lines.append(f"{severity.value.upper()} ({len(group)}):")
            for warning in group:
                lines.append(f"  - {warning.message}")
        return lines
