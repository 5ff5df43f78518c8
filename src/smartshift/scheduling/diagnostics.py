"""Diagnostics and statistics for a generated schedule.

Derives coverage, fairness and per-staff totals from an assignment, and
flags problems that need human review:
- Unfilled and understaffed shifts
- Overworked staff and long runs of consecutive working days
- Same-day double shifts and staff left without any shift
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from smartshift.domain.models import (
    Assignments,
    EngineConfig,
    InstanceKey,
    ScheduleStats,
    ScheduleWarning,
    Severity,
    ShiftInstance,
    WarningType,
)
from smartshift.domain.policies import DefaultFairnessPolicy, FairnessPolicy

logger = logging.getLogger(__name__)


@dataclass
class Summary:
    """Warnings and stats for one schedule."""

    warnings: list[ScheduleWarning]
    stats: ScheduleStats

    def __iter__(self):
        # Allows ``warnings, stats = summarize(...)``
        return iter((self.warnings, self.stats))


def sort_warnings(warnings: list[ScheduleWarning]) -> list[ScheduleWarning]:
    """Stable warning order: severity, date, staff id, template id."""
    return sorted(warnings, key=lambda w: w.sort_key())


def consecutive_runs(dates: list[date]) -> list[tuple[date, int]]:
    """Split worked dates into runs of consecutive calendar days.

    Returns:
        (first date, length) for each run, in date order.
    """
    runs: list[tuple[date, int]] = []
    for d in sorted(set(dates)):
        if runs and runs[-1][0] + timedelta(days=runs[-1][1]) == d:
            runs[-1] = (runs[-1][0], runs[-1][1] + 1)
        else:
            runs.append((d, 1))
    return runs


class ScheduleDiagnostics:
    """Builds warnings and stats from an assignment.

    Example:
        >>> diagnostics = ScheduleDiagnostics(EngineConfig(max_weekly_hours=30))
        >>> summary = diagnostics.summarize(instances, assignments, hours, shifts)
        >>> summary.stats.coverage_percent
        100
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        fairness_policy: Optional[FairnessPolicy] = None,
    ):
        self.config = config or EngineConfig()
        self.fairness_policy = fairness_policy or DefaultFairnessPolicy()

    def summarize(
        self,
        instances: list[ShiftInstance],
        assignments: Assignments,
        hours_assigned: dict[str, float],
        shifts_assigned: dict[str, int],
    ) -> Summary:
        """Compute warnings and stats.

        Args:
            instances: All shift instances of the week.
            assignments: staff id -> date -> template ids.
            hours_assigned: Hours per staff id; its keys define the staff set.
            shifts_assigned: Shift count per staff id.

        Returns:
            Summary with warnings in stable order and the stats block.
        """
        staff_ids = sorted(hours_assigned)
        filled = self._filled_per_instance(instances, assignments)
        stats = self._build_stats(instances, filled, hours_assigned, shifts_assigned)

        if not staff_ids:
            logger.warning("No staff supplied; nothing can be scheduled")
            return Summary(
                warnings=[
                    ScheduleWarning(
                        severity=Severity.CRITICAL,
                        warning_type=WarningType.NO_STAFF,
                        message="No staff available to schedule",
                        required=stats.total_shifts_required,
                        assigned=0,
                    )
                ],
                stats=stats,
            )

        if stats.total_shifts_required > 0 and stats.total_shifts_filled == 0:
            logger.warning("No shift could be staffed for the week")
            return Summary(
                warnings=[
                    ScheduleWarning(
                        severity=Severity.CRITICAL,
                        warning_type=WarningType.CANNOT_GENERATE,
                        message=(
                            "Cannot generate a schedule: no staff is available "
                            "for any required shift"
                        ),
                        required=stats.total_shifts_required,
                        assigned=0,
                    )
                ],
                stats=stats,
            )

        warnings: list[ScheduleWarning] = []
        warnings.extend(self._staffing_warnings(instances, filled))
        warnings.extend(self._overwork_warnings(hours_assigned))
        warnings.extend(self._consecutive_day_warnings(assignments))
        warnings.extend(self._double_shift_warnings(assignments))
        warnings.extend(self._idle_staff_warnings(staff_ids, shifts_assigned))

        warnings = sort_warnings(warnings)
        logger.info(
            "Coverage %d%% (%d/%d), fairness %d, %d warnings",
            stats.coverage_percent,
            stats.total_shifts_filled,
            stats.total_shifts_required,
            stats.fairness_score,
            len(warnings),
        )
        return Summary(warnings=warnings, stats=stats)

    def _filled_per_instance(
        self,
        instances: list[ShiftInstance],
        assignments: Assignments,
    ) -> dict[InstanceKey, int]:
        """Count assigned staff per instance, capped at the required count."""
        counts: dict[InstanceKey, int] = {i.key: 0 for i in instances}
        for days in assignments.values():
            for shift_date, template_ids in days.items():
                for template_id in template_ids:
                    key = InstanceKey(shift_date, template_id)
                    if key in counts:
                        counts[key] += 1
        required = {i.key: i.required_count for i in instances}
        return {key: min(count, required[key]) for key, count in counts.items()}

    def _build_stats(
        self,
        instances: list[ShiftInstance],
        filled: dict[InstanceKey, int],
        hours_assigned: dict[str, float],
        shifts_assigned: dict[str, int],
    ) -> ScheduleStats:
        """Aggregate coverage, fairness and workload numbers."""
        total_required = sum(i.required_count for i in instances)
        total_filled = sum(filled.values())
        coverage = round(100 * total_filled / total_required) if total_required else 0

        hours = [hours_assigned[sid] for sid in sorted(hours_assigned)]
        shifts = [shifts_assigned.get(sid, 0) for sid in sorted(hours_assigned)]
        allowance = max((i.duration_hours for i in instances), default=0.0)

        stats = ScheduleStats(
            total_shifts_required=total_required,
            total_shifts_filled=total_filled,
            coverage_percent=max(0, min(100, coverage)),
            fairness_score=self.fairness_policy.score(hours, allowance),
        )
        if hours:
            avg_hours = sum(hours) / len(hours)
            stats.avg_hours_per_staff = round(avg_hours, 1)
            stats.min_hours = round(min(hours), 1)
            stats.max_hours = round(max(hours), 1)
            stats.hours_variance = round(
                sum((h - avg_hours) ** 2 for h in hours) / len(hours), 1
            )
            stats.avg_shifts_per_staff = round(sum(shifts) / len(shifts), 1)
            stats.min_shifts = min(shifts)
            stats.max_shifts = max(shifts)
        return stats

    def _staffing_warnings(
        self,
        instances: list[ShiftInstance],
        filled: dict[InstanceKey, int],
    ) -> list[ScheduleWarning]:
        """Unfilled (critical) and understaffed (warning) instances."""
        warnings = []
        for instance in instances:
            count = filled[instance.key]
            if count >= instance.required_count:
                continue
            if count == 0:
                warnings.append(
                    ScheduleWarning(
                        severity=Severity.CRITICAL,
                        warning_type=WarningType.UNFILLED,
                        message=(
                            f"{instance.label}: no staff assigned "
                            f"(needs {instance.required_count})"
                        ),
                        date=instance.date,
                        shift_template_id=instance.shift_template_id,
                        assigned=0,
                        required=instance.required_count,
                    )
                )
            else:
                warnings.append(
                    ScheduleWarning(
                        severity=Severity.WARNING,
                        warning_type=WarningType.UNDERSTAFFED,
                        message=(
                            f"{instance.label}: understaffed, "
                            f"{count} of {instance.required_count} assigned"
                        ),
                        date=instance.date,
                        shift_template_id=instance.shift_template_id,
                        assigned=count,
                        required=instance.required_count,
                    )
                )
        return warnings

    def _overwork_warnings(self, hours_assigned: dict[str, float]) -> list[ScheduleWarning]:
        """Staff above the weekly hours threshold."""
        limit = self.config.max_weekly_hours
        return [
            ScheduleWarning(
                severity=Severity.WARNING,
                warning_type=WarningType.OVERWORK,
                message=(
                    f"Staff {sid} is assigned {hours:g}h this week "
                    f"(limit {limit:g}h)"
                ),
                staff_id=sid,
            )
            for sid, hours in sorted(hours_assigned.items())
            if hours > limit
        ]

    def _consecutive_day_warnings(self, assignments: Assignments) -> list[ScheduleWarning]:
        """One warning per run of worked days longer than the threshold."""
        limit = self.config.max_consecutive_days
        warnings = []
        for sid, days in sorted(assignments.items()):
            worked = [d for d, template_ids in days.items() if template_ids]
            for first_day, length in consecutive_runs(worked):
                if length <= limit:
                    continue
                last_day = first_day + timedelta(days=length - 1)
                warnings.append(
                    ScheduleWarning(
                        severity=Severity.WARNING,
                        warning_type=WarningType.CONSECUTIVE_DAYS,
                        message=(
                            f"Staff {sid} works {length} consecutive days "
                            f"({first_day.isoformat()} to {last_day.isoformat()}, "
                            f"limit {limit})"
                        ),
                        date=first_day,
                        staff_id=sid,
                    )
                )
        return warnings

    def _double_shift_warnings(self, assignments: Assignments) -> list[ScheduleWarning]:
        """Staff holding more than one shift on a date."""
        warnings = []
        for sid, days in sorted(assignments.items()):
            for shift_date, template_ids in sorted(days.items()):
                if len(template_ids) < 2:
                    continue
                warnings.append(
                    ScheduleWarning(
                        severity=Severity.INFO,
                        warning_type=WarningType.DOUBLE_SHIFT,
                        message=(
                            f"Staff {sid} has {len(template_ids)} shifts on "
                            f"{shift_date.isoformat()} ({', '.join(template_ids)})"
                        ),
                        date=shift_date,
                        staff_id=sid,
                    )
                )
        return warnings

    def _idle_staff_warnings(
        self,
        staff_ids: list[str],
        shifts_assigned: dict[str, int],
    ) -> list[ScheduleWarning]:
        """Staff left without any shift while others were scheduled."""
        if not any(shifts_assigned.get(sid, 0) for sid in staff_ids):
            return []
        return [
            ScheduleWarning(
                severity=Severity.INFO,
                warning_type=WarningType.NO_SHIFTS,
                message=f"Staff {sid} has no shifts this week",
                staff_id=sid,
            )
            for sid in staff_ids
            if shifts_assigned.get(sid, 0) == 0
        ]


def summarize(
    instances: list[ShiftInstance],
    assignments: Assignments,
    hours_assigned: dict[str, float],
    shifts_assigned: dict[str, int],
    config: Optional[EngineConfig] = None,
) -> Summary:
    """Module-level shortcut for ``ScheduleDiagnostics(config).summarize``."""
    return ScheduleDiagnostics(config).summarize(
        instances, assignments, hours_assigned, shifts_assigned
    )
