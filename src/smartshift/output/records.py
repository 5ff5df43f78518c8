"""Records a caller persists when a generated schedule is accepted.

The engine writes nothing itself. These builders produce the generation
record (stats snapshot plus warnings) and one schedule row per assigned
shift, and give the date range the caller replaces for the week.
"""

from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Optional

from smartshift.domain.models import ScheduleResult
from smartshift.io.contract import stats_to_dict, warning_to_dict


@dataclass
class GenerationRecord:
    """Summary of one generation run for a store's week."""

    store_id: str
    week_start_date: date
    total_shifts_required: int
    total_shifts_filled: int
    coverage_percent: int
    fairness_score: int
    total_warnings: int
    warnings: list[dict]
    stats: dict
    needs_review: bool
    is_auto_generated: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data["week_start_date"] = self.week_start_date.isoformat()
        return data


@dataclass(frozen=True)
class ScheduleRow:
    """One staff member working one shift template on one date."""

    staff_id: str
    store_id: str
    shift_template_id: str
    scheduled_date: date
    generation_id: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["scheduled_date"] = self.scheduled_date.isoformat()
        return data


def week_bounds(week_start: date) -> tuple[date, date]:
    """Inclusive first and last date of the week starting at week_start."""
    return week_start, week_start + timedelta(days=6)


def build_generation_record(
    result: ScheduleResult,
    store_id: str,
    week_start: date,
    auto_generated: bool = False,
) -> GenerationRecord:
    """Build the generation record for a result.

    Args:
        result: Generated schedule.
        store_id: Store the schedule belongs to.
        week_start: Monday of the week.
        auto_generated: Whether the run was triggered automatically.

    Returns:
        GenerationRecord carrying stats and warning snapshots.
    """
    return GenerationRecord(
        store_id=store_id,
        week_start_date=week_start,
        total_shifts_required=result.stats.total_shifts_required,
        total_shifts_filled=result.stats.total_shifts_filled,
        coverage_percent=result.stats.coverage_percent,
        fairness_score=result.stats.fairness_score,
        total_warnings=len(result.warnings),
        warnings=[warning_to_dict(w) for w in result.warnings],
        stats=stats_to_dict(result.stats),
        needs_review=result.needs_review,
        is_auto_generated=auto_generated,
    )


def build_schedule_rows(
    result: ScheduleResult,
    store_id: str,
    generation_id: Optional[str] = None,
) -> list[ScheduleRow]:
    """One row per (staff, date, template) in the assignment.

    Rows are ordered by date, staff id, then assignment order within a day.
    """
    rows = []
    for sid, days in result.assignments.items():
        for shift_date, template_ids in days.items():
            for template_id in template_ids:
                rows.append(
                    ScheduleRow(
                        staff_id=sid,
                        store_id=store_id,
                        shift_template_id=template_id,
                        scheduled_date=shift_date,
                        generation_id=generation_id,
                    )
                )
    rows.sort(key=lambda r: (r.scheduled_date, r.staff_id))
    return rows
