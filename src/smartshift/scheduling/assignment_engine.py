"""Greedy assignment engine.

This module implements the fairness-weighted greedy pass that staffs each
shift instance:
1. Order instances so constrained shifts are filled first
2. Build the candidate pool from availability and same-day overlaps
3. Give each slot to the candidates with the least work so far
4. Record fill outcomes for diagnostics

The pass is single-shot (no backtracking) and deterministic for identical
input.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from smartshift.domain.models import (
    Assignments,
    AvailabilityMatrix,
    EngineConfig,
    FillRecord,
    FillStatus,
    ShiftInstance,
)
from smartshift.domain.policies import DefaultRankingPolicy, RankingPolicy

logger = logging.getLogger(__name__)


@dataclass
class StaffLoad:
    """Running workload of one staff member during the pass."""

    staff_id: str
    hours_assigned: float = 0.0
    shifts_assigned: int = 0
    shifts_by_date: dict[date, list[ShiftInstance]] = field(default_factory=dict)

    def shifts_on(self, shift_date: date) -> list[ShiftInstance]:
        """Instances already held on a date."""
        return self.shifts_by_date.get(shift_date, [])

    def has_overlap(self, instance: ShiftInstance) -> bool:
        """Check if the instance overlaps a shift already held that day."""
        return any(instance.overlaps(held) for held in self.shifts_on(instance.date))

    def add(self, instance: ShiftInstance) -> None:
        """Record an assigned instance."""
        self.shifts_by_date.setdefault(instance.date, []).append(instance)
        self.hours_assigned += instance.duration_hours
        self.shifts_assigned += 1


@dataclass
class AssignmentOutcome:
    """Result of an assignment pass.

    Attributes:
        assignments: staff id -> date -> template ids (staff with shifts only).
        fill_log: One record per instance, in processing order.
        hours_assigned: Hours per staff id (every staff id present).
        shifts_assigned: Shift count per staff id (every staff id present).
    """

    assignments: Assignments = field(default_factory=dict)
    fill_log: list[FillRecord] = field(default_factory=list)
    hours_assigned: dict[str, float] = field(default_factory=dict)
    shifts_assigned: dict[str, int] = field(default_factory=dict)

    @property
    def total_filled(self) -> int:
        return sum(record.filled_count for record in self.fill_log)


def unique_staff_ids(staff_ids: list[str]) -> list[str]:
    """Drop duplicate staff ids, keeping first occurrence order."""
    seen: set[str] = set()
    unique = []
    for sid in staff_ids:
        if sid in seen:
            logger.warning("Duplicate staff id %s ignored", sid)
            continue
        seen.add(sid)
        unique.append(sid)
    return unique


def processing_order(instances: list[ShiftInstance]) -> list[ShiftInstance]:
    """Order instances for filling.

    Date ascending, then required count descending, then start time, then
    template id so the order is total.
    """
    return sorted(
        instances,
        key=lambda i: (i.date, -i.required_count, i.start_minutes, i.shift_template_id),
    )


class GreedyAssignmentEngine:
    """Fairness-weighted greedy assignment of staff to shift instances.

    Each instance, in processing order, goes to the available staff with the
    fewest hours so far. The engine never raises for shortfalls: unfilled
    and partially filled instances are recorded in the fill log.

    Example:
        >>> engine = GreedyAssignmentEngine()
        >>> outcome = engine.assign(instances, availability, ["s1", "s2"])
        >>> outcome.assignments["s1"]
        {datetime.date(2024, 1, 15): ['morning'], ...}
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        ranking_policy: Optional[RankingPolicy] = None,
    ):
        self.config = config or EngineConfig()
        self.ranking_policy = ranking_policy or DefaultRankingPolicy()

    def assign(
        self,
        instances: list[ShiftInstance],
        availability: AvailabilityMatrix,
        staff_ids: list[str],
    ) -> AssignmentOutcome:
        """Assign staff to every instance.

        Args:
            instances: Shift instances to staff.
            availability: Who can work what.
            staff_ids: Staff to consider.

        Returns:
            AssignmentOutcome with assignments, fill log and per-staff totals.
        """
        staff_ids = unique_staff_ids(staff_ids)
        loads = {sid: StaffLoad(staff_id=sid) for sid in staff_ids}
        outcome = AssignmentOutcome()

        for instance in processing_order(instances):
            record = self._fill_instance(instance, availability, loads)
            outcome.fill_log.append(record)

            for sid in record.assigned_staff:
                outcome.assignments.setdefault(sid, {}).setdefault(
                    instance.date, []
                ).append(instance.shift_template_id)

        outcome.hours_assigned = {sid: load.hours_assigned for sid, load in loads.items()}
        outcome.shifts_assigned = {sid: load.shifts_assigned for sid, load in loads.items()}

        logger.info(
            "Greedy pass staffed %d of %d slots across %d instances for %d staff",
            outcome.total_filled,
            sum(i.required_count for i in instances),
            len(instances),
            len(staff_ids),
        )
        return outcome

    def _fill_instance(
        self,
        instance: ShiftInstance,
        availability: AvailabilityMatrix,
        loads: dict[str, StaffLoad],
    ) -> FillRecord:
        """Pick staff for a single instance and update their loads."""
        pool = self._candidate_pool(instance, availability, loads)
        record = FillRecord(instance=instance, candidate_count=len(pool))

        if not pool:
            logger.debug("No candidates for %s", instance.label)
            return record

        ranked = sorted(
            pool,
            key=lambda sid: self.ranking_policy.rank_key(
                sid,
                loads[sid].hours_assigned,
                loads[sid].shifts_assigned,
                bool(loads[sid].shifts_on(instance.date)),
            ),
        )

        for sid in ranked[: instance.required_count]:
            loads[sid].add(instance)
            record.assigned_staff.append(sid)

        if record.status == FillStatus.PARTIAL:
            logger.debug(
                "%s partially filled: %d of %d",
                instance.label,
                record.filled_count,
                instance.required_count,
            )
        return record

    def _candidate_pool(
        self,
        instance: ShiftInstance,
        availability: AvailabilityMatrix,
        loads: dict[str, StaffLoad],
    ) -> list[str]:
        """Available staff who can still take the instance."""
        pool = []
        for sid, load in loads.items():
            if not availability.is_available(sid, instance.date, instance.shift_template_id):
                continue
            if load.has_overlap(instance):
                continue
            if not self.config.allow_multiple_shifts_per_day and load.shifts_on(instance.date):
                continue
            pool.append(sid)
        return pool


def assign(
    instances: list[ShiftInstance],
    availability: AvailabilityMatrix,
    staff_ids: list[str],
    config: Optional[EngineConfig] = None,
) -> AssignmentOutcome:
    """Module-level shortcut for ``GreedyAssignmentEngine(config).assign``."""
    return GreedyAssignmentEngine(config).assign(instances, availability, staff_ids)
