"""Main scheduler interface.

This module provides the SmartScheduler class that runs the three stages
in order: demand normalization, assignment, and diagnostics.
"""

import logging
from typing import Optional

from smartshift.domain.models import (
    AvailabilityMatrix,
    EngineConfig,
    EngineType,
    ScheduleResult,
    ShiftInstance,
    WeeklyScheduleRequest,
)
from smartshift.domain.policies import FairnessPolicy, RankingPolicy
from smartshift.scheduling.assignment_engine import (
    AssignmentOutcome,
    GreedyAssignmentEngine,
    unique_staff_ids,
)
from smartshift.scheduling.diagnostics import ScheduleDiagnostics, sort_warnings
from smartshift.scheduling.flow_engine import MinCostFlowEngine
from smartshift.scheduling.normalizer import DemandNormalizer

logger = logging.getLogger(__name__)


class SmartScheduler:
    """High-level scheduler for generating a store's weekly schedule.

    Example:
        >>> scheduler = SmartScheduler(EngineConfig(max_weekly_hours=32))
        >>> result = scheduler.generate(instances, availability, ["s1", "s2"])
        >>> result.stats.coverage_percent
        100
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        ranking_policy: Optional[RankingPolicy] = None,
        fairness_policy: Optional[FairnessPolicy] = None,
    ):
        """Initialize scheduler with configuration and policies.

        Args:
            config: Engine configuration; defaults apply when omitted.
            ranking_policy: Candidate ordering for the greedy engine.
            fairness_policy: Fairness formula for the stats.
        """
        self.config = config or EngineConfig()

        self.normalizer = DemandNormalizer()
        self.greedy_engine = GreedyAssignmentEngine(
            config=self.config,
            ranking_policy=ranking_policy,
        )
        self.flow_engine = MinCostFlowEngine(config=self.config)
        self.diagnostics = ScheduleDiagnostics(
            config=self.config,
            fairness_policy=fairness_policy,
        )

    def generate(
        self,
        instances: list[ShiftInstance],
        availability: AvailabilityMatrix,
        staff_ids: list[str],
    ) -> ScheduleResult:
        """Assign staff to normalized shift instances.

        Args:
            instances: Shift instances of the week.
            availability: Who can work what.
            staff_ids: Staff to schedule.

        Returns:
            ScheduleResult with assignments, warnings and stats.
        """
        staff_ids = unique_staff_ids(staff_ids)
        outcome = self._run_engine(instances, availability, staff_ids)

        warnings, stats = self.diagnostics.summarize(
            instances,
            outcome.assignments,
            outcome.hours_assigned,
            outcome.shifts_assigned,
        )

        return ScheduleResult(
            assignments=outcome.assignments,
            warnings=warnings,
            stats=stats,
            staff_hours=dict(outcome.hours_assigned),
            staff_shift_count=dict(outcome.shifts_assigned),
            fill_log=outcome.fill_log,
        )

    def generate_week(self, request: WeeklyScheduleRequest) -> ScheduleResult:
        """Normalize a week's requirements, then generate.

        Request and normalizer diagnostics are merged into the result's
        warnings.

        Args:
            request: Un-normalized week request.

        Returns:
            ScheduleResult for the week.
        """
        normalized = self.normalizer.normalize(
            request.requirements,
            request.shift_templates,
            request.week_start,
        )
        result = self.generate(
            normalized.instances,
            request.availability,
            request.staff_ids,
        )
        diagnostics = request.diagnostics + normalized.diagnostics
        if diagnostics:
            result.warnings = sort_warnings(result.warnings + diagnostics)
        return result

    def _run_engine(
        self,
        instances: list[ShiftInstance],
        availability: AvailabilityMatrix,
        staff_ids: list[str],
    ) -> AssignmentOutcome:
        """Run the configured engine, falling back to greedy on solver failure."""
        if self.config.engine_type == EngineType.MIN_COST_FLOW:
            result = self.flow_engine.solve(instances, availability, staff_ids)
            if result.outcome is not None:
                return result.outcome
            # Fall back to greedy
            logger.warning(
                "Min-cost-flow engine failed with status %s; using greedy engine",
                result.status,
            )

        return self.greedy_engine.assign(instances, availability, staff_ids)


def create_scheduler(
    engine: str = "greedy",
    max_weekly_hours: float = 40.0,
    max_consecutive_days: int = 6,
    allow_multiple_shifts_per_day: bool = True,
) -> SmartScheduler:
    """Factory function to create a scheduler from plain values.

    Args:
        engine: "greedy" or "min_cost_flow".
        max_weekly_hours: Overwork threshold in hours.
        max_consecutive_days: Longest run of worked days before a warning.
        allow_multiple_shifts_per_day: Allow non-overlapping same-day shifts.

    Returns:
        Configured SmartScheduler.
    """
    config = EngineConfig(
        max_weekly_hours=max_weekly_hours,
        max_consecutive_days=max_consecutive_days,
        allow_multiple_shifts_per_day=allow_multiple_shifts_per_day,
        engine_type=EngineType(engine.lower()),
    )
    return SmartScheduler(config=config)
