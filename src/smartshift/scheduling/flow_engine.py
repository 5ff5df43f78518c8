"""OR-Tools min-cost-flow assignment engine.

This module formulates the weekly assignment as a min-cost max-flow problem
using Google OR-Tools. Maximum flow maximizes filled slots; convex per-staff
costs then spread those slots as evenly as possible by shift count. Unit
costs live on the source arcs, before the flow picks an instance, so they
cannot see shift lengths: with templates of different lengths the counts are
balanced but the hours may not be. The greedy engine balances hours.

Network layout:

    source -> staff         one unit arc per potential shift, k-th costs k * step
    staff  -> staff-day     first shift of the day free, extra ones penalized
    staff-day -> cluster    capacity 1 per group of overlapping shifts
    cluster -> instance     one arc per available (staff, instance) pair
    instance -> sink        capacity = required count
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ortools.graph.python import min_cost_flow

from smartshift.domain.models import (
    AvailabilityMatrix,
    EngineConfig,
    FillRecord,
    ShiftInstance,
)
from smartshift.scheduling.assignment_engine import (
    AssignmentOutcome,
    processing_order,
    unique_staff_ids,
)

logger = logging.getLogger(__name__)

SOURCE = 0
SINK = 1


@dataclass
class FlowSolveResult:
    """Result from the min-cost-flow engine.

    Attributes:
        outcome: The assignment, or None if the solver did not finish.
        status: Solver status name (OPTIMAL, INFEASIBLE, ...).
        total_cost: Objective value of the flow.
    """

    outcome: Optional[AssignmentOutcome]
    status: str
    total_cost: int = 0

    @property
    def is_optimal(self) -> bool:
        return self.status == "OPTIMAL"


def overlap_clusters(instances: list[ShiftInstance]) -> list[list[int]]:
    """Group one date's instances into chains of overlapping time ranges.

    Any two overlapping instances end up in the same cluster. Instances in
    different clusters never overlap.

    Returns:
        Clusters as lists of positions into ``instances``, in start-time order.
    """
    order = sorted(
        range(len(instances)),
        key=lambda p: (instances[p].start_minutes, instances[p].shift_template_id),
    )
    clusters: list[list[int]] = []
    cluster_end = 0
    for pos in order:
        instance = instances[pos]
        if clusters and instance.start_minutes < cluster_end:
            clusters[-1].append(pos)
            cluster_end = max(cluster_end, instance.end_minutes)
        else:
            clusters.append([pos])
            cluster_end = instance.end_minutes
    return clusters


class MinCostFlowEngine:
    """Assignment engine backed by OR-Tools ``SimpleMinCostFlow``.

    Overlapping same-day shifts share a capacity-1 cluster node, so a staff
    member never gets two overlapping shifts. Clusters are conservative: a
    chain A-B-C where only A and C are disjoint still allows one of them.

    Example:
        >>> engine = MinCostFlowEngine()
        >>> result = engine.solve(instances, availability, staff_ids)
        >>> result.is_optimal
        True
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def solve(
        self,
        instances: list[ShiftInstance],
        availability: AvailabilityMatrix,
        staff_ids: list[str],
    ) -> FlowSolveResult:
        """Solve the assignment as a min-cost max-flow.

        Args:
            instances: Shift instances to staff.
            availability: Who can work what.
            staff_ids: Staff to consider.

        Returns:
            FlowSolveResult with the assignment outcome and solver status.
        """
        staff_ids = unique_staff_ids(staff_ids)
        ordered = processing_order(instances)
        smcf = min_cost_flow.SimpleMinCostFlow()

        total_required = sum(i.required_count for i in ordered)

        # Each extra shift costs more than any staff-order tie-break, and a
        # second shift on the same day costs more than any fairness trade-off
        step = len(staff_ids) + 1
        same_day_penalty = (total_required + 1) ** 2 * step * step

        next_node = SINK + 1
        instance_nodes: dict[int, int] = {}
        for idx, instance in enumerate(ordered):
            instance_nodes[idx] = next_node
            smcf.add_arc_with_capacity_and_unit_cost(
                next_node, SINK, instance.required_count, 0
            )
            next_node += 1

        by_date: dict[date, list[int]] = {}
        for idx, instance in enumerate(ordered):
            by_date.setdefault(instance.date, []).append(idx)
        clusters_by_date = {
            d: [
                [idxs[pos] for pos in cluster]
                for cluster in overlap_clusters([ordered[i] for i in idxs])
            ]
            for d, idxs in sorted(by_date.items())
        }

        # (staff id, instance index) -> arc id
        pair_arcs: dict[tuple[str, int], int] = {}

        for rank, sid in enumerate(staff_ids):
            staff_node = next_node
            next_node += 1
            potential_shifts = 0

            for shift_date, clusters in clusters_by_date.items():
                open_clusters = []
                for cluster in clusters:
                    available = [
                        idx
                        for idx in cluster
                        if availability.is_available(
                            sid, ordered[idx].date, ordered[idx].shift_template_id
                        )
                    ]
                    if available:
                        open_clusters.append(available)
                if not open_clusters:
                    continue

                day_node = next_node
                next_node += 1
                smcf.add_arc_with_capacity_and_unit_cost(staff_node, day_node, 1, 0)
                extra = len(open_clusters) - 1
                if extra > 0 and self.config.allow_multiple_shifts_per_day:
                    smcf.add_arc_with_capacity_and_unit_cost(
                        staff_node, day_node, extra, same_day_penalty
                    )
                    potential_shifts += extra
                potential_shifts += 1

                for available in open_clusters:
                    cluster_node = next_node
                    next_node += 1
                    smcf.add_arc_with_capacity_and_unit_cost(day_node, cluster_node, 1, 0)
                    for idx in available:
                        pair_arcs[(sid, idx)] = smcf.add_arc_with_capacity_and_unit_cost(
                            cluster_node, instance_nodes[idx], 1, 0
                        )

            for k in range(potential_shifts):
                smcf.add_arc_with_capacity_and_unit_cost(
                    SOURCE, staff_node, 1, k * step * step + rank
                )

        if not pair_arcs:
            logger.info("No staff available for any instance; nothing to solve")
            return FlowSolveResult(
                outcome=self._build_outcome(ordered, availability, staff_ids, smcf, pair_arcs),
                status="OPTIMAL",
            )

        smcf.set_node_supply(SOURCE, total_required)
        smcf.set_node_supply(SINK, -total_required)

        status = smcf.solve_max_flow_with_min_cost()
        status_name = getattr(status, "name", str(status))
        if status != smcf.OPTIMAL:
            logger.error("Min-cost-flow solver finished with status %s", status_name)
            return FlowSolveResult(outcome=None, status=status_name)

        outcome = self._build_outcome(ordered, availability, staff_ids, smcf, pair_arcs)
        logger.info(
            "Min-cost-flow staffed %d of %d slots (cost %d)",
            outcome.total_filled,
            total_required,
            smcf.optimal_cost(),
        )
        return FlowSolveResult(
            outcome=outcome,
            status="OPTIMAL",
            total_cost=smcf.optimal_cost(),
        )

    def assign(
        self,
        instances: list[ShiftInstance],
        availability: AvailabilityMatrix,
        staff_ids: list[str],
    ) -> Optional[AssignmentOutcome]:
        """Same contract as the greedy engine; None if the solver failed."""
        return self.solve(instances, availability, staff_ids).outcome

    def _build_outcome(
        self,
        ordered: list[ShiftInstance],
        availability: AvailabilityMatrix,
        staff_ids: list[str],
        smcf: min_cost_flow.SimpleMinCostFlow,
        pair_arcs: dict[tuple[str, int], int],
    ) -> AssignmentOutcome:
        """Read the flow back into assignments and fill records."""
        outcome = AssignmentOutcome(
            hours_assigned={sid: 0.0 for sid in staff_ids},
            shifts_assigned={sid: 0 for sid in staff_ids},
        )

        for idx, instance in enumerate(ordered):
            record = FillRecord(
                instance=instance,
                candidate_count=len(availability.available_staff(instance, staff_ids)),
            )
            for sid in staff_ids:
                arc = pair_arcs.get((sid, idx))
                if arc is None or smcf.flow(arc) == 0:
                    continue
                record.assigned_staff.append(sid)
                outcome.assignments.setdefault(sid, {}).setdefault(
                    instance.date, []
                ).append(instance.shift_template_id)
                outcome.hours_assigned[sid] += instance.duration_hours
                outcome.shifts_assigned[sid] += 1
            outcome.fill_log.append(record)

        # Keep each staff's same-day templates in start-time order
        start_of = {(i.date, i.shift_template_id): i.start_minutes for i in ordered}
        for days in outcome.assignments.values():
            for shift_date, template_ids in days.items():
                template_ids.sort(key=lambda tid: (start_of[(shift_date, tid)], tid))

        return outcome
