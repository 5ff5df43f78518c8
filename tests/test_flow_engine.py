"""Tests for the min-cost-flow assignment engine."""

from datetime import time

import pytest

from smartshift.domain.models import AvailabilityMatrix, EngineConfig
from smartshift.scheduling.assignment_engine import GreedyAssignmentEngine
from smartshift.scheduling.flow_engine import MinCostFlowEngine, overlap_clusters


class TestOverlapClusters:
    """Tests for grouping a day's instances by overlap."""

    def test_disjoint_shifts_get_own_clusters(self, make_instance):
        instances = [
            make_instance(template_id="evening", start=time(16), end=time(20)),
            make_instance(template_id="morning", start=time(8), end=time(12)),
        ]
        assert overlap_clusters(instances) == [[1], [0]]

    def test_overlap_chain_is_one_cluster(self, make_instance):
        instances = [
            make_instance(template_id="a", start=time(8), end=time(12)),
            make_instance(template_id="b", start=time(11), end=time(15)),
            make_instance(template_id="c", start=time(14), end=time(18)),
        ]
        assert overlap_clusters(instances) == [[0, 1, 2]]

    def test_touching_shifts_are_separate(self, make_instance):
        instances = [
            make_instance(template_id="a", start=time(8), end=time(12)),
            make_instance(template_id="b", start=time(12), end=time(16)),
        ]
        assert overlap_clusters(instances) == [[0], [1]]


class TestMinCostFlowEngine:
    """Tests for MinCostFlowEngine."""

    @pytest.fixture
    def engine(self):
        return MinCostFlowEngine()

    def test_even_split_between_two_staff(self, engine, daily_morning, all_available):
        staff = ["A", "B"]
        result = engine.solve(daily_morning, all_available(staff, daily_morning), staff)

        assert result.is_optimal
        outcome = result.outcome
        assert outcome.total_filled == 7
        # Ties in cost go to the earlier staff id
        assert outcome.shifts_assigned == {"A": 4, "B": 3}
        assert outcome.hours_assigned == {"A": 16.0, "B": 12.0}

    def test_fills_what_greedy_misses(self, make_instance):
        """A staff member flexible enough for both shifts is saved for the one only they can do."""
        front = make_instance(template_id="front", start=time(8), end=time(12))
        back = make_instance(template_id="rear", start=time(8), end=time(12))
        availability = AvailabilityMatrix()
        availability.set_available("A", front.date, "front")
        availability.set_available("A", back.date, "rear")
        availability.set_available("B", front.date, "front")
        instances = [front, back]

        greedy = GreedyAssignmentEngine().assign(instances, availability, ["A", "B"])
        flow = MinCostFlowEngine().solve(instances, availability, ["A", "B"]).outcome

        assert greedy.total_filled == 1
        assert flow.total_filled == 2
        assert flow.assignments["A"][front.date] == ["rear"]
        assert flow.assignments["B"][front.date] == ["front"]

    def test_no_overlapping_double_booking(self, engine, make_instance, all_available):
        instances = [
            make_instance(template_id="morning", start=time(8), end=time(12)),
            make_instance(template_id="lunch", start=time(11), end=time(15)),
        ]
        outcome = engine.assign(instances, all_available(["A"], instances), ["A"])
        assert outcome.total_filled == 1

    def test_same_day_double_shift_only_when_needed(
        self, engine, make_instance, all_available
    ):
        instances = [
            make_instance(template_id="morning", start=time(8), end=time(12)),
            make_instance(template_id="evening", start=time(16), end=time(20)),
        ]
        outcome = engine.assign(instances, all_available(["A", "B"], instances), ["A", "B"])
        assert outcome.shifts_assigned == {"A": 1, "B": 1}

        outcome = engine.assign(instances, all_available(["A"], instances), ["A"])
        assert outcome.assignments["A"][instances[0].date] == ["morning", "evening"]

    def test_single_shift_per_day_config(self, make_instance, all_available):
        instances = [
            make_instance(template_id="morning", start=time(8), end=time(12)),
            make_instance(template_id="evening", start=time(16), end=time(20)),
        ]
        engine = MinCostFlowEngine(EngineConfig(allow_multiple_shifts_per_day=False))
        outcome = engine.assign(instances, all_available(["A"], instances), ["A"])
        assert outcome.total_filled == 1

    def test_nobody_available(self, engine, daily_morning):
        result = engine.solve(daily_morning, AvailabilityMatrix(), ["A", "B"])
        assert result.outcome is not None
        assert result.outcome.total_filled == 0
        assert result.outcome.assignments == {}
        assert result.outcome.shifts_assigned == {"A": 0, "B": 0}
        assert len(result.outcome.fill_log) == 7

    def test_empty_staff(self, engine, daily_morning):
        outcome = engine.assign(daily_morning, AvailabilityMatrix(), [])
        assert outcome.total_filled == 0
        assert outcome.hours_assigned == {}

    def test_balances_required_counts(self, engine, make_instance, all_available):
        instances = [make_instance(day=d, required=2) for d in range(6)]
        staff = ["A", "B", "C", "D"]
        outcome = engine.assign(instances, all_available(staff, instances), staff)

        assert outcome.total_filled == 12
        assert sorted(outcome.shifts_assigned.values()) == [3, 3, 3, 3]
        for record in outcome.fill_log:
            assert len(set(record.assigned_staff)) == 2

    def test_balances_shift_counts_with_mixed_lengths(self, engine, make_instance, all_available):
        """Costs see shift counts, not lengths: counts even out, hours need not."""
        instances = [
            make_instance(day=d, template_id=t, start=s, end=e)
            for d in range(7)
            for t, s, e in [("long", time(6), time(14)), ("short", time(16), time(20))]
        ]
        staff = ["A", "B", "C", "D"]
        outcome = engine.assign(instances, all_available(staff, instances), staff)

        assert outcome.total_filled == 14
        assert sorted(outcome.shifts_assigned.values()) == [3, 3, 4, 4]
        assert sum(outcome.hours_assigned.values()) == 84.0

    def test_coverage_at_least_greedy(self, make_instance):
        """Without overlap chains the flow is a true maximum."""
        instances = [
            make_instance(day=d, template_id=t, start=s, end=e, required=r)
            for d in range(7)
            for t, s, e, r in [
                ("morning", time(6), time(12), 2),
                ("lunch", time(10), time(13), 1),
                ("evening", time(14), time(22), 2),
            ]
        ]
        staff = [f"S{i}" for i in range(4)]
        availability = AvailabilityMatrix()
        for i, sid in enumerate(staff):
            for instance in instances:
                if (instance.day_index + i) % 3 != 0:
                    availability.set_available(sid, instance.date, instance.shift_template_id)

        greedy = GreedyAssignmentEngine().assign(instances, availability, staff)
        flow = MinCostFlowEngine().assign(instances, availability, staff)
        assert flow.total_filled >= greedy.total_filled
