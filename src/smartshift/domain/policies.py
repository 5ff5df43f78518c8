"""Policy definitions for assignment and fairness rules.

Policies are kept separate from the engine so the selection order and the
fairness formula can be tested and swapped independently.
"""

from abc import ABC, abstractmethod


class RankingPolicy(ABC):
    """Orders candidates for a shift; the first ones get the shift."""

    @abstractmethod
    def rank_key(
        self,
        staff_id: str,
        hours_assigned: float,
        shifts_assigned: int,
        has_same_day_shift: bool,
    ) -> tuple:
        """Sort key for a candidate (lower sorts first).

        Args:
            staff_id: Candidate staff id.
            hours_assigned: Hours already assigned this week.
            shifts_assigned: Shifts already assigned this week.
            has_same_day_shift: Whether the candidate already works that date.

        Returns:
            A tuple that totally orders candidates.
        """
        pass


class FairnessPolicy(ABC):
    """Turns per-staff hours into a 0-100 fairness score."""

    @abstractmethod
    def score(self, staff_hours: list[float], allowance_hours: float = 0.0) -> int:
        """Compute the fairness score.

        Args:
            staff_hours: Assigned hours for every staff member (zeros included).
            allowance_hours: Spread that cannot be avoided because shifts are
                indivisible (typically the longest single shift).

        Returns:
            Score in [0, 100], 100 meaning perfectly balanced.
        """
        pass


class DefaultRankingPolicy(RankingPolicy):
    """Give work to whoever has the least so far.

    Staff who already work that date go last, so same-day double shifts only
    happen when nobody else can take the slot. Then ascending hours,
    ascending shift count, and staff id for a total order.
    """

    def rank_key(
        self,
        staff_id: str,
        hours_assigned: float,
        shifts_assigned: int,
        has_same_day_shift: bool,
    ) -> tuple:
        return (has_same_day_shift, hours_assigned, shifts_assigned, staff_id)


class DefaultFairnessPolicy(FairnessPolicy):
    """Spread-based fairness score.

    score = 100 * (1 - max(0, spread - allowance * share) / max(max_hours, 1))

    where spread is max - min hours and share is the fraction of the other
    staff who got any work, (working - 1) / (staff - 1). The allowance only
    excuses the spread of a split that is actually shared: equal hours score
    100, and so does a split where everyone works and the hours differ by no
    more than one shift. One person doing all the work scores 0.
    """

    def score(self, staff_hours: list[float], allowance_hours: float = 0.0) -> int:
        if not staff_hours:
            return 100

        max_hours = max(staff_hours)
        min_hours = min(staff_hours)
        allowance = allowance_hours * self.shared_fraction(staff_hours)
        excess = max(0.0, (max_hours - min_hours) - allowance)
        raw = 100.0 * (1.0 - excess / max(max_hours, 1.0))
        return int(round(min(100.0, max(0.0, raw))))

    @staticmethod
    def shared_fraction(staff_hours: list[float]) -> float:
        """Fraction of the staff beyond the first who have any hours."""
        if len(staff_hours) < 2:
            return 1.0
        working = sum(1 for h in staff_hours if h > 0)
        return max(0, working - 1) / (len(staff_hours) - 1)
