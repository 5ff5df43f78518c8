"""Pre-flight checks run before generating a schedule.

These guard the caller against pointless runs: nothing to staff, nobody to
staff it with, or nobody available for any of it. A run where only some
shifts are blocked still goes ahead; the blocked shifts are listed in the
report so the caller can point them out.
"""

import logging
from dataclasses import dataclass, field

from smartshift.domain.models import AvailabilityMatrix, ShiftInstance
from smartshift.exceptions import PreflightError

logger = logging.getLogger(__name__)


@dataclass
class PreflightReport:
    """Outcome of a successful pre-flight check.

    Attributes:
        blocked_instances: Instances no staff member is available for.
    """

    blocked_instances: list[ShiftInstance] = field(default_factory=list)

    @property
    def has_blocked(self) -> bool:
        return bool(self.blocked_instances)

    def blocked_labels(self) -> list[str]:
        return [instance.label for instance in self.blocked_instances]


def preflight_check(
    instances: list[ShiftInstance],
    availability: AvailabilityMatrix,
    staff_ids: list[str],
) -> PreflightReport:
    """Check that a generation run can produce anything at all.

    Args:
        instances: Normalized shift instances of the week.
        availability: Availability matrix for the week.
        staff_ids: Staff to schedule.

    Returns:
        PreflightReport listing partially blocked instances.

    Raises:
        PreflightError: If there is no demand, no staff, no availability,
            or every instance is blocked.
    """
    if not instances:
        raise PreflightError(
            PreflightError.NO_REQUIREMENTS,
            "No shift requirements for this week; set staffing requirements first",
        )

    if not staff_ids:
        raise PreflightError(
            PreflightError.NO_STAFF,
            "No staff to schedule; add staff members first",
        )

    if not availability.has_any_availability(staff_ids):
        raise PreflightError(
            PreflightError.NO_AVAILABILITY,
            "No staff has marked any availability for this week",
        )

    blocked = [i for i in instances if not availability.available_staff(i, staff_ids)]
    if len(blocked) == len(instances):
        raise PreflightError(
            PreflightError.ALL_SHIFTS_BLOCKED,
            "No staff is available for any required shift",
            details=[i.label for i in blocked],
        )

    if blocked:
        logger.warning(
            "%d of %d shifts have no available staff: %s",
            len(blocked),
            len(instances),
            ", ".join(i.label for i in blocked),
        )
    return PreflightReport(blocked_instances=blocked)
