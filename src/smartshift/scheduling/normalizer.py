"""Demand normalizer.

Expands a week's requirement table into a flat list of shift instances,
one per date and template with a positive required count.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from smartshift.domain.models import (
    DAY_NAMES,
    ScheduleWarning,
    Severity,
    ShiftInstance,
    ShiftRequirement,
    ShiftTemplate,
    WarningType,
)
from smartshift.exceptions import InputContractError

logger = logging.getLogger(__name__)


@dataclass
class NormalizationResult:
    """Output of the demand normalizer.

    Attributes:
        instances: Shift instances ordered by date, start time and template id.
        diagnostics: Info-level warnings for dropped requirement rows.
    """

    instances: list[ShiftInstance] = field(default_factory=list)
    diagnostics: list[ScheduleWarning] = field(default_factory=list)


class DemandNormalizer:
    """Turns requirement rows and the template catalog into shift instances.

    Bad rows are dropped with a diagnostic instead of failing the batch.

    Example:
        >>> normalizer = DemandNormalizer()
        >>> result = normalizer.normalize(requirements, templates, date(2024, 1, 15))
        >>> len(result.instances)
        7
    """

    def normalize(
        self,
        requirements: list[ShiftRequirement],
        shift_templates: list[ShiftTemplate],
        week_start: date,
    ) -> NormalizationResult:
        """Expand requirements into shift instances for one week.

        Args:
            requirements: Head counts per day of week and template.
            shift_templates: The store's template catalog.
            week_start: Monday of the target week.

        Returns:
            NormalizationResult with instances and diagnostics.

        Raises:
            InputContractError: If week_start is not a Monday.
        """
        if week_start.weekday() != 0:
            raise InputContractError(
                "week_start", f"{week_start.isoformat()} is not a Monday"
            )

        result = NormalizationResult()
        templates = {t.id: t for t in shift_templates}

        # (day_index, template id) -> required count; later rows win
        demand: dict[tuple[int, str], int] = {}

        for row in requirements:
            if not 0 <= row.day_of_week <= 6:
                self._drop(
                    result,
                    WarningType.INVALID_REQUIREMENT,
                    f"Requirement for shift {row.shift_template_id} has invalid "
                    f"day of week {row.day_of_week}; skipped",
                    shift_template_id=row.shift_template_id,
                )
                continue

            if row.shift_template_id not in templates:
                self._drop(
                    result,
                    WarningType.UNKNOWN_SHIFT_TEMPLATE,
                    f"Requirement on {DAY_NAMES[row.day_index]} references unknown "
                    f"shift template {row.shift_template_id}; skipped",
                    shift_date=week_start + timedelta(days=row.day_index),
                    shift_template_id=row.shift_template_id,
                )
                continue

            if row.required_count < 0:
                self._drop(
                    result,
                    WarningType.INVALID_REQUIREMENT,
                    f"Requirement on {DAY_NAMES[row.day_index]} for shift "
                    f"{row.shift_template_id} has negative count {row.required_count}; skipped",
                    shift_date=week_start + timedelta(days=row.day_index),
                    shift_template_id=row.shift_template_id,
                )
                continue

            slot = (row.day_index, row.shift_template_id)
            if slot in demand:
                logger.warning(
                    "Duplicate requirement for %s on %s; using the later count %d",
                    row.shift_template_id,
                    DAY_NAMES[row.day_index],
                    row.required_count,
                )
            demand[slot] = row.required_count

        for (day_index, template_id), required in demand.items():
            if required == 0:
                continue
            template = templates[template_id]
            result.instances.append(
                ShiftInstance.from_template(
                    template,
                    week_start + timedelta(days=day_index),
                    required,
                )
            )

        result.instances.sort(
            key=lambda i: (i.date, i.start_minutes, i.shift_template_id)
        )
        logger.info(
            "Normalized %d requirement rows into %d shift instances (%d dropped)",
            len(requirements),
            len(result.instances),
            len(result.diagnostics),
        )
        return result

    def _drop(
        self,
        result: NormalizationResult,
        warning_type: WarningType,
        message: str,
        shift_date: Optional[date] = None,
        shift_template_id: Optional[str] = None,
    ) -> None:
        """Record a dropped requirement row."""
        logger.warning(message)
        result.diagnostics.append(
            ScheduleWarning(
                severity=Severity.INFO,
                warning_type=warning_type,
                message=message,
                date=shift_date,
                shift_template_id=shift_template_id,
            )
        )


def normalize(
    requirements: list[ShiftRequirement],
    shift_templates: list[ShiftTemplate],
    week_start: date,
) -> NormalizationResult:
    """Module-level shortcut for ``DemandNormalizer().normalize``."""
    return DemandNormalizer().normalize(requirements, shift_templates, week_start)
