"""Request and response documents at the engine boundary.

Two request forms are accepted:

- Normalized: ``shiftInstancesRaw`` (or ``shifts``), ``availability``,
  ``staffIds`` (or ``staffList``).
- Week form: ``weekStartDate``, ``shiftTemplates``, ``requirements``,
  ``availability``, ``staffIds``.

Dates are ISO strings (``2024-01-15``), times are ``HH:MM`` or ``HH:MM:SS``.
Shape errors raise InputContractError with the path of the offending field.
A record whose date string does not parse is dropped with an info diagnostic
instead, and the rest of the request is kept.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Optional, Union

from smartshift.domain.models import (
    AvailabilityMatrix,
    ScheduleResult,
    ScheduleStats,
    ScheduleWarning,
    Severity,
    ShiftInstance,
    ShiftRequirement,
    ShiftTemplate,
    WarningType,
    WeeklyScheduleRequest,
)
from smartshift.exceptions import InputContractError

logger = logging.getLogger(__name__)


@dataclass
class ScheduleInput:
    """A parsed normalized request.

    Attributes:
        instances: Shift instances with a positive required count.
        availability: Availability matrix.
        staff_ids: Staff to schedule, in request order.
        allow_multiple_shifts_per_day: Request-level override, if given.
        diagnostics: Records dropped while parsing.
    """

    instances: list[ShiftInstance] = field(default_factory=list)
    availability: AvailabilityMatrix = field(default_factory=AvailabilityMatrix)
    staff_ids: list[str] = field(default_factory=list)
    allow_multiple_shifts_per_day: Optional[bool] = None
    diagnostics: list[ScheduleWarning] = field(default_factory=list)


def is_week_request(payload: dict) -> bool:
    """True if the payload uses the week form."""
    return "weekStartDate" in payload


def parse_request(payload: Any) -> ScheduleInput:
    """Parse a normalized request document.

    Args:
        payload: Decoded JSON object.

    Returns:
        ScheduleInput ready for the scheduler.

    Raises:
        InputContractError: If the document is malformed.
    """
    _require_object(payload, "request")

    shifts_field = "shiftInstancesRaw" if "shiftInstancesRaw" in payload else "shifts"
    raw_shifts = _require_list(payload.get(shifts_field), shifts_field)

    diagnostics: list[ScheduleWarning] = []
    instances: list[ShiftInstance] = []
    seen: set[tuple[date, str]] = set()
    for idx, raw in enumerate(raw_shifts):
        path = f"{shifts_field}[{idx}]"
        instance = _parse_instance(raw, path, diagnostics)
        if instance is None:
            continue
        slot = (instance.date, instance.shift_template_id)
        if slot in seen:
            raise InputContractError(
                path,
                f"duplicate shift {instance.shift_template_id} on {instance.date.isoformat()}",
            )
        seen.add(slot)
        instances.append(instance)

    return ScheduleInput(
        instances=instances,
        availability=parse_availability(payload.get("availability", {}), diagnostics=diagnostics),
        staff_ids=_parse_staff_ids(payload),
        allow_multiple_shifts_per_day=_optional_bool(payload, "allowMultipleShiftsPerDay"),
        diagnostics=diagnostics,
    )


def parse_week_request(payload: Any) -> WeeklyScheduleRequest:
    """Parse a week-form request document.

    Raises:
        InputContractError: If the document is malformed.
    """
    _require_object(payload, "request")

    templates = []
    for idx, raw in enumerate(_require_list(payload.get("shiftTemplates"), "shiftTemplates")):
        path = f"shiftTemplates[{idx}]"
        _require_object(raw, path)
        templates.append(
            ShiftTemplate(
                id=_require_str(raw.get("id"), f"{path}.id"),
                name=_require_str(raw.get("name"), f"{path}.name"),
                start_time=parse_time(raw.get("startTime"), f"{path}.startTime"),
                end_time=parse_time(raw.get("endTime"), f"{path}.endTime"),
                color=raw.get("color"),
            )
        )

    diagnostics: list[ScheduleWarning] = []
    requirements = []
    for idx, raw in enumerate(_require_list(payload.get("requirements"), "requirements")):
        path = f"requirements[{idx}]"
        _require_object(raw, path)
        requirements.append(
            ShiftRequirement(
                day_of_week=_require_int(raw.get("dayOfWeek"), f"{path}.dayOfWeek"),
                shift_template_id=_require_str(
                    raw.get("shiftTemplateId"), f"{path}.shiftTemplateId"
                ),
                required_count=_require_int(
                    raw.get("requiredCount", raw.get("required")),
                    f"{path}.requiredCount",
                ),
            )
        )

    return WeeklyScheduleRequest(
        week_start=parse_date(payload.get("weekStartDate"), "weekStartDate"),
        shift_templates=templates,
        requirements=requirements,
        availability=parse_availability(payload.get("availability", {}), diagnostics=diagnostics),
        staff_ids=_parse_staff_ids(payload),
        diagnostics=diagnostics,
    )


def parse_availability(
    raw: Any,
    path: str = "availability",
    diagnostics: Optional[list[ScheduleWarning]] = None,
) -> AvailabilityMatrix:
    """Parse the nested staff -> date -> template -> bool object.

    A date key that does not parse is ignored; when ``diagnostics`` is given
    an info warning is appended to it.
    """
    _require_object(raw, path)
    matrix = AvailabilityMatrix()
    for staff_id, days in raw.items():
        staff_path = f"{path}.{staff_id}"
        _require_object(days, staff_path)
        for date_str, shifts in days.items():
            day_path = f"{staff_path}.{date_str}"
            _require_object(shifts, day_path)
            for template_id, flag in shifts.items():
                if not isinstance(flag, bool):
                    raise InputContractError(
                        f"{day_path}.{template_id}", f"expected a boolean, got {flag!r}"
                    )

            shift_date = parse_date_or_none(date_str, day_path)
            if shift_date is None:
                _drop_bad_date(
                    diagnostics,
                    f"Availability of staff {staff_id} has invalid date {date_str!r}; ignored",
                    staff_id=staff_id,
                )
                continue
            for template_id, flag in shifts.items():
                matrix.set_available(staff_id, shift_date, template_id, flag)
    return matrix


def parse_date(value: Any, path: str) -> date:
    """Parse an ISO date string."""
    shift_date = parse_date_or_none(value, path)
    if shift_date is None:
        raise InputContractError(path, f"invalid date {value!r}")
    return shift_date


def parse_date_or_none(value: Any, path: str) -> Optional[date]:
    """Parse an ISO date string; None if the string is not a valid date.

    Raises:
        InputContractError: If the value is not a string at all.
    """
    if not isinstance(value, str):
        raise InputContractError(path, f"expected an ISO date string, got {value!r}")
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def parse_time(value: Any, path: str) -> time:
    """Parse an ``HH:MM`` or ``HH:MM:SS`` time string."""
    if not isinstance(value, str):
        raise InputContractError(path, f"expected a time string, got {value!r}")
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    raise InputContractError(path, f"invalid time {value!r}, expected HH:MM")


def _parse_instance(
    raw: Any,
    path: str,
    diagnostics: list[ScheduleWarning],
) -> Optional[ShiftInstance]:
    """Parse one shift instance; None for zero demand or an invalid date."""
    _require_object(raw, path)

    required = _require_int(
        raw.get("requiredCount", raw.get("required")), f"{path}.requiredCount"
    )
    if required < 0:
        raise InputContractError(f"{path}.requiredCount", f"must not be negative, got {required}")

    template_id = _require_str(raw.get("shiftTemplateId"), f"{path}.shiftTemplateId")
    shift_date = parse_date_or_none(raw.get("date"), f"{path}.date")
    if shift_date is None:
        _drop_bad_date(
            diagnostics,
            f"Shift {template_id} at {path} has invalid date {raw.get('date')!r}; skipped",
            shift_template_id=template_id,
        )
        return None
    if required == 0:
        logger.info("Skipping %s on %s: required count is 0", template_id, shift_date)
        return None

    return ShiftInstance(
        date=shift_date,
        shift_template_id=template_id,
        shift_name=_require_str(raw.get("shiftName", template_id), f"{path}.shiftName"),
        start_time=parse_time(raw.get("startTime"), f"{path}.startTime"),
        end_time=parse_time(raw.get("endTime"), f"{path}.endTime"),
        required_count=required,
        color=raw.get("color"),
    )


def _drop_bad_date(
    diagnostics: Optional[list[ScheduleWarning]],
    message: str,
    shift_template_id: Optional[str] = None,
    staff_id: Optional[str] = None,
) -> None:
    """Log a record dropped for an unparseable date and collect the warning."""
    logger.warning(message)
    if diagnostics is None:
        return
    diagnostics.append(
        ScheduleWarning(
            severity=Severity.INFO,
            warning_type=WarningType.INVALID_DATE,
            message=message,
            shift_template_id=shift_template_id,
            staff_id=staff_id,
        )
    )


def _parse_staff_ids(payload: dict) -> list[str]:
    staff_field = "staffIds" if "staffIds" in payload else "staffList"
    raw = _require_list(payload.get(staff_field, []), staff_field)
    return [_require_str(sid, f"{staff_field}[{idx}]") for idx, sid in enumerate(raw)]


def _optional_bool(payload: dict, key: str) -> Optional[bool]:
    value = payload.get(key)
    if value is not None and not isinstance(value, bool):
        raise InputContractError(key, f"expected a boolean, got {value!r}")
    return value


def _require_object(value: Any, path: str) -> None:
    if not isinstance(value, dict):
        raise InputContractError(path, f"expected an object, got {type(value).__name__}")


def _require_list(value: Any, path: str) -> list:
    if not isinstance(value, list):
        raise InputContractError(path, f"expected a list, got {type(value).__name__}")
    return value


def _require_str(value: Any, path: str) -> str:
    if not isinstance(value, str) or not value:
        raise InputContractError(path, f"expected a non-empty string, got {value!r}")
    return value


def _require_int(value: Any, path: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise InputContractError(path, f"expected an integer, got {value!r}")
    return value


def warning_to_dict(warning: ScheduleWarning) -> dict:
    """Serialize a warning, omitting unset fields."""
    data = {
        "severity": warning.severity.value,
        "type": warning.warning_type.value,
        "message": warning.message,
        "date": warning.date.isoformat() if warning.date else None,
        "shiftTemplateId": warning.shift_template_id,
        "staffId": warning.staff_id,
        "assigned": warning.assigned,
        "required": warning.required,
    }
    return {k: v for k, v in data.items() if v is not None}


def stats_to_dict(stats: ScheduleStats) -> dict:
    return {
        "totalShiftsRequired": stats.total_shifts_required,
        "totalShiftsFilled": stats.total_shifts_filled,
        "coveragePercent": stats.coverage_percent,
        "fairnessScore": stats.fairness_score,
        "avgHoursPerStaff": stats.avg_hours_per_staff,
        "minHours": stats.min_hours,
        "maxHours": stats.max_hours,
        "hoursVariance": stats.hours_variance,
        "avgShiftsPerStaff": stats.avg_shifts_per_staff,
        "minShifts": stats.min_shifts,
        "maxShifts": stats.max_shifts,
    }


def result_to_dict(result: ScheduleResult) -> dict:
    """Build the response document for a schedule result."""
    return {
        "assignments": {
            sid: {d.isoformat(): list(tids) for d, tids in sorted(days.items())}
            for sid, days in sorted(result.assignments.items())
        },
        "warnings": [warning_to_dict(w) for w in result.warnings],
        "stats": stats_to_dict(result.stats),
        "staffHours": dict(sorted(result.staff_hours.items())),
        "staffShiftCount": dict(sorted(result.staff_shift_count.items())),
        "needsReview": result.needs_review,
    }


def load_json(path: Union[str, Path]) -> Any:
    """Read a JSON document from disk."""
    with open(path, encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise InputContractError(str(path), f"invalid JSON: {e}") from e


def dump_json(document: Any, path: Union[str, Path]) -> None:
    """Write a JSON document to disk."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, sort_keys=False)
        f.write("\n")
