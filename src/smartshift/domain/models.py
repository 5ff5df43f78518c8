"""Domain models for the weekly shift-assignment engine.

This module contains the core data structures used throughout the engine:
shift templates and requirements (input), shift instances and the
availability matrix (engine input), and assignments, warnings and stats
(engine output).
"""

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from enum import Enum
from typing import Optional

from smartshift.exceptions import InputContractError

MINUTES_PER_DAY = 24 * 60

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

# staff id -> date -> ordered template ids
Assignments = dict[str, dict[date, list[str]]]


def time_to_minutes(t: time) -> int:
    """Minutes from midnight for a time of day."""
    return t.hour * 60 + t.minute


def shift_duration_minutes(start_time: time, end_time: time) -> int:
    """Length of a shift in minutes.

    An end time earlier than the start time is read as ending the next day.
    """
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)
    if end < start:
        end += MINUTES_PER_DAY
    return end - start


class Severity(Enum):
    """Severity of a schedule warning, most severe first."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Sort rank (0 = most severe)."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.CRITICAL: 0, Severity.WARNING: 1, Severity.INFO: 2}


class WarningType(Enum):
    """Kinds of problems the diagnostics stage can flag."""

    NO_STAFF = "no_staff"  # No staff ids supplied at all
    CANNOT_GENERATE = "cannot_generate"  # Demand exists but nothing could be filled
    UNFILLED = "unfilled"  # Shift instance with zero staff
    UNDERSTAFFED = "understaffed"  # Filled but below required count
    OVERWORK = "overwork"  # Weekly hours above threshold
    CONSECUTIVE_DAYS = "consecutive_days"  # Too many worked days in a row
    DOUBLE_SHIFT = "double_shift"  # More than one shift on the same date
    NO_SHIFTS = "no_shifts"  # Staff member received nothing
    UNKNOWN_SHIFT_TEMPLATE = "unknown_shift_template"
    INVALID_REQUIREMENT = "invalid_requirement"
    INVALID_DATE = "invalid_date"  # Record with an unparseable date, dropped


class EngineType(Enum):
    """Assignment engine implementations."""

    GREEDY = "greedy"  # Fairness-weighted greedy pass (default)
    MIN_COST_FLOW = "min_cost_flow"  # OR-Tools min-cost max-flow


class FillStatus(Enum):
    """Outcome of staffing a single shift instance."""

    FILLED = "filled"
    PARTIAL = "partial"
    UNFILLED = "unfilled"


@dataclass
class EngineConfig:
    """Configuration for a schedule generation run.

    Attributes:
        max_weekly_hours: Hours above which a staff member is flagged as overworked.
        max_consecutive_days: Longest allowed run of worked calendar days
            before a warning is raised.
        allow_multiple_shifts_per_day: If False, a staff member never gets more
            than one shift per date, even non-overlapping ones.
        engine_type: Which assignment engine to run.
    """

    max_weekly_hours: float = 40.0
    max_consecutive_days: int = 6
    allow_multiple_shifts_per_day: bool = True
    engine_type: EngineType = EngineType.GREEDY

    def __post_init__(self) -> None:
        if self.max_weekly_hours <= 0:
            raise InputContractError("max_weekly_hours", "must be positive")
        if self.max_consecutive_days < 1:
            raise InputContractError("max_consecutive_days", "must be at least 1")
        if not isinstance(self.engine_type, EngineType):
            self.engine_type = EngineType(self.engine_type)


@dataclass(frozen=True)
class ShiftTemplate:
    """A reusable shift definition for a store.

    Attributes:
        id: Template identifier.
        name: Display name (e.g. "Morning").
        start_time: Local start time.
        end_time: Local end time; earlier than start means the next day.
        color: Display color, passed through untouched.
    """

    id: str
    name: str
    start_time: time
    end_time: time
    color: Optional[str] = None

    @property
    def duration_hours(self) -> float:
        """Shift length in hours."""
        return shift_duration_minutes(self.start_time, self.end_time) / 60.0


@dataclass(frozen=True)
class ShiftRequirement:
    """Required head count for one template on one day of the week.

    Attributes:
        day_of_week: Day as stored by the requirement table (0 = Sunday, 6 = Saturday).
        shift_template_id: Template the requirement applies to.
        required_count: Number of staff needed.
    """

    day_of_week: int
    shift_template_id: str
    required_count: int

    @property
    def day_index(self) -> int:
        """Monday-first day index (0 = Monday, 6 = Sunday)."""
        return (self.day_of_week + 6) % 7


@dataclass(frozen=True)
class InstanceKey:
    """Stable identity of a shift instance."""

    date: date
    shift_template_id: str

    def __str__(self) -> str:
        return f"{self.date.isoformat()}/{self.shift_template_id}"


@dataclass(frozen=True)
class ShiftInstance:
    """One staffing need: a shift template on a specific date.

    Attributes:
        date: Calendar date of the shift.
        shift_template_id: Template identifier.
        shift_name: Display name.
        start_time: Local start time.
        end_time: Local end time.
        required_count: Number of staff needed (always positive).
        color: Display color, passed through.
    """

    date: date
    shift_template_id: str
    shift_name: str
    start_time: time
    end_time: time
    required_count: int
    color: Optional[str] = None

    def __post_init__(self):
        if self.required_count <= 0:
            raise InputContractError(
                "required_count",
                f"shift {self.shift_template_id} on {self.date} must require at least one staff",
            )

    @classmethod
    def from_template(
        cls,
        template: ShiftTemplate,
        shift_date: date,
        required_count: int,
    ) -> "ShiftInstance":
        """Create an instance of a template on a date."""
        return cls(
            date=shift_date,
            shift_template_id=template.id,
            shift_name=template.name,
            start_time=template.start_time,
            end_time=template.end_time,
            required_count=required_count,
            color=template.color,
        )

    @property
    def key(self) -> InstanceKey:
        """Composite identity (date, template)."""
        return InstanceKey(self.date, self.shift_template_id)

    @property
    def day_index(self) -> int:
        """Monday-first day index (0 = Monday, 6 = Sunday)."""
        return self.date.weekday()

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_index]

    @property
    def start_minutes(self) -> int:
        """Minutes from midnight of ``date`` when the shift starts."""
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        """Minutes from midnight of ``date`` when the shift ends (may exceed 24h)."""
        return self.start_minutes + shift_duration_minutes(self.start_time, self.end_time)

    @property
    def duration_hours(self) -> float:
        """Shift length in hours."""
        return shift_duration_minutes(self.start_time, self.end_time) / 60.0

    @property
    def label(self) -> str:
        """Human-readable label used in warning messages."""
        return (
            f"{self.day_name} {self.date.isoformat()} {self.shift_name} "
            f"({self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')})"
        )

    def overlaps(self, other: "ShiftInstance") -> bool:
        """Check if two instances on the same date have overlapping time ranges."""
        if self.date != other.date:
            return False
        return self.start_minutes < other.end_minutes and other.start_minutes < self.end_minutes


@dataclass
class AvailabilityMatrix:
    """Which staff can work which shift on which date.

    Missing entries mean unavailable.

    Attributes:
        entries: staff id -> date -> template id -> available flag.
    """

    entries: dict[str, dict[date, dict[str, bool]]] = field(default_factory=dict)

    def is_available(self, staff_id: str, shift_date: date, shift_template_id: str) -> bool:
        """Check a single staff/date/template cell."""
        return bool(
            self.entries.get(staff_id, {}).get(shift_date, {}).get(shift_template_id, False)
        )

    def set_available(
        self,
        staff_id: str,
        shift_date: date,
        shift_template_id: str,
        available: bool = True,
    ) -> None:
        """Set a single cell."""
        self.entries.setdefault(staff_id, {}).setdefault(shift_date, {})[
            shift_template_id
        ] = available

    def available_staff(self, instance: ShiftInstance, staff_ids: list[str]) -> list[str]:
        """Staff ids (in the given order) available for an instance."""
        return [
            sid
            for sid in staff_ids
            if self.is_available(sid, instance.date, instance.shift_template_id)
        ]

    def has_any_availability(self, staff_ids: Optional[list[str]] = None) -> bool:
        """True if at least one cell is marked available."""
        ids = self.entries.keys() if staff_ids is None else staff_ids
        for sid in ids:
            for shifts in self.entries.get(sid, {}).values():
                if any(shifts.values()):
                    return True
        return False

    @classmethod
    def all_available(
        cls,
        staff_ids: list[str],
        instances: list[ShiftInstance],
    ) -> "AvailabilityMatrix":
        """Matrix where every staff member can work every instance."""
        matrix = cls()
        for sid in staff_ids:
            for instance in instances:
                matrix.set_available(sid, instance.date, instance.shift_template_id)
        return matrix


@dataclass
class FillRecord:
    """How a single shift instance was staffed.

    Attributes:
        instance: The shift instance.
        assigned_staff: Staff ids assigned, in selection order.
        candidate_count: Size of the candidate pool when the instance was filled.
    """

    instance: ShiftInstance
    assigned_staff: list[str] = field(default_factory=list)
    candidate_count: int = 0

    @property
    def filled_count(self) -> int:
        return min(len(self.assigned_staff), self.instance.required_count)

    @property
    def shortfall(self) -> int:
        return self.instance.required_count - self.filled_count

    @property
    def status(self) -> FillStatus:
        if self.filled_count == 0:
            return FillStatus.UNFILLED
        if self.shortfall > 0:
            return FillStatus.PARTIAL
        return FillStatus.FILLED


@dataclass
class ScheduleWarning:
    """A non-fatal diagnostic about a generated schedule.

    Attributes:
        severity: How serious the problem is.
        warning_type: Category of the problem.
        message: Human-readable description.
        date: Date the warning refers to, if any.
        shift_template_id: Template the warning refers to, if any.
        staff_id: Staff member the warning refers to, if any.
        assigned: Staff assigned (staffing warnings only).
        required: Staff required (staffing warnings only).
    """

    severity: Severity
    warning_type: WarningType
    message: str
    date: Optional[date] = None
    shift_template_id: Optional[str] = None
    staff_id: Optional[str] = None
    assigned: Optional[int] = None
    required: Optional[int] = None

    def sort_key(self) -> tuple:
        """Stable ordering: severity, date (undated last), staff, template, type."""
        return (
            self.severity.rank,
            self.date is None,
            self.date or date.max,
            self.staff_id or "",
            self.shift_template_id or "",
            self.warning_type.value,
            self.message,
        )

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.message}"


@dataclass
class ScheduleStats:
    """Aggregate summary of a generated schedule."""

    total_shifts_required: int = 0
    total_shifts_filled: int = 0
    coverage_percent: int = 0
    fairness_score: int = 100
    avg_hours_per_staff: float = 0.0
    min_hours: float = 0.0
    max_hours: float = 0.0
    hours_variance: float = 0.0
    avg_shifts_per_staff: float = 0.0
    min_shifts: int = 0
    max_shifts: int = 0


@dataclass
class ScheduleResult:
    """Complete output of a generation run.

    Attributes:
        assignments: staff id -> date -> template ids.
        warnings: Warnings in stable order.
        stats: Aggregate statistics.
        staff_hours: Assigned hours per staff id (every staff id present).
        staff_shift_count: Assigned shift count per staff id.
        fill_log: Per-instance fill records, in processing order.
    """

    assignments: Assignments = field(default_factory=dict)
    warnings: list[ScheduleWarning] = field(default_factory=list)
    stats: ScheduleStats = field(default_factory=ScheduleStats)
    staff_hours: dict[str, float] = field(default_factory=dict)
    staff_shift_count: dict[str, int] = field(default_factory=dict)
    fill_log: list[FillRecord] = field(default_factory=list)

    @property
    def needs_review(self) -> bool:
        """True if a human should look at the warnings before accepting."""
        return bool(self.warnings)

    def warnings_by_severity(self, severity: Severity) -> list[ScheduleWarning]:
        return [w for w in self.warnings if w.severity == severity]

    def staff_for(self, key: InstanceKey) -> list[str]:
        """Staff ids assigned to an instance, sorted."""
        return sorted(
            sid
            for sid, days in self.assignments.items()
            if key.shift_template_id in days.get(key.date, [])
        )


@dataclass
class WeeklyScheduleRequest:
    """Un-normalized request for one store's week.

    Attributes:
        week_start: Monday of the week being scheduled.
        shift_templates: Store's template catalog.
        requirements: Head counts per day of week and template.
        availability: Availability matrix for the week.
        staff_ids: Staff to schedule.
        diagnostics: Records dropped while parsing the request.
    """

    week_start: date
    shift_templates: list[ShiftTemplate]
    requirements: list[ShiftRequirement]
    availability: AvailabilityMatrix = field(default_factory=AvailabilityMatrix)
    staff_ids: list[str] = field(default_factory=list)
    diagnostics: list[ScheduleWarning] = field(default_factory=list)

    @property
    def week_dates(self) -> list[date]:
        """The seven dates of the week, Monday first."""
        return [self.week_start + timedelta(days=i) for i in range(7)]
