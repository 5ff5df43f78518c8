"""Domain models and business rules for scheduling."""

from smartshift.domain.models import (
    Assignments,
    AvailabilityMatrix,
    EngineConfig,
    EngineType,
    FillRecord,
    FillStatus,
    InstanceKey,
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
from smartshift.domain.policies import (
    DefaultFairnessPolicy,
    DefaultRankingPolicy,
    FairnessPolicy,
    RankingPolicy,
)

__all__ = [
    # Models
    "Assignments",
    "AvailabilityMatrix",
    "EngineConfig",
    "EngineType",
    "FillRecord",
    "FillStatus",
    "InstanceKey",
    "ScheduleResult",
    "ScheduleStats",
    "ScheduleWarning",
    "Severity",
    "ShiftInstance",
    "ShiftRequirement",
    "ShiftTemplate",
    "WarningType",
    "WeeklyScheduleRequest",
    # Policies
    "DefaultFairnessPolicy",
    "DefaultRankingPolicy",
    "FairnessPolicy",
    "RankingPolicy",
]
