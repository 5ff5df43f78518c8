"""Scheduling engine for generating weekly shift assignments."""

from smartshift.scheduling.assignment_engine import (
    AssignmentOutcome,
    GreedyAssignmentEngine,
)
from smartshift.scheduling.diagnostics import ScheduleDiagnostics, Summary
from smartshift.scheduling.flow_engine import FlowSolveResult, MinCostFlowEngine
from smartshift.scheduling.normalizer import DemandNormalizer, NormalizationResult
from smartshift.scheduling.preflight import PreflightReport, preflight_check
from smartshift.scheduling.scheduler import SmartScheduler, create_scheduler

__all__ = [
    # Orchestration
    "SmartScheduler",
    "create_scheduler",
    "preflight_check",
    "PreflightReport",
    # Stages
    "DemandNormalizer",
    "NormalizationResult",
    "GreedyAssignmentEngine",
    "MinCostFlowEngine",
    "AssignmentOutcome",
    "FlowSolveResult",
    "ScheduleDiagnostics",
    "Summary",
]
