"""Alignment engine — pre-execution policy gate for agent operations.

Usage:
    from alignment_gate.alignment import AlignmentEngine, build_default_registry

    engine = AlignmentEngine(build_default_registry())
    verdict = await engine.validate("command_execution", params)
    if not verdict.allowed:
        # Surface verdict.failure_summary to the agent
"""

from alignment_gate.alignment.aggregator import AlignmentPolicy
from alignment_gate.alignment.checks import Check, CheckOutcome
from alignment_gate.alignment.engine import AlignmentEngine, get_engine
from alignment_gate.alignment.errors import (
    ConfigurationError,
    DuplicateCheckError,
    EmptyParameterSetError,
    UnknownOperationTypeError,
)
from alignment_gate.alignment.models import (
    AlignmentVerdict,
    CheckResult,
    FailureEntry,
    FailureKind,
    FailureSummary,
    RiskLevel,
)
from alignment_gate.alignment.registry import ParameterSet, ParameterSetRegistry
from alignment_gate.alignment.rules import build_default_registry
from alignment_gate.alignment.statistics import StatisticsSnapshot

__all__ = [
    "AlignmentEngine",
    "get_engine",
    "AlignmentPolicy",
    "Check",
    "CheckOutcome",
    "ParameterSet",
    "ParameterSetRegistry",
    "build_default_registry",
    "AlignmentVerdict",
    "CheckResult",
    "FailureEntry",
    "FailureKind",
    "FailureSummary",
    "RiskLevel",
    "StatisticsSnapshot",
    "ConfigurationError",
    "UnknownOperationTypeError",
    "EmptyParameterSetError",
    "DuplicateCheckError",
]
