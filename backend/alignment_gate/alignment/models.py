"""Alignment models — check results, risk levels, failure summary and verdict.

These are value objects: the engine builds them and hands them to the caller
with no ties back to engine state. Everything is plain pydantic, so a verdict
can be logged, returned over HTTP or fed back to an agent as JSON.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RiskLevel(str, Enum):
    """Coarse risk classification of an operation."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class FailureKind(str, Enum):
    """Why a check did not pass."""

    NONE = "none"
    PREDICATE_FAILED = "predicate_failed"  # Predicate ran and said no
    PREDICATE_ERROR = "predicate_error"    # Predicate raised or timed out


class CheckResult(BaseModel):
    """Outcome of one check for one validation call."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    category: str
    critical: bool
    confidence: int = Field(ge=0, le=100)
    passed: bool
    elapsed_ms: float = 0.0
    message: Optional[str] = None
    failure_kind: FailureKind = FailureKind.NONE
    error: Optional[str] = None  # Detail for PREDICATE_ERROR, e.g. "timeout"

    @property
    def weight(self) -> int:
        """Aggregation weight — critical checks count double."""
        return 2 if self.critical else 1


class FailureEntry(BaseModel):
    """A single failing check as surfaced to the operator or calling agent."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    message: Optional[str] = None
    failure_kind: FailureKind
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: CheckResult) -> "FailureEntry":
        return cls(
            name=result.name,
            display_name=result.display_name,
            message=result.message,
            failure_kind=result.failure_kind,
            error=result.error,
        )


class FailureSummary(BaseModel):
    """Every failing check of a denied verdict, critical failures first."""

    model_config = ConfigDict(frozen=True)

    critical: list[FailureEntry] = Field(default_factory=list)
    non_critical: list[FailureEntry] = Field(default_factory=list)

    @property
    def entries(self) -> list[FailureEntry]:
        return [*self.critical, *self.non_critical]

    def render(self) -> str:
        """Plain-text report, suitable for handing back to an agent for self-correction."""
        lines: list[str] = []

        if self.critical:
            lines.append("CRITICAL FAILURES:")
            lines.extend(_render_entry(e) for e in self.critical)

        if self.non_critical:
            if lines:
                lines.append("")
            lines.append("NON-CRITICAL FAILURES:")
            lines.extend(_render_entry(e) for e in self.non_critical)

        return "\n".join(lines)


def _render_entry(entry: FailureEntry) -> str:
    detail = entry.message or (f"Error: {entry.error}" if entry.error else "Failed")
    return f"  - {entry.display_name}: {detail}"


class AlignmentVerdict(BaseModel):
    """Complete structured output of one validation call."""

    model_config = ConfigDict(frozen=True)

    operation_type: str
    timestamp: datetime
    total_elapsed_ms: float
    results: list[CheckResult]

    passed_count: int
    failed_count: int
    critical_total: int
    critical_passed: int
    critical_failed: int

    confidence: int = Field(ge=0, le=100, description="Weighted aggregate trust score")
    risk_level: RiskLevel
    allowed: bool
    failure_summary: Optional[FailureSummary] = Field(
        default=None,
        description="Present iff allowed is False",
    )

    @property
    def total_checks(self) -> int:
        return len(self.results)

    def result(self, name: str) -> CheckResult:
        """Look up one check's result by name."""
        for r in self.results:
            if r.name == name:
                return r
        raise KeyError(name)
