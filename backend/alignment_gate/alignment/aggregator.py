"""Aggregator — folds raw check results into confidence, risk and the allow decision.

Scoring:
    - Each check carries a weight: 2 if critical, 1 otherwise
    - A passed check contributes weight x confidence, a failed one contributes 0
    - Confidence = round(sum / total weight), half rounded up

Risk (first match wins):
    CRITICAL  any critical check failed
    HIGH      confidence < 70
    MEDIUM    confidence < 85
    LOW       otherwise

Allowed only when ALL of:
    1. every critical check passed (no failure budget for critical checks)
    2. confidence >= policy.minimum_confidence
    3. non-critical failures <= policy.max_non_critical_failures

All functions are deterministic: same results in, same verdict out.
"""

from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from alignment_gate.alignment.models import (
    CheckResult,
    FailureEntry,
    FailureSummary,
    RiskLevel,
)

HIGH_RISK_BELOW = 70
MEDIUM_RISK_BELOW = 85


class AlignmentPolicy(BaseModel):
    """The two policy knobs. Fixed for the lifetime of an engine."""

    model_config = ConfigDict(frozen=True)

    minimum_confidence: int = Field(default=85, ge=0, le=100)
    max_non_critical_failures: int = Field(default=2, ge=0)


class Aggregation(BaseModel):
    """Aggregator output, merged into the verdict by the engine."""

    model_config = ConfigDict(frozen=True)

    confidence: int
    risk_level: RiskLevel
    allowed: bool
    failure_summary: Optional[FailureSummary] = None


def calculate_confidence(results: Sequence[CheckResult]) -> int:
    """Weighted average of passed-check confidence, 0-100."""
    if not results:
        return 0

    weighted_sum = sum(r.weight * r.confidence for r in results if r.passed)
    total_weight = sum(r.weight for r in results)

    # Integer half-up rounding; round() would bank 82.5 down to 82
    return (2 * weighted_sum + total_weight) // (2 * total_weight)


def assess_risk(results: Sequence[CheckResult], confidence: int) -> RiskLevel:
    if any(r.critical and not r.passed for r in results):
        return RiskLevel.CRITICAL
    if confidence < HIGH_RISK_BELOW:
        return RiskLevel.HIGH
    if confidence < MEDIUM_RISK_BELOW:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def build_failure_summary(results: Sequence[CheckResult]) -> FailureSummary:
    """List every failing check, critical ones first, registration order within each group."""
    failures = [r for r in results if not r.passed]
    return FailureSummary(
        critical=[FailureEntry.from_result(r) for r in failures if r.critical],
        non_critical=[FailureEntry.from_result(r) for r in failures if not r.critical],
    )


class Aggregator:
    """Applies an AlignmentPolicy to a batch of check results."""

    def __init__(self, policy: Optional[AlignmentPolicy] = None):
        self.policy = policy or AlignmentPolicy()

    def is_allowed(self, results: Sequence[CheckResult], confidence: int) -> bool:
        critical_pass = all(r.passed for r in results if r.critical)
        non_critical_fails = sum(1 for r in results if not r.critical and not r.passed)

        return (
            critical_pass
            and confidence >= self.policy.minimum_confidence
            and non_critical_fails <= self.policy.max_non_critical_failures
        )

    def aggregate(self, results: Sequence[CheckResult]) -> Aggregation:
        confidence = calculate_confidence(results)
        allowed = self.is_allowed(results, confidence)

        return Aggregation(
            confidence=confidence,
            risk_level=assess_risk(results, confidence),
            allowed=allowed,
            failure_summary=None if allowed else build_failure_summary(results),
        )
