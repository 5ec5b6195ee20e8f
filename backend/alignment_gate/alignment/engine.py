"""Alignment Engine — the only entry point callers use.

Resolves the parameter set for an operation type, runs every check
concurrently, aggregates the results under the configured policy, records
statistics and returns an AlignmentVerdict.

Usage:
    engine = AlignmentEngine(build_default_registry())
    verdict = await engine.validate("surgical_edit", {
        "content": source, "old_string": old, "new_string": new,
    })
    if not verdict.allowed:
        # Hand verdict.failure_summary.render() back to the agent
"""

import asyncio
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

import structlog

from alignment_gate.alignment.aggregator import AlignmentPolicy, Aggregator
from alignment_gate.alignment.checks import Params
from alignment_gate.alignment.errors import ConfigurationError
from alignment_gate.alignment.models import AlignmentVerdict
from alignment_gate.alignment.registry import ParameterSetRegistry
from alignment_gate.alignment.runner import DEFAULT_CHECK_TIMEOUT_SECONDS, CheckRunner
from alignment_gate.alignment.statistics import EngineStatistics, StatisticsSnapshot

logger = structlog.get_logger()


class AlignmentEngine:
    """Pre-execution policy gate.

    Design principles:
        - Fail fast: an unregistered operation type raises, never allows
        - Isolated: one broken check degrades the verdict, never crashes it
        - Deterministic: results in registration order, pure aggregation
        - Observable: every verdict is logged with timing and counted
    """

    def __init__(
        self,
        registry: ParameterSetRegistry,
        policy: Optional[AlignmentPolicy] = None,
        check_timeout_seconds: Optional[float] = DEFAULT_CHECK_TIMEOUT_SECONDS,
    ):
        """
        Args:
            registry: Parameter sets this engine can validate
            policy: Confidence floor and non-critical failure budget
            check_timeout_seconds: Per-check deadline (None disables it)
        """
        self._registry = registry
        self._policy = policy or AlignmentPolicy()
        self._runner = CheckRunner(timeout_seconds=check_timeout_seconds)
        self._aggregator = Aggregator(self._policy)
        self._stats = EngineStatistics()

        logger.info(
            "alignment_engine_initialized",
            operation_types=registry.operation_types(),
            minimum_confidence=self._policy.minimum_confidence,
            max_non_critical_failures=self._policy.max_non_critical_failures,
            check_timeout_seconds=check_timeout_seconds,
        )

    @property
    def policy(self) -> AlignmentPolicy:
        return self._policy

    @property
    def registry(self) -> ParameterSetRegistry:
        return self._registry

    @property
    def statistics(self) -> StatisticsSnapshot:
        """Read-only snapshot of cumulative and per-operation-type counters."""
        return self._stats.snapshot()

    def replace_registry(self, registry: ParameterSetRegistry) -> None:
        """Swap in a freshly built registry (config reload). In-flight calls keep the old one."""
        self._registry = registry
        logger.info("alignment_registry_replaced", operation_types=registry.operation_types())

    async def validate(self, operation_type: str, params: Params) -> AlignmentVerdict:
        """Run the full parameter set for an operation and decide whether it may proceed.

        Args:
            operation_type: Registered operation type, e.g. "surgical_edit"
            params: Operation parameters, handed unchanged to every check

        Returns:
            AlignmentVerdict with per-check results and the allow/deny decision

        Raises:
            ConfigurationError: operation type is not registered
        """
        start_time = time.perf_counter()

        try:
            parameter_set = self._registry.lookup(operation_type)
        except ConfigurationError as e:
            logger.error("alignment_unknown_operation", operation_type=operation_type, error=str(e))
            raise

        logger.debug(
            "alignment_validation_started",
            operation_type=operation_type,
            checks=len(parameter_set),
        )

        results = await self._runner.run(parameter_set.checks, params, operation_type)
        aggregation = self._aggregator.aggregate(results)

        total_ms = round((time.perf_counter() - start_time) * 1000, 3)
        passed_count = sum(1 for r in results if r.passed)
        critical_total = sum(1 for r in results if r.critical)
        critical_passed = sum(1 for r in results if r.critical and r.passed)

        verdict = AlignmentVerdict(
            operation_type=operation_type,
            timestamp=datetime.now(timezone.utc),
            total_elapsed_ms=total_ms,
            results=results,
            passed_count=passed_count,
            failed_count=len(results) - passed_count,
            critical_total=critical_total,
            critical_passed=critical_passed,
            critical_failed=critical_total - critical_passed,
            confidence=aggregation.confidence,
            risk_level=aggregation.risk_level,
            allowed=aggregation.allowed,
            failure_summary=aggregation.failure_summary,
        )

        self._stats.record(operation_type, verdict.allowed)

        logger.info(
            "alignment_validation_complete",
            operation_type=operation_type,
            allowed=verdict.allowed,
            confidence=verdict.confidence,
            risk_level=verdict.risk_level.value,
            passed=verdict.passed_count,
            failed=verdict.failed_count,
            critical_failed=verdict.critical_failed,
            duration_ms=total_ms,
            check_timings={r.name: r.elapsed_ms for r in results},
        )

        return verdict

    def validate_sync(self, operation_type: str, params: Params) -> AlignmentVerdict:
        """Blocking wrapper for callers without a running event loop.

        Sync predicates run on the runner's own pool, so asyncio.run() has no
        default-executor threads to join and returns once the deadline passes.
        """
        return asyncio.run(self.validate(operation_type, params))

    def close(self) -> None:
        """Release the check worker pool. The engine cannot validate afterwards."""
        self._runner.shutdown()


@lru_cache
def get_engine() -> AlignmentEngine:
    """Process-wide engine wired from application settings and the reference rules."""
    from alignment_gate.alignment.rules import build_default_registry
    from alignment_gate.config import get_settings

    settings = get_settings()
    return AlignmentEngine(
        registry=build_default_registry(settings),
        policy=AlignmentPolicy(
            minimum_confidence=settings.ALIGNMENT_MIN_CONFIDENCE,
            max_non_critical_failures=settings.ALIGNMENT_MAX_NONCRIT_FAILS,
        ),
        check_timeout_seconds=settings.ALIGNMENT_CHECK_TIMEOUT_SECONDS,
    )
