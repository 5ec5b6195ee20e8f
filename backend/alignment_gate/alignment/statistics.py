"""Running validation counters — the only state shared across validate() calls.

Several validate() calls may be in flight against one engine at once (and from
more than one thread, via validate_sync), so every update happens under a lock.
Callers only ever see immutable snapshots.
"""

import threading
from collections import defaultdict

from pydantic import BaseModel, ConfigDict, Field


class OperationCounters(BaseModel):
    """total / passed / failed for one scope."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    passed: int = 0
    failed: int = 0


class StatisticsSnapshot(BaseModel):
    """Point-in-time, read-only copy of the engine's counters."""

    model_config = ConfigDict(frozen=True)

    total_operations: int = 0
    passed_operations: int = 0
    failed_operations: int = 0
    by_operation_type: dict[str, OperationCounters] = Field(default_factory=dict)


class EngineStatistics:
    """Thread-safe cumulative and per-operation-type counters. Never persisted."""

    def __init__(self):
        self._lock = threading.Lock()
        self._total = 0
        self._passed = 0
        self._failed = 0
        self._by_type: dict[str, list[int]] = defaultdict(lambda: [0, 0, 0])

    def record(self, operation_type: str, allowed: bool) -> None:
        """Count one completed verdict."""
        with self._lock:
            counters = self._by_type[operation_type]
            self._total += 1
            counters[0] += 1
            if allowed:
                self._passed += 1
                counters[1] += 1
            else:
                self._failed += 1
                counters[2] += 1

    def snapshot(self) -> StatisticsSnapshot:
        with self._lock:
            return StatisticsSnapshot(
                total_operations=self._total,
                passed_operations=self._passed,
                failed_operations=self._failed,
                by_operation_type={
                    op: OperationCounters(total=c[0], passed=c[1], failed=c[2])
                    for op, c in self._by_type.items()
                },
            )
