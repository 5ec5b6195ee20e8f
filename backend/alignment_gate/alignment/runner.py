"""Concurrent check runner — fans every check of a parameter set out, then joins.

One broken check must degrade the verdict, never crash the batch: any
exception or timeout inside a predicate becomes a failing CheckResult for that
check alone. Results come back in registration order regardless of which
check finished first, so reports diff cleanly across runs.
"""

import asyncio
import inspect
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Mapping, Optional, Sequence

import structlog

from alignment_gate.alignment.checks import Check, CheckOutcome, Params, freeze_params
from alignment_gate.alignment.errors import EmptyParameterSetError
from alignment_gate.alignment.models import CheckResult, FailureKind

logger = structlog.get_logger()

DEFAULT_CHECK_TIMEOUT_SECONDS = 2.0


def default_max_workers() -> int:
    """Same sizing rule as ThreadPoolExecutor's own default."""
    return min(32, (os.cpu_count() or 1) + 4)


class CheckRunner:
    """Runs checks concurrently with per-check timeout and failure isolation.

    Sync predicates run on a bounded thread pool owned by the runner, never on
    the event loop's default executor. A timed-out sync predicate cannot be
    interrupted: it keeps its worker until it returns, but the verdict no
    longer waits for it, and neither does asyncio.run() at shutdown.
    """

    def __init__(
        self,
        timeout_seconds: Optional[float] = DEFAULT_CHECK_TIMEOUT_SECONDS,
        max_workers: Optional[int] = None,
    ):
        """
        Args:
            timeout_seconds: Per-check deadline. None disables the timeout.
            max_workers: Size of the worker pool for sync predicates
        """
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if max_workers is not None and max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self.timeout_seconds = timeout_seconds
        self.max_workers = max_workers or default_max_workers()
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="alignment-check",
        )
        self._busy = 0
        self._busy_lock = threading.Lock()

    @property
    def busy_workers(self) -> int:
        """Sync predicates currently running on the pool, timed-out ones included."""
        with self._busy_lock:
            return self._busy

    async def run(
        self,
        checks: Sequence[Check],
        params: Params,
        operation_type: str = "",
    ) -> list[CheckResult]:
        """Evaluate every check and wait for all of them.

        Args:
            checks: Checks in registration order
            params: Operation parameters; each predicate gets its own frozen copy
            operation_type: Used for log context only

        Returns:
            One CheckResult per check, in the order of ``checks``
        """
        if not checks:
            raise EmptyParameterSetError(operation_type)

        # gather() preserves argument order, so completion order never leaks out
        return list(await asyncio.gather(
            *(self._run_one(check, params, operation_type) for check in checks)
        ))

    async def _run_one(self, check: Check, params: Params, operation_type: str) -> CheckResult:
        start = time.perf_counter()
        try:
            view = freeze_params(params)
        except Exception as e:
            return self._fault_result(check, e, start, operation_type)

        try:
            if self.timeout_seconds is None:
                outcome, error = await self._guarded(check, view)
            else:
                outcome, error = await asyncio.wait_for(
                    self._guarded(check, view), timeout=self.timeout_seconds
                )
        except asyncio.TimeoutError:
            # Only the deadline raises here; predicate errors come back from _guarded
            busy = self.busy_workers
            logger.warning(
                "alignment_check_timeout",
                operation_type=operation_type,
                check=check.name,
                timeout_seconds=self.timeout_seconds,
                busy_workers=busy,
                max_workers=self.max_workers,
                pool_saturated=busy >= self.max_workers,
            )
            return _error_result(check, "timeout", _elapsed_ms(start))

        if error is not None:
            return self._fault_result(check, error, start, operation_type)

        return CheckResult(
            name=check.name,
            display_name=check.display_name,
            category=check.category,
            critical=check.critical,
            confidence=check.confidence,
            passed=outcome.passed,
            elapsed_ms=_elapsed_ms(start),
            message=_describe(check, outcome, view),
            failure_kind=FailureKind.NONE if outcome.passed else FailureKind.PREDICATE_FAILED,
        )

    def _fault_result(self, check: Check, error: Exception, start: float, operation_type: str) -> CheckResult:
        logger.error(
            "alignment_check_failed",
            operation_type=operation_type,
            check=check.name,
            error=str(error),
            error_type=type(error).__name__,
        )
        return _error_result(check, f"{type(error).__name__}: {error}", _elapsed_ms(start))

    async def _guarded(self, check: Check, params: Params) -> tuple[Optional[CheckOutcome], Optional[Exception]]:
        try:
            return CheckOutcome.coerce(await self._call_predicate(check, params)), None
        except Exception as e:
            return None, e

    async def _call_predicate(self, check: Check, params: Params) -> Any:
        if inspect.iscoroutinefunction(check.predicate):
            result = await check.predicate(params)
        else:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(self._executor, self._in_worker, check.predicate, params)

        # A plain function may still hand back an awaitable
        if inspect.isawaitable(result):
            return await result
        return result

    def _in_worker(self, predicate: Callable[..., Any], params: Params) -> Any:
        with self._busy_lock:
            self._busy += 1
        try:
            return predicate(params)
        finally:
            with self._busy_lock:
                self._busy -= 1

    def shutdown(self) -> None:
        """Release the worker pool without waiting on predicates still running."""
        self._executor.shutdown(wait=False)


def _describe(check: Check, outcome: CheckOutcome, params: Params) -> Optional[str]:
    """Best-effort explanation. A broken describe() costs the message, not the result."""
    if check.describe is None:
        return None
    details: Mapping[str, Any] = outcome.details
    try:
        message = check.describe(outcome.passed, params, details)
    except Exception as e:
        logger.debug("alignment_describe_failed", check=check.name, error=str(e))
        return None
    return None if message is None else str(message)


def _error_result(check: Check, detail: str, elapsed_ms: float) -> CheckResult:
    return CheckResult(
        name=check.name,
        display_name=check.display_name,
        category=check.category,
        critical=check.critical,
        confidence=check.confidence,
        passed=False,
        elapsed_ms=elapsed_ms,
        failure_kind=FailureKind.PREDICATE_ERROR,
        error=detail,
    )


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 3)
