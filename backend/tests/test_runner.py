import asyncio
import threading
import time

import pytest

from alignment_gate.alignment import CheckOutcome, EmptyParameterSetError, FailureKind
from alignment_gate.alignment.runner import CheckRunner

from conftest import make_check


@pytest.mark.asyncio
async def test_results_follow_registration_order_not_completion_order():
    async def slow(params):
        await asyncio.sleep(0.05)
        return True

    async def fast(params):
        return True

    checks = [
        make_check("first_but_slowest", slow),
        make_check("second", fast),
        make_check("third_sync", lambda p: True),
    ]
    results = await CheckRunner().run(checks, {})

    assert [r.name for r in results] == ["first_but_slowest", "second", "third_sync"]
    assert all(r.passed for r in results)


@pytest.mark.asyncio
async def test_checks_run_concurrently():
    async def sleeper(params):
        await asyncio.sleep(0.1)
        return True

    checks = [make_check(f"c{i}", sleeper) for i in range(5)]

    start = time.perf_counter()
    await CheckRunner().run(checks, {})
    assert time.perf_counter() - start < 0.4


@pytest.mark.asyncio
async def test_raising_predicate_is_isolated():
    def boom(params):
        raise RuntimeError("rule body exploded")

    checks = [
        make_check("before", lambda p: True),
        make_check("broken", boom, critical=True),
        make_check("after", lambda p: p["x"] == 1),
    ]
    results = await CheckRunner().run(checks, {"x": 1})

    before, broken, after = results
    assert before.passed and after.passed
    assert not broken.passed
    assert broken.failure_kind == FailureKind.PREDICATE_ERROR
    assert "rule body exploded" in broken.error
    assert broken.confidence == 100
    assert broken.critical


@pytest.mark.asyncio
async def test_timeout_recorded_as_predicate_error():
    async def hangs(params):
        await asyncio.sleep(10)
        return True

    checks = [make_check("hangs", hangs), make_check("quick", lambda p: True)]
    results = await CheckRunner(timeout_seconds=0.05).run(checks, {})

    assert results[0].failure_kind == FailureKind.PREDICATE_ERROR
    assert results[0].error == "timeout"
    assert results[1].passed


@pytest.mark.asyncio
async def test_failed_predicate_is_not_an_error():
    results = await CheckRunner().run([make_check("no", lambda p: False)], {})
    assert results[0].failure_kind == FailureKind.PREDICATE_FAILED
    assert results[0].error is None


@pytest.mark.asyncio
async def test_describe_receives_own_details():
    def predicate(params):
        return CheckOutcome(passed=True, details={"count": 3})

    def describe(passed, params, details):
        return f"passed={passed} count={details['count']}"

    results = await CheckRunner().run([make_check("d", predicate, describe=describe)], {})
    assert results[0].message == "passed=True count=3"


@pytest.mark.asyncio
async def test_describe_failure_only_drops_message():
    def describe(passed, params, details):
        raise KeyError("missing")

    results = await CheckRunner().run([make_check("d", lambda p: True, describe=describe)], {})
    assert results[0].passed
    assert results[0].message is None
    assert results[0].failure_kind == FailureKind.NONE


@pytest.mark.asyncio
async def test_predicate_cannot_mutate_params():
    def writer(params):
        params["_scratch"] = 1
        return True

    params = {"a": 1}
    results = await CheckRunner().run([make_check("writer", writer)], params)

    assert results[0].failure_kind == FailureKind.PREDICATE_ERROR
    assert params == {"a": 1}


@pytest.mark.asyncio
async def test_non_bool_return_is_predicate_error():
    results = await CheckRunner().run([make_check("weird", lambda p: "yes")], {})
    assert results[0].failure_kind == FailureKind.PREDICATE_ERROR
    assert "TypeError" in results[0].error


@pytest.mark.asyncio
async def test_elapsed_is_recorded():
    async def sleeper(params):
        await asyncio.sleep(0.02)
        return True

    results = await CheckRunner().run([make_check("s", sleeper)], {})
    assert results[0].elapsed_ms >= 15


@pytest.mark.asyncio
async def test_empty_check_list_is_configuration_error():
    with pytest.raises(EmptyParameterSetError):
        await CheckRunner().run([], {}, operation_type="nothing")


def test_timeout_must_be_positive():
    with pytest.raises(ValueError):
        CheckRunner(timeout_seconds=0)


@pytest.mark.asyncio
async def test_sync_predicate_timeout_does_not_block_verdict():
    def stuck(params):
        time.sleep(1.5)
        return True

    runner = CheckRunner(timeout_seconds=0.1)
    start = time.perf_counter()
    results = await runner.run([make_check("stuck", stuck), make_check("quick", lambda p: True)], {})

    assert time.perf_counter() - start < 1.0
    assert results[0].error == "timeout"
    assert results[1].passed
    runner.shutdown()


@pytest.mark.asyncio
async def test_predicates_own_timeout_error_keeps_its_detail():
    def socket_read(params):
        raise TimeoutError("read timed out after 5s")

    results = await CheckRunner().run([make_check("remote", socket_read)], {})

    assert results[0].failure_kind == FailureKind.PREDICATE_ERROR
    assert results[0].error == "TimeoutError: read timed out after 5s"


@pytest.mark.asyncio
async def test_saturated_pool_is_reported_and_queued_checks_time_out():
    release = threading.Event()

    def blocks(params):
        release.wait(2)
        return True

    runner = CheckRunner(timeout_seconds=0.1, max_workers=1)
    try:
        results = await runner.run([make_check("holder", blocks), make_check("queued", lambda p: True)], {})
        assert [r.error for r in results] == ["timeout", "timeout"]
        assert runner.busy_workers == 1
    finally:
        release.set()
        runner.shutdown()


@pytest.mark.asyncio
async def test_nested_params_are_private_to_each_check():
    def appends(params):
        params["recent_actions"].append("injected")
        params["tool_params"]["path"] = "/etc/passwd"
        return True

    async def reads(params):
        await asyncio.sleep(0.02)
        return params["recent_actions"] == ["read_file"] and params["tool_params"]["path"] == "a.py"

    params = {"recent_actions": ["read_file"], "tool_params": {"path": "a.py"}}
    results = await CheckRunner().run([make_check("appends", appends), make_check("reads", reads)], params)

    assert all(r.passed for r in results)
    assert params == {"recent_actions": ["read_file"], "tool_params": {"path": "a.py"}}


def test_max_workers_must_be_positive():
    with pytest.raises(ValueError):
        CheckRunner(max_workers=0)
