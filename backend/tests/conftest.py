import pytest

from alignment_gate.alignment import (
    AlignmentEngine,
    AlignmentPolicy,
    Check,
    CheckResult,
    FailureKind,
    ParameterSetRegistry,
    build_default_registry,
)
from alignment_gate.alignment.rules.surgical_edit import (
    brace_balance,
    describe_brace_balance,
    describe_exact_match,
    describe_size_delta,
    exact_match,
    size_delta,
)


def make_result(
    name: str = "check",
    passed: bool = True,
    critical: bool = False,
    confidence: int = 100,
    error: str = None,
) -> CheckResult:
    if error is not None:
        kind = FailureKind.PREDICATE_ERROR
    else:
        kind = FailureKind.NONE if passed else FailureKind.PREDICATE_FAILED
    return CheckResult(
        name=name,
        display_name=name.replace("_", " ").title(),
        category="Test",
        critical=critical,
        confidence=confidence,
        passed=passed,
        message=None if passed else f"{name} failed",
        failure_kind=kind,
        error=error,
    )


def make_check(name: str, predicate, critical: bool = False, confidence: int = 100, describe=None) -> Check:
    return Check(
        name=name,
        category="Test",
        critical=critical,
        confidence=confidence,
        predicate=predicate,
        describe=describe,
    )


@pytest.fixture
def edit_checks() -> list[Check]:
    """Three-check file-edit parameter set."""
    return [
        Check(name="exact_match", category="Exact Targeting", critical=True, confidence=100,
              predicate=exact_match, describe=describe_exact_match),
        Check(name="size_delta", category="Size & Scope", critical=False, confidence=98,
              predicate=size_delta, describe=describe_size_delta),
        Check(name="brace_balance", category="Syntax Preservation", critical=True, confidence=100,
              predicate=brace_balance, describe=describe_brace_balance),
    ]


@pytest.fixture
def edit_engine(edit_checks) -> AlignmentEngine:
    return AlignmentEngine(ParameterSetRegistry([("file_edit", edit_checks)]))


@pytest.fixture
def default_engine() -> AlignmentEngine:
    return AlignmentEngine(build_default_registry(), policy=AlignmentPolicy())


@pytest.fixture
def source_file() -> str:
    lines = [f"const value{i} = compute({i});" for i in range(40)]
    lines.insert(10, "function greet(name) {")
    lines.insert(11, "    return 'hello ' + name;")
    lines.insert(12, "}")
    return "\n".join(lines) + "\n"
