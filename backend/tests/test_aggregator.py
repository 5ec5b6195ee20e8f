import pytest

from alignment_gate.alignment import AlignmentPolicy, FailureKind, RiskLevel
from alignment_gate.alignment.aggregator import (
    Aggregator,
    assess_risk,
    build_failure_summary,
    calculate_confidence,
)

from conftest import make_result


class TestConfidence:
    def test_all_passed_is_weighted_average(self):
        results = [
            make_result("a", critical=True, confidence=100),
            make_result("b", confidence=98),
            make_result("c", critical=True, confidence=100),
        ]
        # (200 + 98 + 200) / 5 = 99.6
        assert calculate_confidence(results) == 100

    def test_failed_critical_pulls_score_down_double(self):
        results = [
            make_result("a", critical=True, passed=False, confidence=100),
            make_result("b", confidence=98),
            make_result("c", critical=True, confidence=100),
        ]
        # (0 + 98 + 200) / 5 = 59.6
        assert calculate_confidence(results) == 60

    def test_half_rounds_up(self):
        results = [
            make_result("a", confidence=80),
            make_result("b", confidence=85),
        ]
        assert calculate_confidence(results) == 83

    def test_empty_results_score_zero(self):
        assert calculate_confidence([]) == 0

    def test_monotonic_when_flipping_a_failure(self):
        base = [
            make_result("a", critical=True, confidence=90),
            make_result("b", passed=False, confidence=70),
            make_result("c", critical=True, passed=False, confidence=95),
            make_result("d", passed=False, confidence=0),
        ]
        before = calculate_confidence(base)
        for i, r in enumerate(base):
            if r.passed:
                continue
            flipped = list(base)
            flipped[i] = make_result(r.name, passed=True, critical=r.critical, confidence=r.confidence)
            assert calculate_confidence(flipped) >= before


class TestRisk:
    def test_critical_failure_wins_over_score(self):
        results = [make_result("a", critical=True, passed=False)]
        assert assess_risk(results, 100) == RiskLevel.CRITICAL

    @pytest.mark.parametrize(
        "confidence,expected",
        [(69, RiskLevel.HIGH), (70, RiskLevel.MEDIUM), (84, RiskLevel.MEDIUM), (85, RiskLevel.LOW)],
    )
    def test_thresholds(self, confidence, expected):
        assert assess_risk([make_result("a")], confidence) == expected


class TestAllowDecision:
    def test_all_pass_allowed(self):
        agg = Aggregator().aggregate([make_result("a", critical=True), make_result("b")])
        assert agg.allowed
        assert agg.risk_level == RiskLevel.LOW
        assert agg.failure_summary is None

    def test_critical_veto_regardless_of_confidence(self):
        results = [make_result("veto", critical=True, passed=False, confidence=0)]
        results += [make_result(f"ok{i}", critical=True) for i in range(50)]
        agg = Aggregator(AlignmentPolicy(minimum_confidence=0)).aggregate(results)
        assert agg.confidence >= 95
        assert not agg.allowed
        assert agg.risk_level == RiskLevel.CRITICAL

    def test_non_critical_budget_boundary(self):
        policy = AlignmentPolicy(minimum_confidence=0, max_non_critical_failures=2)
        passing = [make_result(f"ok{i}", critical=True) for i in range(10)]

        at_budget = passing + [make_result(f"nc{i}", passed=False) for i in range(2)]
        over_budget = passing + [make_result(f"nc{i}", passed=False) for i in range(3)]

        assert Aggregator(policy).aggregate(at_budget).allowed
        assert not Aggregator(policy).aggregate(over_budget).allowed

    def test_zero_budget_denies_single_non_critical_failure(self):
        policy = AlignmentPolicy(minimum_confidence=0, max_non_critical_failures=0)
        results = [make_result("a", critical=True), make_result("b", passed=False)]
        assert not Aggregator(policy).aggregate(results).allowed

    def test_confidence_floor_alone_denies(self):
        # (2*80 + 80) / 3 = 80 — nothing failed, but below the floor of 85
        results = [
            make_result("crit", critical=True, confidence=80),
            make_result("noncrit", confidence=80),
        ]
        agg = Aggregator(AlignmentPolicy(minimum_confidence=85)).aggregate(results)
        assert agg.confidence == 80
        assert agg.risk_level == RiskLevel.MEDIUM
        assert not agg.allowed
        assert agg.failure_summary is not None
        assert agg.failure_summary.entries == []

    def test_deterministic(self):
        results = [
            make_result("a", critical=True, passed=False),
            make_result("b", confidence=60),
            make_result("c", passed=False, error="timeout"),
        ]
        aggregator = Aggregator()
        assert aggregator.aggregate(results) == aggregator.aggregate(list(results))


class TestFailureSummary:
    def test_critical_failures_listed_first(self):
        results = [
            make_result("style", passed=False),
            make_result("exact_match", critical=True, passed=False),
            make_result("fine"),
            make_result("broken", critical=True, passed=False, error="RuntimeError: boom"),
        ]
        summary = build_failure_summary(results)

        assert [e.name for e in summary.critical] == ["exact_match", "broken"]
        assert [e.name for e in summary.non_critical] == ["style"]
        assert [e.name for e in summary.entries] == ["exact_match", "broken", "style"]
        assert summary.critical[1].failure_kind == FailureKind.PREDICATE_ERROR

    def test_render_separates_sections(self):
        results = [
            make_result("style", passed=False),
            make_result("exact_match", critical=True, passed=False),
        ]
        text = build_failure_summary(results).render()

        assert text.index("CRITICAL FAILURES:") < text.index("NON-CRITICAL FAILURES:")
        assert "Exact Match: exact_match failed" in text
        assert "Style: style failed" in text
