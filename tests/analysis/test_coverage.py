"""Tests for per-function semantic coverage."""

import pytest

from semcov.analysis.coverage import SemanticCoverage, compute_coverage
from semcov.dumpcases.models import CaseKind, CompiledCase, CompiledFunction, CrashReason
from semcov.dumpcases.parser import parse
from semcov.dumpcases.rules import DEFAULT_RULE_SET
from semcov.runtime.correlate import FunctionRuntimeHit, LineRange
from semcov.runtime.mangling import MatchStatus


def _one(text: str) -> CompiledFunction:
    return parse(text, rules=DEFAULT_RULE_SET).functions[0]


def _hit(fn: CompiledFunction, executed_lines: int) -> FunctionRuntimeHit:
    return FunctionRuntimeHit(
        full_name=fn.full_name,
        mangled_name=fn.full_name.replace(".", "-"),
        identifier=fn.full_name.replace(".", "-"),
        status=MatchStatus.EXACT,
        line_range=LineRange(1, 10),
        executed_lines=executed_lines,
        total_hits=executed_lines,
    )


class TestComputeCoverage:
    def test_fully_exercised_total_function(self, safe_head_dump: str) -> None:
        fn = _one(safe_head_dump)

        cov = compute_coverage(fn, _hit(fn, 2))

        assert cov.total_canonical == 2
        assert cov.executed_canonical == 2
        assert cov.total_impossible == 0
        assert cov.coverage_percent == 100.0
        assert cov.uncovered == 0

    def test_missing_arm_stays_in_denominator(self, bad_head_dump: str) -> None:
        fn = _one(bad_head_dump)

        cov = compute_coverage(fn, _hit(fn, 1))

        assert cov.total_canonical == 1
        assert cov.total_not_covered == 1
        assert cov.denominator == 2
        assert cov.coverage_percent == 50.0
        assert cov.uncovered == 1

    def test_impossible_arm_is_excluded(self, vect_head_dump: str) -> None:
        fn = _one(vect_head_dump)

        cov = compute_coverage(fn, _hit(fn, 1))

        assert cov.total_impossible == 1
        assert cov.denominator == 1
        assert cov.coverage_percent == 100.0

    def test_no_runtime_evidence(self, safe_head_dump: str) -> None:
        cov = compute_coverage(_one(safe_head_dump), None)

        assert cov.executed_canonical == 0
        assert cov.coverage_percent == 0.0

    def test_executed_never_exceeds_canonical(self, safe_head_dump: str) -> None:
        fn = _one(safe_head_dump)

        cov = compute_coverage(fn, _hit(fn, 40))

        assert cov.executed_canonical == 2
        assert cov.coverage_percent == 100.0

    def test_unknown_crash_counts_as_reachable(self) -> None:
        fn = CompiledFunction(
            "Main.f",
            "Main",
            "f",
            1,
            cases=(
                CompiledCase("True", CaseKind.canonical()),
                CompiledCase("_", CaseKind.non_canonical(CrashReason.OTHER, "boom")),
                CompiledCase("_", CaseKind.non_canonical(CrashReason.NO_CLAUSES)),
                CompiledCase("_", CaseKind.non_canonical(CrashReason.OPTIMIZER_ARTIFACT)),
            ),
        )

        cov = compute_coverage(fn, None)

        assert cov.total_canonical == 2
        assert cov.total_unknown == 1
        assert cov.total_excluded == 2
        assert cov.denominator == 2


class TestSemanticCoverage:
    def test_undefined_when_nothing_reachable(self) -> None:
        cov = SemanticCoverage("Main.f", total_canonical=0, total_impossible=3, executed_canonical=0)

        assert cov.coverage_percent is None
        assert cov.uncovered == 0
        assert cov.to_dict()["coverage_percent"] is None

    def test_to_dict_rounds(self) -> None:
        cov = SemanticCoverage("Main.f", total_canonical=3, total_impossible=0, executed_canonical=1)

        assert cov.coverage_percent == pytest.approx(33.3333, rel=1e-4)
        assert cov.to_dict()["coverage_percent"] == 33.33
