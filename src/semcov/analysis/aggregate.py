"""Module and project level aggregation, plus summary output.

Aggregates are recomputed on every run from per-function records and
never persisted.

Output schema for build_summary:
{
    "summary": {
        "total_functions": int,
        "executed_functions": int,
        "total_canonical": int,
        "executed_canonical": int,
        "total_not_covered": int,
        "total_impossible": int,
        "total_excluded": int,
        "coverage_percent": float | null
    },
    "modules": [
        {"module_name": str, "total_canonical": int, "executed_canonical": int,
         "coverage_percent": float | null, "functions": int},
        ...
    ],
    "high_impact_targets": [{"func_name": str, "uncovered": int, ...}, ...],
    "excluded_functions": [str, ...],
    "parse_failures": [{"name": str | null, "line": int, "reason": str}, ...]
}
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from semcov.analysis.coverage import SemanticCoverage
from semcov.dumpcases.models import CompiledFunction, CrashReason, ParseFailure, ParseResult
from semcov.dumpcases.rules import RuleSet


def _percent(numerator: int, denominator: int) -> float | None:
    return numerator / denominator * 100.0 if denominator > 0 else None


def _rounded(value: float | None) -> float | None:
    return round(value, 2) if value is not None else None


# =============================================================================
# Static dump summary
# =============================================================================


@dataclass(frozen=True, slots=True)
class SemanticAnalysis:
    """Static case counts over a whole dump, before any runtime evidence."""

    total_functions: int
    total_canonical: int
    total_impossible: int
    total_not_covered: int
    total_no_clauses: int
    total_optimizer_artifacts: int
    total_unknown: int
    functions_with_bugs: tuple[str, ...] = ()
    excluded_functions: tuple[str, ...] = ()
    failures: tuple[ParseFailure, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_functions": self.total_functions,
            "total_canonical": self.total_canonical,
            "total_impossible": self.total_impossible,
            "total_not_covered": self.total_not_covered,
            "total_no_clauses": self.total_no_clauses,
            "total_optimizer_artifacts": self.total_optimizer_artifacts,
            "total_unknown": self.total_unknown,
            "functions_with_bugs": list(self.functions_with_bugs),
            "excluded_functions": list(self.excluded_functions),
            "failures": [f.to_dict() for f in self.failures],
        }


def summarize_dump(parse_result: ParseResult, rules: RuleSet) -> SemanticAnalysis:
    """Count cases per kind across the non-excluded functions of a dump."""
    counts: dict[CrashReason | None, int] = {}
    included = 0
    bugs: list[str] = []
    excluded: list[str] = []
    for fn in parse_result.functions:
        if rules.is_excluded(fn.full_name):
            excluded.append(fn.full_name)
            continue
        included += 1
        if fn.has_bug:
            bugs.append(fn.full_name)
        for case in fn.cases:
            counts[case.kind.reason] = counts.get(case.kind.reason, 0) + 1

    unknown = counts.get(CrashReason.OTHER, 0)
    return SemanticAnalysis(
        total_functions=included,
        total_canonical=counts.get(None, 0) + unknown,
        total_impossible=counts.get(CrashReason.IMPOSSIBLE, 0),
        total_not_covered=counts.get(CrashReason.NOT_COVERED, 0),
        total_no_clauses=counts.get(CrashReason.NO_CLAUSES, 0),
        total_optimizer_artifacts=counts.get(CrashReason.OPTIMIZER_ARTIFACT, 0),
        total_unknown=unknown,
        functions_with_bugs=tuple(sorted(bugs)),
        excluded_functions=tuple(sorted(excluded)),
        failures=tuple(parse_result.failures),
    )


# =============================================================================
# Runtime aggregates
# =============================================================================


@dataclass(slots=True)
class _Totals:
    total_canonical: int = 0
    executed_canonical: int = 0
    total_not_covered: int = 0
    total_impossible: int = 0
    total_excluded: int = 0

    @classmethod
    def of(cls, coverages: Iterable[SemanticCoverage]) -> _Totals:
        totals = cls()
        for cov in coverages:
            totals.total_canonical += cov.total_canonical
            totals.executed_canonical += cov.executed_canonical
            totals.total_not_covered += cov.total_not_covered
            totals.total_impossible += cov.total_impossible
            totals.total_excluded += cov.total_excluded
        return totals

    @property
    def coverage_percent(self) -> float | None:
        return _percent(self.executed_canonical, self.total_canonical + self.total_not_covered)


@dataclass(frozen=True, slots=True)
class ModuleCoverage:
    module_name: str
    functions: tuple[SemanticCoverage, ...] = ()

    @property
    def total_canonical(self) -> int:
        return sum(f.total_canonical for f in self.functions)

    @property
    def executed_canonical(self) -> int:
        return sum(f.executed_canonical for f in self.functions)

    @property
    def coverage_percent(self) -> float | None:
        return _Totals.of(self.functions).coverage_percent

    def to_dict(self) -> dict[str, Any]:
        return {
            "module_name": self.module_name,
            "total_canonical": self.total_canonical,
            "executed_canonical": self.executed_canonical,
            "coverage_percent": _rounded(self.coverage_percent),
            "functions": len(self.functions),
        }


@dataclass(frozen=True, slots=True)
class ProjectCoverage:
    modules: tuple[ModuleCoverage, ...] = ()
    high_impact_targets: tuple[SemanticCoverage, ...] = ()
    excluded_functions: tuple[str, ...] = ()
    parse_failures: tuple[ParseFailure, ...] = field(default_factory=tuple)

    @property
    def functions(self) -> list[SemanticCoverage]:
        return [f for m in self.modules for f in m.functions]

    @property
    def total_canonical(self) -> int:
        return sum(m.total_canonical for m in self.modules)

    @property
    def executed_canonical(self) -> int:
        return sum(m.executed_canonical for m in self.modules)

    @property
    def coverage_percent(self) -> float | None:
        return _Totals.of(self.functions).coverage_percent

    def to_dict(self) -> dict[str, Any]:
        return build_summary(self)


def aggregate_modules(
    coverages: Iterable[SemanticCoverage],
    functions: Sequence[CompiledFunction],
) -> list[ModuleCoverage]:
    """Group function coverage by module, sorted by module name."""
    module_of = {f.full_name: f.module_name for f in functions}
    grouped: dict[str, list[SemanticCoverage]] = {}
    for cov in coverages:
        grouped.setdefault(module_of.get(cov.func_name, ""), []).append(cov)
    return [
        ModuleCoverage(name, tuple(sorted(covs, key=lambda c: c.func_name)))
        for name, covs in sorted(grouped.items())
    ]


def high_impact(coverages: Iterable[SemanticCoverage], top: int) -> list[SemanticCoverage]:
    """Functions with the most uncovered reachable branches; ties by name."""
    ranked = sorted(
        (c for c in coverages if c.uncovered > 0),
        key=lambda c: (-c.uncovered, c.func_name),
    )
    return ranked[:top]


def aggregate_project(
    coverages: Iterable[SemanticCoverage],
    functions: Sequence[CompiledFunction],
    *,
    rules: RuleSet | None = None,
    failures: Iterable[ParseFailure] = (),
    top: int = 20,
) -> ProjectCoverage:
    """Roll function coverage up to the project.

    Functions matching ``rules`` exclusions are left out of every total and
    listed in ``excluded_functions`` instead.
    """
    kept: list[SemanticCoverage] = []
    excluded: list[str] = []
    for cov in coverages:
        if rules is not None and rules.is_excluded(cov.func_name):
            excluded.append(cov.func_name)
        else:
            kept.append(cov)
    return ProjectCoverage(
        modules=tuple(aggregate_modules(kept, functions)),
        high_impact_targets=tuple(high_impact(kept, top)),
        excluded_functions=tuple(sorted(excluded)),
        parse_failures=tuple(failures),
    )


# =============================================================================
# Summaries
# =============================================================================


def build_summary(
    project: ProjectCoverage,
    *,
    include_modules: bool = True,
    max_modules: int | None = None,
) -> dict[str, Any]:
    """Build a structured coverage summary.

    Args:
        project: The aggregated project coverage.
        include_modules: Whether to include per-module details.
        max_modules: Limit number of modules (lowest coverage first). None = all.

    Returns:
        Structured dict suitable for JSON serialization.
    """
    functions = project.functions
    totals = _Totals.of(functions)

    result: dict[str, Any] = {
        "summary": {
            "total_functions": len(functions),
            "executed_functions": sum(1 for f in functions if f.executed_canonical > 0),
            "total_canonical": totals.total_canonical,
            "executed_canonical": totals.executed_canonical,
            "total_not_covered": totals.total_not_covered,
            "total_impossible": totals.total_impossible,
            "total_excluded": totals.total_excluded,
            "coverage_percent": _rounded(totals.coverage_percent),
        },
        "high_impact_targets": [
            {**c.to_dict(), "uncovered": c.uncovered} for c in project.high_impact_targets
        ],
        "excluded_functions": list(project.excluded_functions),
        "parse_failures": [f.to_dict() for f in project.parse_failures],
    }

    if include_modules:
        modules = [m.to_dict() for m in project.modules]
        # Lowest coverage first; undefined coverage sorts last
        modules.sort(
            key=lambda m: (m["coverage_percent"] is None, m["coverage_percent"] or 0.0)
        )
        if max_modules is not None:
            modules = modules[:max_modules]
        result["modules"] = modules

    return result


def build_text_summary(project: ProjectCoverage) -> str:
    """Build a concise text summary for display contexts."""
    totals = _Totals.of(project.functions)
    denominator = totals.total_canonical + totals.total_not_covered
    if denominator == 0:
        return "No reachable branches"

    percent = totals.coverage_percent or 0.0
    text = (
        f"Semantic coverage: {percent:.1f}% "
        f"({totals.executed_canonical}/{denominator} reachable branches)"
    )
    if totals.total_not_covered:
        text += f", {totals.total_not_covered} missing arms"
    if project.parse_failures:
        text += f", {len(project.parse_failures)} unparsed blocks"
    return text
