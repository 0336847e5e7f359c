"""End-to-end analysis of one dump and its runtime evidence.

Wires the stages together in order: classify the dump, join it to the
trace, estimate and prune each function's state space, score complexity,
generate hints, and aggregate.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from semcov.analysis.aggregate import (
    ProjectCoverage,
    SemanticAnalysis,
    aggregate_project,
    summarize_dump,
)
from semcov.analysis.complexity import ComplexityWarnings, score
from semcov.analysis.coverage import SemanticCoverage, compute_coverage
from semcov.analysis.hints import FunctionTestHints, generate
from semcov.config.models import SemcovConfig
from semcov.core.logging import analysis_run, get_logger
from semcov.dumpcases.models import CompiledFunction, ParseFailure
from semcov.dumpcases.parser import parse
from semcov.dumpcases.rules import DEFAULT_RULE_SET, RuleSet
from semcov.runtime.correlate import (
    CorrelationWarning,
    FunctionRuntimeHit,
    LineRange,
    collect_warnings,
    compute_line_ranges,
    correlate,
)
from semcov.runtime.mangling import NameMapping, build_name_mapping
from semcov.runtime.trace import group_by_line, parse_trace
from semcov.statespace.estimator import estimate
from semcov.statespace.linearity import prune
from semcov.statespace.models import EquivalenceClassEstimate
from semcov.statespace.types import Parameter, SignatureSet

log = get_logger("analysis.pipeline")


@dataclass(frozen=True, slots=True)
class FunctionReport:
    """Everything derived for one compiled function."""

    function: CompiledFunction
    runtime_hit: FunctionRuntimeHit
    coverage: SemanticCoverage
    estimate: EquivalenceClassEstimate
    complexity: ComplexityWarnings
    hints: FunctionTestHints
    excluded: bool = False
    has_signature: bool = True
    warnings: tuple[CorrelationWarning, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "full_name": self.function.full_name,
            "excluded": self.excluded,
            "has_signature": self.has_signature,
            "coverage": self.coverage.to_dict(),
            "runtime": self.runtime_hit.to_dict(),
            "state_space": self.estimate.to_dict(),
            "complexity": self.complexity.to_dict(),
            "hints": self.hints.to_dict(),
            "warnings": [w.to_dict() for w in self.warnings],
        }


@dataclass(slots=True)
class AnalysisResult:
    reports: list[FunctionReport]
    analysis: SemanticAnalysis
    project: ProjectCoverage
    mapping: NameMapping
    line_ranges: dict[str, LineRange] = field(default_factory=dict)
    warnings: list[CorrelationWarning] = field(default_factory=list)
    failures: list[ParseFailure] = field(default_factory=list)
    run_id: str | None = None

    def report_for(self, full_name: str) -> FunctionReport | None:
        for report in self.reports:
            if report.function.full_name == full_name:
                return report
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "analysis": self.analysis.to_dict(),
            "project": self.project.to_dict(),
            "functions": [r.to_dict() for r in self.reports],
            "warnings": [w.to_dict() for w in self.warnings],
            "name_mapping": self.mapping.to_dict(),
            "run_id": self.run_id,
        }


def _fallback_parameters(function: CompiledFunction) -> tuple[Parameter, ...]:
    # Without a signature every argument is treated as an opaque value.
    return tuple(Parameter(f"arg{i}", i, "?") for i in range(function.arity))


def run_analysis(
    config: SemcovConfig,
    dump_text: str,
    *,
    trace_text: str = "",
    definitions: Sequence[tuple[str, int]] = (),
    signatures: SignatureSet | None = None,
    rules: RuleSet = DEFAULT_RULE_SET,
    last_line: int | None = None,
) -> AnalysisResult:
    """Analyze a dump against a trace.

    Args:
        config: Frozen configuration passed to every stage.
        dump_text: Case-tree dump text.
        trace_text: Profiler output; empty means nothing ran.
        definitions: Ordered (runtime identifier, line) pairs.
        signatures: Parsed source signatures. Functions without one get
                    opaque parameters derived from their arity.
        rules: Crash classification and exclusion vocabulary.
        last_line: Last line of the runtime source, closing the final range.
    """
    with analysis_run() as run_id:
        result = _analyze(config, dump_text, trace_text, definitions, signatures, rules, last_line)
        result.run_id = run_id
        return result


def _analyze(
    config: SemcovConfig,
    dump_text: str,
    trace_text: str,
    definitions: Sequence[tuple[str, int]],
    signatures: SignatureSet | None,
    rules: RuleSet,
    last_line: int | None,
) -> AnalysisResult:
    parsed = parse(dump_text, rules=rules)
    functions = parsed.functions
    sigs = signatures or SignatureSet()
    registry = sigs.registry()

    hits_by_line: Mapping[int, int] = group_by_line(parse_trace(trace_text))
    line_ranges = compute_line_ranges(definitions, last_line=last_line)
    mapping = build_name_mapping(functions, (name for name, _ in definitions))
    runtime_hits = {h.full_name: h for h in correlate(functions, hits_by_line, line_ranges, mapping)}
    warnings = collect_warnings(mapping, line_ranges)

    warnings_by_fn: dict[str, list[CorrelationWarning]] = {}
    for warning in warnings:
        warnings_by_fn.setdefault(warning.full_name, []).append(warning)

    reports: list[FunctionReport] = []
    for fn in functions:
        signature = sigs.lookup(fn.full_name, fn.func_name)
        params = signature.aligned_to(fn.arity) if signature else _fallback_parameters(fn)
        hit = runtime_hits[fn.full_name]
        coverage = compute_coverage(fn, hit)
        state_space = prune(config.estimator, estimate(config.estimator, params, registry), fn)
        reports.append(
            FunctionReport(
                function=fn,
                runtime_hit=hit,
                coverage=coverage,
                estimate=state_space,
                complexity=score(config.complexity, fn, params, state_space),
                hints=generate(config.hints, fn, coverage, state_space),
                excluded=rules.is_excluded(fn.full_name),
                has_signature=signature is not None,
                warnings=tuple(warnings_by_fn.get(fn.full_name, ())),
            )
        )

    project = aggregate_project(
        (r.coverage for r in reports),
        functions,
        rules=rules if config.report.apply_exclusions else None,
        failures=parsed.failures,
        top=config.report.high_impact_top,
    )

    log.info(
        "analysis_complete",
        functions=len(functions),
        failures=len(parsed.failures),
        executed=sum(1 for h in runtime_hits.values() if h.executed),
        warnings=len(warnings),
    )
    return AnalysisResult(
        reports=reports,
        analysis=summarize_dump(parsed, rules),
        project=project,
        mapping=mapping,
        line_ranges=line_ranges,
        warnings=warnings,
        failures=list(parsed.failures),
    )
