"""Coverage computation, complexity scoring, test hints and aggregation."""

from semcov.analysis.aggregate import (
    ModuleCoverage,
    ProjectCoverage,
    SemanticAnalysis,
    aggregate_modules,
    aggregate_project,
    build_summary,
    build_text_summary,
    high_impact,
    summarize_dump,
)
from semcov.analysis.complexity import ComplexityWarnings, score
from semcov.analysis.coverage import SemanticCoverage, compute_coverage
from semcov.analysis.hints import (
    DEFAULT_TEMPLATE,
    FunctionTestHints,
    HintCategory,
    HintPriority,
    HintValue,
    TestHint,
    generate,
    minimal_test_suite,
    render_template,
)
from semcov.analysis.pipeline import AnalysisResult, FunctionReport, run_analysis

__all__ = [
    # Coverage
    "SemanticCoverage",
    "compute_coverage",
    # Complexity
    "ComplexityWarnings",
    "score",
    # Hints
    "DEFAULT_TEMPLATE",
    "FunctionTestHints",
    "HintCategory",
    "HintPriority",
    "HintValue",
    "TestHint",
    "generate",
    "minimal_test_suite",
    "render_template",
    # Aggregation
    "ModuleCoverage",
    "ProjectCoverage",
    "SemanticAnalysis",
    "aggregate_modules",
    "aggregate_project",
    "build_summary",
    "build_text_summary",
    "high_impact",
    "summarize_dump",
    # Pipeline
    "AnalysisResult",
    "FunctionReport",
    "run_analysis",
]
