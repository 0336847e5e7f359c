"""Runtime evidence: name mangling, profiler traces, and correlation."""

from semcov.runtime.correlate import (
    CorrelationWarning,
    FunctionRuntimeHit,
    LineRange,
    collect_warnings,
    compute_line_ranges,
    correlate,
    find_overlaps,
)
from semcov.runtime.mangling import (
    MatchStatus,
    NameMapping,
    NameMatch,
    build_name_mapping,
    mangle,
    match,
    unmangle,
)
from semcov.runtime.trace import ExprHit, group_by_line, parse_definitions, parse_trace

__all__ = [
    # Mangling
    "MatchStatus",
    "NameMapping",
    "NameMatch",
    "build_name_mapping",
    "mangle",
    "match",
    "unmangle",
    # Trace
    "ExprHit",
    "group_by_line",
    "parse_definitions",
    "parse_trace",
    # Correlation
    "CorrelationWarning",
    "FunctionRuntimeHit",
    "LineRange",
    "collect_warnings",
    "compute_line_ranges",
    "correlate",
    "find_overlaps",
]
