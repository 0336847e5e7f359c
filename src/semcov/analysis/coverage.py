"""Per-function semantic coverage.

Coverage formula:

    coverage_percent = executed_canonical / (total_canonical + total_not_covered) * 100

``total_canonical`` counts canonical arms plus unrecognized crashes (kept
conservatively). Missing arms stay in the denominator as gaps that can
never be executed. Impossible, no-clause and optimizer cases never enter
it. A zero denominator yields ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from semcov.dumpcases.models import CompiledFunction, CrashReason
from semcov.runtime.correlate import FunctionRuntimeHit


@dataclass(frozen=True, slots=True)
class SemanticCoverage:
    func_name: str  # full qualified name
    total_canonical: int
    total_impossible: int
    executed_canonical: int
    total_not_covered: int = 0
    total_excluded: int = 0  # no clauses + optimizer artifacts
    total_unknown: int = 0  # unrecognized crash messages, included in total_canonical

    @property
    def denominator(self) -> int:
        return self.total_canonical + self.total_not_covered

    @property
    def coverage_percent(self) -> float | None:
        if self.denominator == 0:
            return None
        return self.executed_canonical / self.denominator * 100.0

    @property
    def uncovered(self) -> int:
        """Reachable branches not yet shown to run."""
        return self.denominator - self.executed_canonical

    def to_dict(self) -> dict[str, Any]:
        percent = self.coverage_percent
        return {
            "func_name": self.func_name,
            "total_canonical": self.total_canonical,
            "total_impossible": self.total_impossible,
            "executed_canonical": self.executed_canonical,
            "total_not_covered": self.total_not_covered,
            "total_excluded": self.total_excluded,
            "total_unknown": self.total_unknown,
            "coverage_percent": round(percent, 2) if percent is not None else None,
        }


def compute_coverage(
    function: CompiledFunction, runtime_hit: FunctionRuntimeHit | None
) -> SemanticCoverage:
    """Combine a function's static classification with its runtime evidence."""
    counts: dict[CrashReason | None, int] = {}
    for case in function.cases:
        counts[case.kind.reason] = counts.get(case.kind.reason, 0) + 1

    unknown = counts.get(CrashReason.OTHER, 0)
    total_canonical = counts.get(None, 0) + unknown
    executed = runtime_hit.executed_lines if runtime_hit is not None else 0

    return SemanticCoverage(
        func_name=function.full_name,
        total_canonical=total_canonical,
        total_impossible=counts.get(CrashReason.IMPOSSIBLE, 0),
        executed_canonical=min(total_canonical, executed),
        total_not_covered=counts.get(CrashReason.NOT_COVERED, 0),
        total_excluded=counts.get(CrashReason.NO_CLAUSES, 0)
        + counts.get(CrashReason.OPTIMIZER_ARTIFACT, 0),
        total_unknown=unknown,
    )
