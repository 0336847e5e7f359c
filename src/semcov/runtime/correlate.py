"""Join runtime hit counts to compiled functions.

Per-function line ranges are computed as an explicit value and handed to
``correlate`` rather than derived inside the join, so overlapping ranges
(from inlining) remain visible via ``find_overlaps``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from semcov.core.logging import get_logger
from semcov.dumpcases.models import CompiledFunction
from semcov.runtime.mangling import MatchStatus, NameMapping

log = get_logger("runtime.correlate")


@dataclass(frozen=True, slots=True)
class LineRange:
    """Half-open runtime source range ``[start, end)``; end None = to end of file."""

    start: int
    end: int | None = None

    def contains(self, line: int) -> bool:
        return self.start <= line and (self.end is None or line < self.end)

    def overlaps(self, other: LineRange) -> bool:
        self_end = self.end if self.end is not None else float("inf")
        other_end = other.end if other.end is not None else float("inf")
        return self.start < other_end and other.start < self_end

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True, slots=True)
class FunctionRuntimeHit:
    """Executed count for one function, keyed by name (never owns the function)."""

    full_name: str
    mangled_name: str
    identifier: str | None
    status: MatchStatus
    line_range: LineRange | None
    executed_lines: int = 0  # distinct lines with nonzero count inside the range
    total_hits: int = 0  # summed counts inside the range

    @property
    def executed(self) -> bool:
        return self.executed_lines > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "full_name": self.full_name,
            "mangled_name": self.mangled_name,
            "identifier": self.identifier,
            "status": self.status.value,
            "line_range": self.line_range.to_dict() if self.line_range else None,
            "executed_lines": self.executed_lines,
            "total_hits": self.total_hits,
        }


@dataclass(frozen=True, slots=True)
class CorrelationWarning:
    """Non-fatal correlation problem attached to one function."""

    full_name: str
    kind: str  # "ambiguous_match" | "unmatched_function" | "overlapping_range"
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"full_name": self.full_name, "kind": self.kind, "message": self.message}


def compute_line_ranges(
    definitions: Sequence[tuple[str, int]],
    *,
    last_line: int | None = None,
) -> dict[str, LineRange]:
    """Derive one range per definition: from its line to the next definition's.

    Args:
        definitions: Ordered (identifier, line) pairs.
        last_line: Last line of the runtime source; the final range is open
                   when None.
    """
    ordered = sorted(definitions, key=lambda d: d[1])
    ranges: dict[str, LineRange] = {}
    for i, (name, start) in enumerate(ordered):
        if i + 1 < len(ordered):
            end: int | None = ordered[i + 1][1]
        else:
            end = last_line + 1 if last_line is not None else None
        if name in ranges:
            log.debug("duplicate_definition", identifier=name, line=start)
            continue
        ranges[name] = LineRange(start, end)
    return ranges


def find_overlaps(ranges: Mapping[str, LineRange]) -> list[tuple[str, str]]:
    """Pairs of identifiers whose ranges overlap, sorted."""
    items = sorted(ranges.items(), key=lambda kv: (kv[1].start, kv[0]))
    overlaps: list[tuple[str, str]] = []
    for i, (name_a, range_a) in enumerate(items):
        for name_b, range_b in items[i + 1 :]:
            if range_a.end is not None and range_b.start >= range_a.end:
                break
            if range_a.overlaps(range_b):
                overlaps.append(tuple(sorted((name_a, name_b))))  # type: ignore[arg-type]
    return sorted(overlaps)


def correlate(
    functions: Sequence[CompiledFunction],
    hits_by_line: Mapping[int, int],
    line_ranges: Mapping[str, LineRange],
    mapping: NameMapping,
) -> list[FunctionRuntimeHit]:
    """Per-function executed counts.

    A function is executed only if a nonzero-count line falls inside the
    range of its resolved identifier. Unmatched and ambiguous functions get
    zero hits.
    """
    hot_lines = sorted(line for line, count in hits_by_line.items() if count > 0)
    results: list[FunctionRuntimeHit] = []
    for fn in functions:
        entry = mapping.get(fn.full_name)
        if entry is None:
            results.append(
                FunctionRuntimeHit(fn.full_name, "", None, MatchStatus.UNMATCHED, None)
            )
            continue
        ident = entry.resolved
        line_range = line_ranges.get(ident) if ident else None
        if line_range is None:
            results.append(
                FunctionRuntimeHit(fn.full_name, entry.pattern, ident, entry.status, None)
            )
            continue
        inside = [line for line in hot_lines if line_range.contains(line)]
        results.append(
            FunctionRuntimeHit(
                full_name=fn.full_name,
                mangled_name=entry.pattern,
                identifier=ident,
                status=entry.status,
                line_range=line_range,
                executed_lines=len(inside),
                total_hits=sum(hits_by_line[line] for line in inside),
            )
        )
    return results


def collect_warnings(
    mapping: NameMapping,
    line_ranges: Mapping[str, LineRange],
) -> list[CorrelationWarning]:
    """Surface ambiguity, unmatched functions and overlapping ranges."""
    warnings: list[CorrelationWarning] = []
    for entry in mapping.matches.values():
        if entry.status is MatchStatus.AMBIGUOUS:
            warnings.append(
                CorrelationWarning(
                    entry.full_name,
                    "ambiguous_match",
                    f"{len(entry.identifiers)} runtime identifiers match "
                    f"{entry.pattern!r}: {', '.join(entry.identifiers)}",
                )
            )
        elif entry.status is MatchStatus.UNMATCHED:
            warnings.append(
                CorrelationWarning(
                    entry.full_name,
                    "unmatched_function",
                    f"no runtime identifier matches {entry.pattern!r}",
                )
            )

    owners = {
        entry.resolved: entry.full_name for entry in mapping.matches.values() if entry.resolved
    }
    for ident_a, ident_b in find_overlaps(line_ranges):
        for ident in (ident_a, ident_b):
            if ident in owners:
                other = ident_b if ident == ident_a else ident_a
                warnings.append(
                    CorrelationWarning(
                        owners[ident],
                        "overlapping_range",
                        f"runtime range of {ident!r} overlaps {other!r}",
                    )
                )

    for warning in warnings:
        if warning.kind != "unmatched_function":
            log.warning(warning.kind, function=warning.full_name, detail=warning.message)
    return warnings
