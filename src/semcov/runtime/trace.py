"""Profiler trace and runtime definition parsing.

The profiler emits execution counts embedded in its own markup. Only the
(line, offset, count) triples are extracted, so the markup itself can
change freely. Two encodings are recognised:

- Chez Scheme profile HTML: ``title="line 12 char 5 count 3"``
- key/value text: ``line=12 offset=5 count=3``

Runtime definitions come from the generated Scheme source:
``(define Main-safeHead (lambda ...))`` -> ("Main-safeHead", line).
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

_TRIPLE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bline\s+(\d+)\s+char\s+(\d+)\s+count\s+(\d+)"),
    re.compile(r"\bline=(\d+)\s+offset=(\d+)\s+count=(\d+)"),
)

_DEFINE = re.compile(r"\(define\s+\(?([^\s()]+)")


@dataclass(frozen=True, slots=True)
class ExprHit:
    """Execution count of one profiled expression."""

    line: int
    offset: int
    count: int


def parse_trace(text: str) -> list[ExprHit]:
    """Extract every (line, offset, count) triple, in document order."""
    found: list[tuple[int, ExprHit]] = []
    for pattern in _TRIPLE_PATTERNS:
        for m in pattern.finditer(text):
            hit = ExprHit(line=int(m.group(1)), offset=int(m.group(2)), count=int(m.group(3)))
            found.append((m.start(), hit))
    found.sort(key=lambda item: item[0])
    return [hit for _, hit in found]


def group_by_line(hits: Iterable[ExprHit]) -> dict[int, int]:
    """Sum counts per line."""
    by_line: dict[int, int] = {}
    for hit in hits:
        by_line[hit.line] = by_line.get(hit.line, 0) + hit.count
    return by_line


def parse_definitions(text: str) -> list[tuple[str, int]]:
    """Flat ordered (name, line) list of top-level definitions."""
    definitions: list[tuple[str, int]] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        m = _DEFINE.search(line)
        if m:
            definitions.append((m.group(1), lineno))
    return definitions
