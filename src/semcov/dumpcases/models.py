"""Classified case-tree model.

Function-centric model of a compiled case-tree dump. Every terminal of a
function's tree becomes one CompiledCase; cases never migrate between
functions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CrashReason(str, Enum):
    """Why a crash terminal exists in the compiled tree."""

    IMPOSSIBLE = "impossible"
    NOT_COVERED = "not_covered"
    NO_CLAUSES = "no_clauses"
    OPTIMIZER_ARTIFACT = "optimizer_artifact"
    OTHER = "other"


# Reasons that never count towards the coverage denominator.
EXCLUDED_REASONS: frozenset[CrashReason] = frozenset(
    (CrashReason.IMPOSSIBLE, CrashReason.NO_CLAUSES, CrashReason.OPTIMIZER_ARTIFACT)
)


@dataclass(frozen=True, slots=True)
class CaseKind:
    """Canonical (reason is None) or NonCanonical(reason)."""

    reason: CrashReason | None = None
    message: str | None = None

    @classmethod
    def canonical(cls) -> CaseKind:
        return cls()

    @classmethod
    def non_canonical(cls, reason: CrashReason, message: str | None = None) -> CaseKind:
        return cls(reason=reason, message=message)

    @property
    def is_canonical(self) -> bool:
        return self.reason is None

    @property
    def counts_as_reachable(self) -> bool:
        """Canonical arms and unverified crashes are treated as reachable."""
        return self.reason is None or self.reason is CrashReason.OTHER

    @property
    def label(self) -> str:
        return "canonical" if self.reason is None else self.reason.value


@dataclass(frozen=True, slots=True)
class CompiledCase:
    """One match arm or crash terminal."""

    pattern: str  # short constructor name, literal, or "_" for a default arm
    kind: CaseKind
    scrutinee: str | None = None  # e.g. "{arg:0}"
    depth: int = 0  # case-split nesting depth, 1 = outermost split
    alternatives: tuple[str, ...] = ()  # constructors handled by the enclosing split

    @property
    def param_index(self) -> int | None:
        """Parameter position when the scrutinee is a function argument."""
        return scrutinee_index(self.scrutinee)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "pattern": self.pattern,
            "kind": self.kind.label,
            "depth": self.depth,
        }
        if self.kind.message is not None:
            result["message"] = self.kind.message
        if self.scrutinee is not None:
            result["scrutinee"] = self.scrutinee
        return result


@dataclass(frozen=True, slots=True)
class CompiledFunction:
    """A single function's classified case tree."""

    full_name: str
    module_name: str
    func_name: str
    arity: int
    cases: tuple[CompiledCase, ...] = ()
    has_default_case: bool = False
    line: int = 0  # dump line where the block starts

    def cases_of(self, reason: CrashReason | None) -> list[CompiledCase]:
        return [c for c in self.cases if c.kind.reason is reason]

    @property
    def canonical_count(self) -> int:
        return sum(1 for c in self.cases if c.kind.is_canonical)

    @property
    def max_depth(self) -> int:
        return max((c.depth for c in self.cases), default=0)

    @property
    def has_bug(self) -> bool:
        """A genuine implementation gap was compiled into the tree."""
        return any(c.kind.reason is CrashReason.NOT_COVERED for c in self.cases)


@dataclass(frozen=True, slots=True)
class ParseFailure:
    """A block that could not be parsed. Reported beside partial results."""

    name: str | None
    line: int
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "line": self.line, "reason": self.reason}


@dataclass(slots=True)
class ParseResult:
    """Successfully parsed functions plus the explicit failure list."""

    functions: list[CompiledFunction] = field(default_factory=list)
    failures: list[ParseFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def by_name(self) -> dict[str, CompiledFunction]:
        return {f.full_name: f for f in self.functions}


def scrutinee_index(scrutinee: str | None) -> int | None:
    """Return N for an argument scrutinee like ``{arg:N}``, else None."""
    if not scrutinee or not scrutinee.startswith("{arg:") or not scrutinee.endswith("}"):
        return None
    digits = scrutinee[5:-1]
    return int(digits) if digits.isdigit() else None


def split_qualified_name(name: str) -> tuple[str, str]:
    """Split ``Mod.Sub.fn`` into (``Mod.Sub``, ``fn``).

    Operator names keep their dots: ``Prelude.Types.(.)`` -> (``Prelude.Types``, ``(.)``).
    """
    segments = qualified_segments(name)
    if len(segments) == 1:
        return "", segments[0]
    return ".".join(segments[:-1]), segments[-1]


def qualified_segments(name: str) -> list[str]:
    """Split a qualified name on dots that are outside parentheses/braces.

    Joining the result with "." gives back the input: leading, doubled and
    trailing dots stay inside a segment (``Main.Foo.`` -> ``Main``, ``Foo.``).
    """
    segments: list[str] = []
    current: list[str] = []
    nesting = 0
    last = len(name) - 1
    for i, ch in enumerate(name):
        if ch in "({":
            nesting += 1
        elif ch in ")}" and nesting:
            nesting -= 1
        if ch == "." and nesting == 0 and current and i < last:
            segments.append("".join(current))
            current = []
            continue
        current.append(ch)
    if current:
        segments.append("".join(current))
    return segments or [name]


def short_constructor(name: str) -> str:
    """``Prelude.Basics.(::)`` -> ``::``; ``Prelude.Types.Just`` -> ``Just``."""
    _, last = split_qualified_name(name)
    if last.startswith("(") and last.endswith(")") and len(last) > 2:
        return last[1:-1]
    return last
