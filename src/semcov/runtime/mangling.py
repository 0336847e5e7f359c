"""Source-name <-> runtime-name mangling and matching.

The runtime trace names definitions in its own namespace. ``mangle`` maps a
qualified source name onto that namespace:

    Main.safeHead          -> Main-safeHead
    Prelude.Types.(::)     -> Prelude-Types-_0028_003a_003a_0029
    Data.List.sort'        -> Data-List-sort_0027

Segments are joined with ``-``. ASCII letters and digits pass through; every
other character becomes ``_`` plus four lowercase hex digits of its UTF-16
code unit. ``-`` and ``_`` only ever occur as structure, so the transform is
injective and ``unmangle`` inverts it.

Matching never uses substring search: a trace identifier matches a function
exactly, or by a suffix whose prefix ends on a segment separator.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from semcov.dumpcases.models import CompiledFunction, qualified_segments

SEPARATOR = "-"
ESCAPE = "_"
_ESCAPE_WIDTH = 4


def _escape_char(ch: str) -> str:
    data = ch.encode("utf-16-be")
    units = [int.from_bytes(data[i : i + 2], "big") for i in range(0, len(data), 2)]
    return "".join(f"{ESCAPE}{unit:0{_ESCAPE_WIDTH}x}" for unit in units)


def _mangle_segment(segment: str) -> str:
    return "".join(ch if ch.isascii() and ch.isalnum() else _escape_char(ch) for ch in segment)


def mangle(qualified_name: str) -> str:
    """Deterministically mangle a qualified source name."""
    return SEPARATOR.join(_mangle_segment(s) for s in qualified_segments(qualified_name))


def unmangle(mangled: str) -> str:
    """Invert ``mangle``.

    Raises:
        ValueError: If the input contains a malformed escape token.
    """
    segments: list[str] = []
    for part in mangled.split(SEPARATOR):
        units: list[int] = []
        out: list[str] = []
        i = 0
        while i < len(part):
            ch = part[i]
            if ch == ESCAPE:
                token = part[i + 1 : i + 1 + _ESCAPE_WIDTH]
                if len(token) != _ESCAPE_WIDTH:
                    raise ValueError(f"truncated escape in {mangled!r}")
                units.append(int(token, 16))
                i += 1 + _ESCAPE_WIDTH
                continue
            if units:
                out.append(_decode_units(units))
                units = []
            out.append(ch)
            i += 1
        if units:
            out.append(_decode_units(units))
        segments.append("".join(out))
    return ".".join(segments)


def _decode_units(units: list[int]) -> str:
    data = b"".join(u.to_bytes(2, "big") for u in units)
    return data.decode("utf-16-be")


# =============================================================================
# Matching
# =============================================================================


class MatchStatus(str, Enum):
    EXACT = "exact"
    SUFFIX = "suffix"
    AMBIGUOUS = "ambiguous"
    UNMATCHED = "unmatched"


def match(
    trace_identifier: str,
    candidates: Sequence[CompiledFunction],
) -> CompiledFunction | None:
    """Resolve one runtime identifier to at most one function.

    Exact mangled match first; else the most specific function whose mangled
    name is a separator-aligned suffix of the identifier. Infix matches are
    never accepted.
    """
    best: CompiledFunction | None = None
    best_len = -1
    for fn in candidates:
        pattern = mangle(fn.full_name)
        if pattern == trace_identifier:
            return fn
        if trace_identifier.endswith(SEPARATOR + pattern) and len(pattern) > best_len:
            best, best_len = fn, len(pattern)
    return best


@dataclass(slots=True)
class NameMatch:
    """One function's side of the source/runtime join."""

    full_name: str
    pattern: str
    identifiers: list[str] = field(default_factory=list)
    status: MatchStatus = MatchStatus.UNMATCHED

    @property
    def resolved(self) -> str | None:
        """Identifier used for attribution; None when unmatched or ambiguous."""
        if self.status in (MatchStatus.EXACT, MatchStatus.SUFFIX):
            return self.identifiers[0]
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "full_name": self.full_name,
            "pattern": self.pattern,
            "identifiers": list(self.identifiers),
            "status": self.status.value,
        }


@dataclass(slots=True)
class NameMapping:
    """Inspectable intermediate: source name -> pattern -> matched identifiers."""

    matches: dict[str, NameMatch] = field(default_factory=dict)
    unclaimed: list[str] = field(default_factory=list)  # identifiers matching no function

    def get(self, full_name: str) -> NameMatch | None:
        return self.matches.get(full_name)

    def with_status(self, status: MatchStatus) -> list[NameMatch]:
        return [m for m in self.matches.values() if m.status is status]

    def to_dict(self) -> dict[str, Any]:
        return {
            "matches": [m.to_dict() for m in self.matches.values()],
            "unclaimed": list(self.unclaimed),
        }


def build_name_mapping(
    functions: Sequence[CompiledFunction],
    identifiers: Iterable[str],
) -> NameMapping:
    """Join compiled functions against runtime identifiers.

    A function claimed exactly keeps only its exact identifier. A function
    claimed only by suffix from more than one identifier is AMBIGUOUS and is
    left unresolved rather than guessed.
    """
    mapping = NameMapping(
        matches={fn.full_name: NameMatch(fn.full_name, mangle(fn.full_name)) for fn in functions}
    )
    exact: dict[str, str] = {}
    suffix: dict[str, list[str]] = {}

    for ident in identifiers:
        fn = match(ident, functions)
        if fn is None:
            mapping.unclaimed.append(ident)
            continue
        entry = mapping.matches[fn.full_name]
        if ident == entry.pattern:
            exact[fn.full_name] = ident
        else:
            suffix.setdefault(fn.full_name, []).append(ident)

    for name, entry in mapping.matches.items():
        if name in exact:
            entry.identifiers = [exact[name]]
            entry.status = MatchStatus.EXACT
        elif name in suffix:
            entry.identifiers = sorted(set(suffix[name]))
            entry.status = (
                MatchStatus.SUFFIX if len(entry.identifiers) == 1 else MatchStatus.AMBIGUOUS
            )
    return mapping
