"""Case-tree dump parser.

Dump format (one block per function, continuation lines allowed):

    Main.safeHead = [{arg:0}]: (%case !{arg:0} [(%concase [cons] Prelude.Basics.(::) Just 1
        [{e:2}, {e:3}] (Prelude.Types.Just [!{e:2}]))] Just (%crash "Impossible case encountered"))

Structure is anchored by three markers:
- ``%case <scrutinee> [<arms>] <default>`` where default is ``Nothing`` or ``Just <expr>``
- canonical arms ``%concase`` (constructor, tag, bound names, body) and ``%constcase``
- crash terminals ``%crash "<message>"``

Classification:
- each canonical arm is one Canonical case, unless its body is directly a crash
  terminal; then arm and terminal are one case, classified by the crash
- each remaining crash terminal is one NonCanonical case
- a non-crash default arm is one Canonical case with pattern "_"

Malformed blocks become ParseFailure records; the rest of the file is parsed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from semcov.core.errors import ParseError
from semcov.core.logging import get_logger
from semcov.dumpcases.models import (
    CaseKind,
    CompiledCase,
    CompiledFunction,
    CrashReason,
    ParseFailure,
    ParseResult,
    short_constructor,
    split_qualified_name,
)
from semcov.dumpcases.rules import RuleSet

log = get_logger("dumpcases.parser")

CASE_MARKER = "%case"
CONCASE_MARKER = "%concase"
CONSTCASE_MARKER = "%constcase"
CRASH_MARKER = "%crash"

_BLOCK_START = re.compile(r"^(?P<name>\S+) = \[")
_HEADER = re.compile(r"^(?P<name>\S+) = \[(?P<args>[^\]]*)\]:?\s*(?P<body>.*)$", re.DOTALL)

_DELIMS = "()[],\""
_CLOSERS = {"(": ")", "[": "]"}


# =============================================================================
# S-expression reader
# =============================================================================


@dataclass(slots=True)
class SList:
    """Bracketed list: ``(...)`` or ``[...]``."""

    opener: str
    items: list[SNode] = field(default_factory=list)
    offset: int = 0

    @property
    def head(self) -> str | None:
        if self.items and isinstance(self.items[0], str):
            return self.items[0]
        return None


@dataclass(frozen=True, slots=True)
class SString:
    value: str


SNode = SList | SString | str


def _read_atom(text: str, pos: int) -> int:
    """Return the end offset of an atom starting at pos.

    Braces are consumed whole (``{arg:0}``, ``!{e:2}``), as is a parenthesized
    operator segment following a dot (``Prelude.Basics.(::)``).
    """
    n = len(text)
    while pos < n:
        ch = text[pos]
        if ch == "{":
            close = text.find("}", pos)
            if close == -1:
                raise ParseError.unbalanced(pos, "{", "}")
            pos = close + 1
            continue
        if ch == "(" and pos > 0 and text[pos - 1] == ".":
            close = text.find(")", pos + 1)
            if close == -1:
                raise ParseError.unbalanced(pos, "(", ")")
            pos = close + 1
            continue
        if ch.isspace() or ch in _DELIMS:
            break
        pos += 1
    return pos


def _read_string(text: str, pos: int) -> tuple[str, int]:
    """Read a double-quoted literal starting at pos (the opening quote)."""
    out: list[str] = []
    i = pos + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\" and i + 1 < n:
            out.append(text[i + 1])
            i += 2
            continue
        if ch == '"':
            return "".join(out), i + 1
        out.append(ch)
        i += 1
    raise ParseError.unterminated_string(pos)


def read_sexprs(text: str) -> list[SNode]:
    """Read all top-level s-expressions from text."""
    root = SList(opener="")
    stack: list[SList] = [root]
    pos = 0
    n = len(text)
    while pos < n:
        ch = text[pos]
        if ch.isspace() or ch == ",":
            pos += 1
        elif ch in _CLOSERS:
            node = SList(opener=ch, offset=pos)
            stack[-1].items.append(node)
            stack.append(node)
            pos += 1
        elif ch in ")]":
            expected = _CLOSERS.get(stack[-1].opener)
            if len(stack) == 1 or ch != expected:
                raise ParseError.unbalanced(pos, ch, expected)
            stack.pop()
            pos += 1
        elif ch == '"':
            value, pos = _read_string(text, pos)
            stack[-1].items.append(SString(value))
        else:
            end = _read_atom(text, pos)
            stack[-1].items.append(text[pos:end])
            pos = end
    if len(stack) != 1:
        top = stack[-1]
        raise ParseError.unbalanced(top.offset, top.opener, _CLOSERS[top.opener])
    return root.items


# =============================================================================
# Case-tree walk
# =============================================================================


def _crash_message(node: SNode) -> str | None:
    """Message of a ``(%crash "...")`` node, None if node is not a crash."""
    if not isinstance(node, SList) or node.head != CRASH_MARKER:
        return None
    return _crash_text(node)


def _crash_text(node: SList) -> str:
    message = node.items[1] if len(node.items) >= 2 else None
    if not isinstance(message, SString):
        raise ParseError.malformed_block(None, 0, "crash terminal without a quoted message")
    return message.value


def _arm_pattern(arm: SList) -> str:
    """Constructor (or literal) an arm matches on."""
    marker = arm.head
    if marker == CONSTCASE_MARKER:
        if len(arm.items) < 3:
            raise ParseError.malformed_block(None, 0, "constcase without literal and body")
        literal = arm.items[1]
        return f'"{literal.value}"' if isinstance(literal, SString) else str(literal)
    for item in arm.items[1:-1]:
        if isinstance(item, str) and item not in ("Just", "Nothing") and not item.isdigit():
            return short_constructor(item)
    raise ParseError.malformed_block(None, 0, "concase without constructor name")


@dataclass(frozen=True, slots=True)
class _Split:
    scrutinee: str | None
    depth: int
    alternatives: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class _Branch:
    """One arm (or the default) of a split, waiting to be classified."""

    pattern: str
    body: SNode
    split: _Split
    is_default: bool = False


def _split_parts(node: SList) -> tuple[str | None, SList, list[SNode]]:
    """Break ``(%case scrut [arms] default...)`` into its parts."""
    found = next(
        ((i, item) for i, item in enumerate(node.items[1:], start=1)
         if isinstance(item, SList) and item.opener == "["),
        None,
    )
    if found is None:
        raise ParseError.malformed_block(None, 0, "case split without arm list")
    arms_index, arms = found
    scrut_items = node.items[1:arms_index]
    scrutinee = None
    if scrut_items and isinstance(scrut_items[0], str):
        scrutinee = scrut_items[0].lstrip("!")
    return scrutinee, arms, node.items[arms_index + 1 :]


def _walk(body: list[SNode], rules: RuleSet) -> tuple[list[CompiledCase], bool]:
    """Collect classified cases in source order, iteratively."""
    cases: list[CompiledCase] = []
    has_default = False
    # plain nodes are (node, depth); split arms are _Branch
    stack: list[tuple[SNode, int] | _Branch] = [(n, 0) for n in reversed(body)]

    while stack:
        item = stack.pop()

        if isinstance(item, _Branch):
            split = item.split
            message = _crash_message(item.body)
            if message is not None:
                kind = rules.classify(message)
                _log_kind(kind)
            else:
                kind = CaseKind.canonical()
                has_default = has_default or item.is_default
                stack.append((item.body, split.depth))
            cases.append(
                CompiledCase(item.pattern, kind, split.scrutinee, split.depth, split.alternatives)
            )
            continue

        node, depth = item
        if not isinstance(node, SList):
            continue

        marker = node.head
        if marker == CASE_MARKER:
            scrutinee, arms, default = _split_parts(node)
            arm_nodes = [a for a in arms.items if isinstance(a, SList)]
            for arm in arm_nodes:
                if arm.head not in (CONCASE_MARKER, CONSTCASE_MARKER) or len(arm.items) < 2:
                    raise ParseError.malformed_block(None, 0, f"unknown arm shape {arm.head!r}")
            new_split = _Split(
                scrutinee=scrutinee,
                depth=depth + 1,
                alternatives=tuple(_arm_pattern(a) for a in arm_nodes),
            )
            if default and default[0] == "Just":
                if len(default) < 2:
                    raise ParseError.malformed_block(None, 0, "default arm without body")
                stack.append(_Branch("_", default[1], new_split, is_default=True))
            elif default and default[0] != "Nothing":
                raise ParseError.malformed_block(None, 0, f"unexpected default {default[0]!r}")
            for arm in reversed(arm_nodes):
                stack.append(_Branch(_arm_pattern(arm), arm.items[-1], new_split))
        elif marker == CRASH_MARKER:
            kind = rules.classify(_crash_text(node))
            _log_kind(kind)
            cases.append(CompiledCase("_", kind, None, depth))
        else:
            for child in reversed(node.items):
                if isinstance(child, SList):
                    stack.append((child, depth))

    return cases, has_default


def _log_kind(kind: CaseKind) -> None:
    if kind.reason is CrashReason.OTHER:
        log.debug("unrecognized_crash_message", message=kind.message)


# =============================================================================
# Blocks
# =============================================================================


def _split_blocks(text: str) -> list[tuple[int, str]]:
    """Group lines into (start_line, block_text); lines before any block are skipped."""
    blocks: list[tuple[int, list[str]]] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if _BLOCK_START.match(line):
            blocks.append((lineno, [line]))
        elif blocks and line.strip():
            blocks[-1][1].append(line)
    return [(start, "\n".join(lines)) for start, lines in blocks]


def parse_block(block: str, line: int, rules: RuleSet) -> CompiledFunction:
    """Parse one function block.

    Raises:
        ParseError: If the block is malformed.
    """
    header = _HEADER.match(block)
    if header is None:
        raise ParseError.malformed_block(None, line, "missing 'Name = [args]' header")
    full_name = header.group("name")
    body_text = header.group("body").strip()
    if not body_text:
        raise ParseError.malformed_block(full_name, line, "empty body")

    try:
        body = read_sexprs(body_text)
        cases, has_default = _walk(body, rules)
    except ParseError as e:
        reason = e.details.get("reason") or e.message
        raise ParseError.malformed_block(full_name, line, reason) from e

    args = [a.strip() for a in header.group("args").split(",") if a.strip()]
    module_name, func_name = split_qualified_name(full_name)
    return CompiledFunction(
        full_name=full_name,
        module_name=module_name,
        func_name=func_name,
        arity=len(args),
        cases=tuple(cases),
        has_default_case=has_default,
        line=line,
    )


def parse(text: str, *, rules: RuleSet) -> ParseResult:
    """Parse a whole dump into classified functions plus per-block failures."""
    result = ParseResult()
    for line, block in _split_blocks(text):
        try:
            result.functions.append(parse_block(block, line, rules))
        except ParseError as e:
            name = e.details.get("name")
            reason = e.details.get("reason", e.message)
            log.warning("dump_block_skipped", name=name, line=line, reason=reason)
            result.failures.append(ParseFailure(name=name, line=line, reason=reason))

    log.debug(
        "dump_parsed",
        functions=len(result.functions),
        failures=len(result.failures),
        rules_version=rules.version,
    )
    return result
