"""Case-tree dump parsing and crash classification.

Usage:
    from semcov.dumpcases import DEFAULT_RULE_SET, parse

    result = parse(dump_text, rules=DEFAULT_RULE_SET)
    for fn in result.functions:
        ...
    for failure in result.failures:
        ...
"""

from semcov.dumpcases.models import (
    EXCLUDED_REASONS,
    CaseKind,
    CompiledCase,
    CompiledFunction,
    CrashReason,
    ParseFailure,
    ParseResult,
)
from semcov.dumpcases.parser import parse, parse_block
from semcov.dumpcases.rules import (
    DEFAULT_RULE_SET,
    CrashRule,
    RuleSet,
    load_rule_set,
)

__all__ = [
    # Models
    "EXCLUDED_REASONS",
    "CaseKind",
    "CompiledCase",
    "CompiledFunction",
    "CrashReason",
    "ParseFailure",
    "ParseResult",
    # Parsing
    "parse",
    "parse_block",
    # Rules
    "DEFAULT_RULE_SET",
    "CrashRule",
    "RuleSet",
    "load_rule_set",
]
