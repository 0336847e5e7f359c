"""Versioned crash-classification and exclusion vocabularies.

The compiler's crash message text drifts across releases, so the
classification table is data: an ordered list of (predicate -> reason)
rules, checked most-specific first, bundled with the compiler version it
was written for. A RuleSet is always passed explicitly to the parser; there
is no process-wide rule table.

Rule order is significant. The numeral-optimizer message
("Nat case not covered") contains the generic "case not covered" phrase,
so the optimizer rule must come first or optimizer noise is reported as a
bug.

YAML layout accepted by load_rule_set():

    version: "2"
    compiler_version: "0.7.0"
    crash_rules:
      - {match: regex, pattern: '\\bNat case not covered', reason: optimizer_artifact}
      - {match: startswith, pattern: "No clauses", reason: no_clauses}
    exclusions:
      - '^Prelude\\.'
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from semcov.core.errors import ParseError
from semcov.dumpcases.models import CaseKind, CrashReason

MatchMode = Literal["contains", "startswith", "regex"]


class CrashRule(BaseModel):
    """Single predicate -> reason entry."""

    model_config = ConfigDict(frozen=True)

    match: MatchMode = "contains"
    pattern: str
    reason: CrashReason
    case_sensitive: bool = False

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        if not v:
            raise ValueError("pattern must not be empty")
        return v

    def matches(self, message: str) -> bool:
        if self.match == "regex":
            flags = 0 if self.case_sensitive else re.IGNORECASE
            return re.search(self.pattern, message, flags) is not None
        subject = message if self.case_sensitive else message.casefold()
        needle = self.pattern if self.case_sensitive else self.pattern.casefold()
        if self.match == "startswith":
            return subject.lstrip().startswith(needle)
        return needle in subject


class RuleSet(BaseModel):
    """Ordered crash rules plus function-name exclusions for one compiler version."""

    model_config = ConfigDict(frozen=True)

    version: str = "1"
    compiler_version: str = "any"
    crash_rules: tuple[CrashRule, ...] = Field(default_factory=tuple)
    exclusions: tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("exclusions")
    @classmethod
    def validate_exclusions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid exclusion regex {pattern!r}: {e}") from e
        return v

    def classify(self, message: str) -> CaseKind:
        """Classify a crash message; first matching rule wins, else OTHER."""
        for rule in self.crash_rules:
            if rule.matches(message):
                return CaseKind.non_canonical(rule.reason, message)
        return CaseKind.non_canonical(CrashReason.OTHER, message)

    def is_excluded(self, full_name: str) -> bool:
        """True for stdlib and compiler-generated functions."""
        return any(re.search(pattern, full_name) for pattern in self.exclusions)


DEFAULT_CRASH_RULES: tuple[CrashRule, ...] = (
    # Numeral optimizer (Nat -> Integer) artifacts. Must precede the generic rule.
    CrashRule(
        match="regex", pattern=r"\bNat case not covered", reason=CrashReason.OPTIMIZER_ARTIFACT
    ),
    CrashRule(match="contains", pattern="case not covered", reason=CrashReason.NOT_COVERED),
    CrashRule(match="startswith", pattern="Unhandled input for", reason=CrashReason.NOT_COVERED),
    CrashRule(match="contains", pattern="impossible case", reason=CrashReason.IMPOSSIBLE),
    CrashRule(match="regex", pattern=r"\babsurd\b", reason=CrashReason.IMPOSSIBLE),
    CrashRule(match="startswith", pattern="No clauses", reason=CrashReason.NO_CLAUSES),
)

DEFAULT_EXCLUSIONS: tuple[str, ...] = (
    r"^\{",  # machine names: {csegen:12}, {eta:0}
    r"^_builtin\.",
    r"^prim__",
    r"^(Prelude|Data|System|Control|Decidable|Language|Debug)\.",
    r"\.$",  # type-constructor case trees
)

DEFAULT_RULE_SET = RuleSet(
    version="1",
    compiler_version="0.7.0",
    crash_rules=DEFAULT_CRASH_RULES,
    exclusions=DEFAULT_EXCLUSIONS,
)


def load_rule_set(path: Path) -> RuleSet:
    """Load a versioned rule table from YAML.

    Keys missing from the file fall back to the defaults, so a file may
    override only the crash rules or only the exclusions.

    Raises:
        ParseError: If the file is unreadable or fails validation.
    """
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ParseError.invalid_rules(str(path), str(e)) from e

    if not isinstance(data, dict):
        raise ParseError.invalid_rules(str(path), "top-level YAML value must be a mapping")

    payload = {
        "version": DEFAULT_RULE_SET.version,
        "compiler_version": DEFAULT_RULE_SET.compiler_version,
        "crash_rules": [r.model_dump() for r in DEFAULT_RULE_SET.crash_rules],
        "exclusions": list(DEFAULT_RULE_SET.exclusions),
        **data,
    }
    try:
        return RuleSet.model_validate(payload)
    except ValidationError as e:
        err = e.errors()[0]
        loc = ".".join(str(part) for part in err["loc"])
        raise ParseError.invalid_rules(str(path), f"{loc}: {err['msg']}") from e
