"""Tests for crash classification rules and exclusions."""

from pathlib import Path

import pytest

from semcov.core.errors import ErrorCode, ParseError
from semcov.dumpcases.models import CrashReason
from semcov.dumpcases.rules import (
    DEFAULT_RULE_SET,
    CrashRule,
    RuleSet,
    load_rule_set,
)


class TestClassify:
    @pytest.mark.parametrize(
        ("message", "reason"),
        [
            ("Nat case not covered", CrashReason.OPTIMIZER_ARTIFACT),
            ("Unhandled input for Main.badHead at Main.idr:5:1--5:20", CrashReason.NOT_COVERED),
            ("case not covered", CrashReason.NOT_COVERED),
            ("Impossible case encountered", CrashReason.IMPOSSIBLE),
            ("absurd", CrashReason.IMPOSSIBLE),
            ("No clauses in Main.void", CrashReason.NO_CLAUSES),
        ],
    )
    def test_known_vocabulary(self, message: str, reason: CrashReason) -> None:
        kind = DEFAULT_RULE_SET.classify(message)

        assert kind.reason is reason
        assert kind.message == message

    def test_optimizer_phrase_wins_over_generic_phrase(self) -> None:
        # "Nat case not covered" also contains "case not covered"
        kind = DEFAULT_RULE_SET.classify("Impossible case: Nat case not covered")

        assert kind.reason is CrashReason.OPTIMIZER_ARTIFACT

    @pytest.mark.parametrize(
        "message",
        ["Main.Donat case not covered", "Unhandled Signat case not covered"],
    )
    def test_optimizer_phrase_requires_word_boundary(self, message: str) -> None:
        kind = DEFAULT_RULE_SET.classify(message)

        assert kind.reason is CrashReason.NOT_COVERED

    def test_matching_is_case_insensitive(self) -> None:
        assert DEFAULT_RULE_SET.classify("IMPOSSIBLE CASE").reason is CrashReason.IMPOSSIBLE

    def test_absurd_requires_word_boundary(self) -> None:
        kind = DEFAULT_RULE_SET.classify("absurdity detected")

        assert kind.reason is CrashReason.OTHER

    def test_no_clauses_must_be_a_prefix(self) -> None:
        kind = DEFAULT_RULE_SET.classify("there are No clauses here")

        assert kind.reason is CrashReason.OTHER

    def test_unrecognized_message_keeps_text(self) -> None:
        kind = DEFAULT_RULE_SET.classify("Error: division by zero")

        assert kind.reason is CrashReason.OTHER
        assert kind.message == "Error: division by zero"
        assert kind.counts_as_reachable

    def test_empty_rule_set_classifies_everything_as_other(self) -> None:
        assert RuleSet().classify("Impossible case").reason is CrashReason.OTHER


class TestCrashRule:
    def test_case_sensitive_contains(self) -> None:
        rule = CrashRule(pattern="Boom", reason=CrashReason.OTHER, case_sensitive=True)

        assert rule.matches("Boom!")
        assert not rule.matches("boom!")

    def test_startswith_ignores_leading_whitespace(self) -> None:
        rule = CrashRule(match="startswith", pattern="No clauses", reason=CrashReason.NO_CLAUSES)

        assert rule.matches("  No clauses in f")

    def test_empty_pattern_rejected(self) -> None:
        with pytest.raises(ValueError):
            CrashRule(pattern="", reason=CrashReason.OTHER)


class TestExclusions:
    @pytest.mark.parametrize(
        "name",
        [
            "{csegen:12}",
            "_builtin.NIL",
            "prim__add_Int",
            "Prelude.Types.map",
            "Data.List.length",
            "Main.Shape.",
        ],
    )
    def test_excluded(self, name: str) -> None:
        assert DEFAULT_RULE_SET.is_excluded(name)

    @pytest.mark.parametrize("name", ["Main.safeHead", "MyData.f", "App.Preludeish.run"])
    def test_not_excluded(self, name: str) -> None:
        assert not DEFAULT_RULE_SET.is_excluded(name)

    def test_invalid_regex_rejected(self) -> None:
        with pytest.raises(ValueError):
            RuleSet(exclusions=("([",))


class TestLoadRuleSet:
    def test_partial_file_keeps_default_rules(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("version: '2'\nexclusions:\n  - '^Test\\.'\n")

        rules = load_rule_set(path)

        assert rules.version == "2"
        assert rules.crash_rules == DEFAULT_RULE_SET.crash_rules
        assert rules.is_excluded("Test.helper")
        assert not rules.is_excluded("Prelude.Types.map")

    def test_custom_crash_rules(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text(
            "crash_rules:\n"
            "  - {match: contains, pattern: 'unreachable', reason: impossible}\n"
        )

        rules = load_rule_set(path)

        assert rules.classify("unreachable code").reason is CrashReason.IMPOSSIBLE
        assert rules.classify("Impossible case").reason is CrashReason.OTHER

    def test_unknown_reason_is_parse_error(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("crash_rules:\n  - {pattern: x, reason: maybe}\n")

        with pytest.raises(ParseError) as exc_info:
            load_rule_set(path)

        assert exc_info.value.code is ErrorCode.PARSE_RULES_INVALID

    def test_missing_file_is_parse_error(self, tmp_path: Path) -> None:
        with pytest.raises(ParseError):
            load_rule_set(tmp_path / "absent.yaml")

    def test_non_mapping_is_parse_error(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("- 1\n")

        with pytest.raises(ParseError):
            load_rule_set(path)
