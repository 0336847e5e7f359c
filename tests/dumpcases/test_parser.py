"""Tests for the case-tree dump parser."""

import pytest

from semcov.core.errors import ParseError
from semcov.dumpcases.models import CrashReason
from semcov.dumpcases.parser import SList, SString, parse, parse_block, read_sexprs
from semcov.dumpcases.rules import DEFAULT_RULE_SET


def _one(text: str):
    result = parse(text, rules=DEFAULT_RULE_SET)
    assert result.failures == []
    assert len(result.functions) == 1
    return result.functions[0]


# =============================================================================
# S-expression reader
# =============================================================================


class TestReadSexprs:
    def test_nested_lists_and_atoms(self) -> None:
        nodes = read_sexprs("(%case !{arg:0} [a, b] Nothing)")

        assert len(nodes) == 1
        top = nodes[0]
        assert isinstance(top, SList)
        assert top.head == "%case"
        assert top.items[1] == "!{arg:0}"
        inner = top.items[2]
        assert isinstance(inner, SList) and inner.opener == "["
        assert inner.items == ["a", "b"]

    def test_operator_segment_is_one_atom(self) -> None:
        nodes = read_sexprs("(Prelude.Basics.(::) x)")

        assert nodes[0].items == ["Prelude.Basics.(::)", "x"]  # type: ignore[union-attr]

    def test_string_escapes(self) -> None:
        nodes = read_sexprs(r'(%crash "say \"hi\"")')

        assert nodes[0].items[1] == SString('say "hi"')  # type: ignore[union-attr]

    def test_braces_may_contain_spaces(self) -> None:
        assert read_sexprs("{e 1}") == ["{e 1}"]

    @pytest.mark.parametrize("text", ["(a [b)", "(a b", "a)"])
    def test_unbalanced(self, text: str) -> None:
        with pytest.raises(ParseError):
            read_sexprs(text)

    def test_unterminated_string(self) -> None:
        with pytest.raises(ParseError):
            read_sexprs('(%crash "oops)')


# =============================================================================
# Classification
# =============================================================================


class TestScenarios:
    def test_total_function_has_only_canonical_cases(self, safe_head_dump: str) -> None:
        fn = _one(safe_head_dump)

        assert fn.full_name == "Main.safeHead"
        assert fn.module_name == "Main"
        assert fn.func_name == "safeHead"
        assert fn.arity == 1
        assert [c.pattern for c in fn.cases] == ["Nil", "::"]
        assert all(c.kind.is_canonical for c in fn.cases)
        assert fn.cases_of(CrashReason.IMPOSSIBLE) == []
        assert fn.has_default_case is False

    def test_missing_arm_is_not_covered(self, bad_head_dump: str) -> None:
        fn = _one(bad_head_dump)

        assert fn.canonical_count == 1
        gaps = fn.cases_of(CrashReason.NOT_COVERED)
        assert len(gaps) == 1
        assert gaps[0].pattern == "_"
        assert gaps[0].alternatives == ("::",)
        assert fn.has_bug

    def test_impossible_default_records_scrutinee(self, vect_head_dump: str) -> None:
        fn = _one(vect_head_dump)

        impossible = fn.cases_of(CrashReason.IMPOSSIBLE)
        assert len(impossible) == 1
        assert impossible[0].param_index == 1
        assert fn.arity == 2
        assert not fn.has_bug


class TestCaseShapes:
    def test_arm_whose_body_is_a_crash_is_one_case(self) -> None:
        fn = _one(
            "Main.f = [{arg:0}]: (%case !{arg:0} ["
            '(%concase [nil] Prelude.Basics.Nil Just 0 [] (%crash "Impossible case encountered")) '
            "(%concase [cons] Prelude.Basics.(::) Just 1 [{e:1}, {e:2}] 1)] Nothing)"
        )

        assert [(c.pattern, c.kind.label) for c in fn.cases] == [
            ("Nil", "impossible"),
            ("::", "canonical"),
        ]

    def test_constant_arms_and_default(self) -> None:
        fn = _one("Main.g = [{arg:0}]: (%case !{arg:0} [(%constcase 0 1) (%constcase 1 2)] Just 3)")

        assert [c.pattern for c in fn.cases] == ["0", "1", "_"]
        assert all(c.kind.is_canonical for c in fn.cases)
        assert fn.has_default_case

    def test_string_constant_pattern(self) -> None:
        fn = _one('Main.h = [{arg:0}]: (%case !{arg:0} [(%constcase "a" 1)] Just 0)')

        assert fn.cases[0].pattern == '"a"'

    def test_nested_splits_keep_source_order_and_depth(self) -> None:
        fn = _one(
            "Main.zip = [{arg:0}, {arg:1}]: (%case !{arg:0} ["
            "(%concase [nil] Prelude.Basics.Nil Just 0 [] 0) "
            "(%concase [cons] Prelude.Basics.(::) Just 1 [{e:1}, {e:2}] "
            "(%case !{arg:1} [(%concase [nil] Prelude.Basics.Nil Just 0 [] 1)] "
            'Just (%crash "case not covered")))] Nothing)'
        )

        assert [(c.pattern, c.depth, c.scrutinee) for c in fn.cases] == [
            ("Nil", 1, "{arg:0}"),
            ("::", 1, "{arg:0}"),
            ("Nil", 2, "{arg:1}"),
            ("_", 2, "{arg:1}"),
        ]
        assert fn.max_depth == 2

    def test_split_inside_let_is_found(self) -> None:
        fn = _one(
            "Main.k = [{arg:0}]: (%let {x} 1 "
            "(%case !{arg:0} [(%concase [t] Prelude.Basics.True Just 1 [] 1)] Just 0))"
        )

        assert [c.pattern for c in fn.cases] == ["True", "_"]

    def test_top_level_crash(self) -> None:
        fn = _one('Main.void = [{arg:0}]: (%crash "No clauses in Main.void")')

        assert len(fn.cases) == 1
        assert fn.cases[0].kind.reason is CrashReason.NO_CLAUSES
        assert fn.cases[0].depth == 0
        assert fn.canonical_count == 0

    def test_unknown_crash_is_other(self) -> None:
        fn = _one(
            'Main.div = [{arg:0}]: (%case !{arg:0} [(%constcase 0 (%crash "division by zero"))] '
            "Just 1)"
        )

        assert fn.cases[0].kind.reason is CrashReason.OTHER
        assert fn.cases[0].kind.message == "division by zero"

    def test_deep_nesting_does_not_recurse(self) -> None:
        depth = 3000
        prefix = "(%case !{arg:0} [(%concase [c] Main.C Just 0 [] "
        suffix = ")] Nothing)"
        fn = _one("Main.deep = [{arg:0}]: " + prefix * depth + "0" + suffix * depth)

        assert len(fn.cases) == depth
        assert fn.max_depth == depth

    def test_operator_function_name(self) -> None:
        fn = _one("Main.(<+>) = [{arg:0}, {arg:1}]: !{arg:0}")

        assert fn.module_name == "Main"
        assert fn.func_name == "(<+>)"
        assert fn.cases == ()


# =============================================================================
# Blocks and failures
# =============================================================================


class TestBlocks:
    def test_continuation_lines_and_preamble(self) -> None:
        text = (
            "some banner line\n"
            "Main.a = [{arg:0}]: (%case !{arg:0} [\n"
            "    (%constcase 0 1)] Nothing)\n"
            "Main.b = []: 1\n"
        )

        result = parse(text, rules=DEFAULT_RULE_SET)

        assert [(f.full_name, f.line) for f in result.functions] == [("Main.a", 2), ("Main.b", 4)]
        assert result.functions[0].cases[0].pattern == "0"

    def test_colon_after_args_is_optional(self) -> None:
        fn = _one("Main.c = [{arg:0}] (%case !{arg:0} [(%constcase 0 1)] Nothing)")

        assert fn.arity == 1
        assert len(fn.cases) == 1

    def test_malformed_block_does_not_abort_file(self) -> None:
        text = (
            "Main.broken = [{arg:0}]: (%case !{arg:0} [(%constcase 0 1)\n"
            "Main.fine = [{arg:0}]: (%case !{arg:0} [(%constcase 0 1)] Nothing)\n"
        )

        result = parse(text, rules=DEFAULT_RULE_SET)

        assert [f.full_name for f in result.functions] == ["Main.fine"]
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert failure.name == "Main.broken"
        assert failure.line == 1
        assert not result.ok

    def test_unterminated_string_block_fails(self) -> None:
        result = parse('Main.s = []: (%crash "never closed)\n', rules=DEFAULT_RULE_SET)

        assert result.functions == []
        assert result.failures[0].name == "Main.s"

    def test_unknown_arm_shape_fails(self) -> None:
        result = parse(
            "Main.u = [{arg:0}]: (%case !{arg:0} [(%weird 0 1)] Nothing)\n", rules=DEFAULT_RULE_SET
        )

        assert result.failures and "unknown arm shape" in result.failures[0].reason

    @pytest.mark.parametrize(
        "text",
        [
            "Main.m = []: (%crash)\n",
            "Main.m = [{arg:0}]: (%case !{arg:0} [(%constcase 0 (%crash oops))] Nothing)\n",
            "Main.m = [{arg:0}]: (%case !{arg:0} [(%constcase 0 1)] Just (%crash))\n",
        ],
    )
    def test_crash_without_message_fails(self, text: str) -> None:
        result = parse(text, rules=DEFAULT_RULE_SET)

        assert result.functions == []
        assert len(result.failures) == 1
        assert "quoted message" in result.failures[0].reason

    def test_parse_block_requires_header(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_block("not a block", 9, DEFAULT_RULE_SET)

        assert exc_info.value.details["line"] == 9

    def test_parse_block_rejects_empty_body(self) -> None:
        with pytest.raises(ParseError):
            parse_block("Main.e = []:", 1, DEFAULT_RULE_SET)

    def test_by_name_index(self, safe_head_dump: str, bad_head_dump: str) -> None:
        result = parse(safe_head_dump + bad_head_dump, rules=DEFAULT_RULE_SET)

        assert set(result.by_name()) == {"Main.safeHead", "Main.badHead"}
