"""Tests for signature parsing and the type registry."""

import pytest

from semcov.statespace.types import (
    Parameter,
    SignatureSet,
    TypeKind,
    TypeRegistry,
    parse_parameters,
    parse_signatures,
    split_top_level,
    type_head,
)

SOURCE = """\
module Main

data Color = Red | Green | Blue

data Flag = On | Off

data Tree = Leaf | Node Tree Int Tree

data Shape : Type where
  Circle : Double -> Shape
  Square : Double -> Shape

||| Paint with a linear handle.
export
paint : (1 h : Handle) -> {0 n : Nat} -> Color -> Vect n Bool -> IO ()

total
add : Nat ->
      Nat -> Nat
"""


class TestTypeHead:
    @pytest.mark.parametrize(
        ("expr", "head"),
        [
            ("Vect n (List a)", "Vect"),
            ("(List a)", "List"),
            ("a -> b", "->"),
            ("()", "Unit"),
            ("(a, b)", "Pair"),
            ("Prelude.Types.Nat", "Nat"),
            ("forall a. Maybe a", "Maybe"),
        ],
    )
    def test_heads(self, expr: str, head: str) -> None:
        assert type_head(expr) == head

    def test_split_ignores_nested_separators(self) -> None:
        assert split_top_level("(a -> b) -> {x : (c -> d)} -> e", "->") == [
            "(a -> b)",
            "{x : (c -> d)}",
            "e",
        ]


class TestParseParameters:
    def test_binders_and_quantities(self) -> None:
        params, ret = parse_parameters(
            "(1 h : Handle) -> {0 n : Nat} -> Color -> Vect n Bool -> IO ()"
        )

        assert ret == "IO ()"
        assert params == (
            Parameter("h", 0, "Handle", quantity="1"),
            Parameter("n", 1, "Nat", quantity="0", implicit=True),
            Parameter("arg2", 2, "Color"),
            Parameter("arg3", 3, "Vect n Bool"),
        )

    def test_grouped_names_share_type(self) -> None:
        params, _ = parse_parameters("(x, y : Nat) -> Nat")

        assert [(p.name, p.index, p.type_expr) for p in params] == [
            ("x", 0, "Nat"),
            ("y", 1, "Nat"),
        ]

    def test_no_arrows(self) -> None:
        params, ret = parse_parameters("Nat")

        assert params == ()
        assert ret == "Nat"


class TestParseSignatures:
    def test_signatures_are_module_qualified(self) -> None:
        sigs = parse_signatures(SOURCE)

        assert set(sigs.signatures) == {"Main.paint", "Main.add"}
        paint = sigs.signatures["Main.paint"]
        assert [p.name for p in paint.parameters] == ["h", "n", "arg2", "arg3"]
        assert [p.name for p in paint.explicit_parameters] == ["h", "arg2", "arg3"]

    def test_aligned_to_right_aligns_on_compiled_arity(self) -> None:
        vhead = parse_signatures("vhead : Vect (S n) a -> a\n").signatures["vhead"]

        assert [p.index for p in vhead.aligned_to(2)] == [1]
        assert vhead.aligned_to(1) == vhead.parameters
        assert [p.index for p in vhead.aligned_to(0)] == [-1]

    def test_continuation_lines_join_signature(self) -> None:
        add = parse_signatures(SOURCE).signatures["Main.add"]

        assert [p.type_expr for p in add.parameters] == ["Nat", "Nat"]
        assert add.return_type == "Nat"

    def test_data_declarations(self) -> None:
        types = {t.name: t for t in parse_signatures(SOURCE).data_types}

        assert types["Color"].kind is TypeKind.FINITE
        assert [c.name for c in types["Color"].constructors] == ["Red", "Green", "Blue"]
        assert types["Flag"].kind is TypeKind.BOOLEAN
        tree = types["Tree"]
        assert tree.kind is TypeKind.RECURSIVE
        assert tree.representative == "Node"
        assert [c.name for c in tree.base_constructors] == ["Leaf"]
        assert tree.recursive_constructors[0].example == "Node {sub} x {sub}"

    def test_gadt_style_declaration(self) -> None:
        shape = next(t for t in parse_signatures(SOURCE).data_types if t.name == "Shape")

        assert shape.kind is TypeKind.FINITE
        assert [c.example for c in shape.constructors] == ["Circle x", "Square x"]

    def test_lookup_falls_back_to_unique_bare_name(self) -> None:
        sigs = parse_signatures(SOURCE)

        assert sigs.lookup("Other.add") is sigs.signatures["Main.add"]
        assert sigs.lookup("Main.missing") is None

    def test_bare_name_lookup_requires_uniqueness(self) -> None:
        sigs = parse_signatures("module A\nf : Nat -> Nat\n")
        sigs.signatures.update(parse_signatures("module B\nf : Bool -> Bool\n").signatures)

        assert sigs.lookup("C.f") is None
        assert sigs.lookup("B.f") is sigs.signatures["B.f"]


class TestTypeRegistry:
    def test_builtin_kinds(self) -> None:
        registry = TypeRegistry.builtin()

        assert registry.lookup("Bool").kind is TypeKind.BOOLEAN
        assert registry.lookup("Maybe a").kind is TypeKind.FINITE
        assert registry.lookup("List (Maybe a)").kind is TypeKind.RECURSIVE
        assert registry.lookup("String").kind is TypeKind.OPAQUE

    def test_unknown_type_is_opaque(self) -> None:
        info = TypeRegistry.builtin().lookup("Handle")

        assert info.kind is TypeKind.OPAQUE
        assert info.representative == "<Handle>"
        assert info.boundaries == ()

    def test_declared_types_extend_registry(self) -> None:
        registry = parse_signatures(SOURCE).registry()

        assert registry.lookup("Color").kind is TypeKind.FINITE
        assert registry.lookup("Nat").kind is TypeKind.RECURSIVE

    def test_with_types_does_not_mutate_base(self) -> None:
        base = TypeRegistry.builtin()
        base.with_types(parse_signatures(SOURCE).data_types)

        assert base.lookup("Color").kind is TypeKind.OPAQUE

    def test_empty_signature_set(self) -> None:
        assert SignatureSet().registry().lookup("Nat").name == "Nat"
