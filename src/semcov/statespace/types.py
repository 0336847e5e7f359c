"""Source signature parsing and the type registry used for estimation.

Signatures are read from source text:

    module Main

    data Color = Red | Green | Blue

    export
    paint : (1 h : Handle) -> {0 n : Nat} -> Color -> Vect n Bool -> IO ()

Each top-level arrow segment becomes a Parameter; the final segment is the
return type. Binders carry a quantity (``0`` erased, ``1`` linear) and
``{...}`` binders are implicit.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType

_MODIFIERS = frozenset(("export", "public", "private", "total", "partial", "covering"))
_SIGNATURE = re.compile(r"^(?P<name>\([^)\s]+\)|[A-Za-z_][\w']*)\s*:\s*(?P<type>.*)$")
_DATA = re.compile(r"^data\s+(?P<name>[A-Z][\w']*)(?P<rest>.*)$")
_MODULE = re.compile(r"^module\s+(?P<name>[\w.]+)")
_EXPLICIT_BINDER = re.compile(
    r"^\((?:(?P<q>[01])\s+)?(?P<names>[\w']+(?:\s*,\s*[\w']+)*)\s*:\s*(?P<type>.+)\)$",
    re.DOTALL,
)
_IMPLICIT_BINDER = re.compile(
    r"^\{(?:(?P<auto>auto|default\s+\S+)\s+)?(?:(?P<q>[01])\s+)?(?P<names>[\w']+(?:\s*,\s*[\w']+)*)"
    r"\s*:\s*(?P<type>.+)\}$",
    re.DOTALL,
)
_FORALL = re.compile(r"^forall\s+[^.]+\.\s*")
_WORD = re.compile(r"[A-Za-z_][\w']*")


# =============================================================================
# Parameters and signatures
# =============================================================================


@dataclass(frozen=True, slots=True)
class Parameter:
    """One declared parameter of a function signature."""

    name: str
    index: int
    type_expr: str
    quantity: str | None = None  # "0", "1", or None (unrestricted)
    implicit: bool = False

    @property
    def type_head(self) -> str:
        return type_head(self.type_expr)


@dataclass(frozen=True, slots=True)
class Signature:
    name: str
    parameters: tuple[Parameter, ...]
    return_type: str

    @property
    def explicit_parameters(self) -> tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if not p.implicit)

    def aligned_to(self, arity: int) -> tuple[Parameter, ...]:
        """Re-index parameters to compiled argument positions.

        Auto-bound implicits (``n`` in ``Vect (S n) a -> a``) take the
        leading ``{arg:N}`` slots without being written, so declared binders
        are right-aligned to the compiled arity. Binders with no slot left
        get negative indices and never match a case split.
        """
        offset = arity - len(self.parameters)
        if offset == 0:
            return self.parameters
        return tuple(replace(p, index=p.index + offset) for p in self.parameters)


def split_top_level(text: str, sep: str) -> list[str]:
    """Split on sep where it is not nested in (), [] or {}."""
    parts: list[str] = []
    depth = 0
    start = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(depth - 1, 0)
        elif depth == 0 and text.startswith(sep, i):
            parts.append(text[start:i].strip())
            i += len(sep)
            start = i
            continue
        i += 1
    parts.append(text[start:].strip())
    return [p for p in parts if p]


def _strip_parens(text: str) -> str:
    text = text.strip()
    while text.startswith("(") and text.endswith(")"):
        inner = text[1:-1].strip()
        if len(split_top_level(inner, ",")) != 1 or not _balanced(inner):
            break
        text = inner
    return text


def _balanced(text: str) -> bool:
    depth = 0
    for ch in text:
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def type_head(type_expr: str) -> str:
    """Head constructor of a type: ``Vect n (List a)`` -> ``Vect``; functions -> ``->``."""
    inner = _strip_parens(_FORALL.sub("", type_expr.strip()))
    if len(split_top_level(inner, "->")) > 1:
        return "->"
    if inner in ("()", ""):
        return "Unit"
    if inner.startswith("("):
        return "Pair" if len(split_top_level(inner[1:-1], ",")) > 1 else inner
    head = inner.split()[0]
    return head.rsplit(".", 1)[-1] if "." in head and not head.startswith(".") else head


def parse_parameters(type_text: str) -> tuple[tuple[Parameter, ...], str]:
    """Split a signature type into parameters and the return type."""
    segments = split_top_level(_FORALL.sub("", " ".join(type_text.split())), "->")
    if not segments:
        return (), ""
    params: list[Parameter] = []
    for segment in segments[:-1]:
        explicit = _EXPLICIT_BINDER.match(segment)
        implicit = _IMPLICIT_BINDER.match(segment) if explicit is None else None
        binder = explicit or implicit
        if binder is None:
            params.append(Parameter(f"arg{len(params)}", len(params), segment))
            continue
        for name in (n.strip() for n in binder.group("names").split(",")):
            params.append(
                Parameter(
                    name=name if name != "_" else f"arg{len(params)}",
                    index=len(params),
                    type_expr=binder.group("type").strip(),
                    quantity=binder.group("q"),
                    implicit=implicit is not None,
                )
            )
    return tuple(params), segments[-1]


# =============================================================================
# Type registry
# =============================================================================


class TypeKind(str, Enum):
    BOOLEAN = "boolean"
    FINITE = "finite"
    RECURSIVE = "recursive"
    OPAQUE = "opaque"


@dataclass(frozen=True, slots=True)
class Constructor:
    """A data constructor. ``example`` may contain ``{sub}`` holes for recursive positions."""

    name: str
    example: str
    recursive: bool = False


@dataclass(frozen=True, slots=True)
class TypeInfo:
    name: str
    kind: TypeKind
    constructors: tuple[Constructor, ...] = ()
    representative: str | None = None  # constructor name, or example for opaque types
    boundaries: tuple[tuple[str, str], ...] = ()  # (label, example), opaque types only
    hole: str = "x"  # stands in for an unrolled recursive position

    @property
    def base_constructors(self) -> tuple[Constructor, ...]:
        return tuple(c for c in self.constructors if not c.recursive)

    @property
    def recursive_constructors(self) -> tuple[Constructor, ...]:
        return tuple(c for c in self.constructors if c.recursive)


def _finite(name: str, *ctors: tuple[str, str], representative: str | None = None) -> TypeInfo:
    return TypeInfo(
        name=name,
        kind=TypeKind.FINITE,
        constructors=tuple(Constructor(n, ex) for n, ex in ctors),
        representative=representative,
    )


def _recursive(
    name: str, base: tuple[str, str], step: tuple[str, str], representative: str, hole: str
) -> TypeInfo:
    return TypeInfo(
        name=name,
        kind=TypeKind.RECURSIVE,
        constructors=(Constructor(*base), Constructor(*step, recursive=True)),
        representative=representative,
        hole=hole,
    )


def _opaque(name: str, representative: str, *boundaries: tuple[str, str]) -> TypeInfo:
    return TypeInfo(
        name=name, kind=TypeKind.OPAQUE, representative=representative, boundaries=boundaries
    )


def _int_type(name: str, maximum: str, signed: bool = True) -> TypeInfo:
    bounds = [("zero", "0")]
    if signed:
        bounds.append(("negative", "-1"))
    bounds.append(("extremal", maximum))
    return _opaque(name, "42", *bounds)


BUILTIN_TYPES: tuple[TypeInfo, ...] = (
    TypeInfo(
        "Bool",
        TypeKind.BOOLEAN,
        (Constructor("True", "True"), Constructor("False", "False")),
        representative="True",
    ),
    _finite("Maybe", ("Nothing", "Nothing"), ("Just", "Just x"), representative="Just"),
    _finite("Either", ("Left", "Left e"), ("Right", "Right x"), representative="Right"),
    _finite("Ordering", ("LT", "LT"), ("EQ", "EQ"), ("GT", "GT")),
    _finite("Dec", ("Yes", "Yes prf"), ("No", "No contra"), representative="Yes"),
    _finite("Unit", ("MkUnit", "()")),
    _finite("Pair", ("MkPair", "(x, y)")),
    _recursive("Nat", ("Z", "Z"), ("S", "S {sub}"), representative="S", hole="n"),
    _recursive("List", ("Nil", "[]"), ("::", "x :: {sub}"), representative="::", hole="xs"),
    _recursive("List1", ("Nil", "[]"), ("::", "x ::: {sub}"), representative="::", hole="xs"),
    _recursive("Vect", ("Nil", "[]"), ("::", "x :: {sub}"), representative="::", hole="xs"),
    _recursive("SnocList", ("Lin", "[<]"), (":<", "{sub} :< x"), representative=":<", hole="sx"),
    _opaque("String", '"abc"', ("empty", '""')),
    _opaque("Char", "'a'", ("nul", "'\\0'")),
    _opaque("Double", "1.5", ("zero", "0.0"), ("negative", "-1.0"), ("extremal", "1.7976931348623157e308")),
    _int_type("Int", "9223372036854775807"),
    _int_type("Integer", "123456789012345678901234567890"),
    _int_type("Int8", "127"),
    _int_type("Int16", "32767"),
    _int_type("Int32", "2147483647"),
    _int_type("Int64", "9223372036854775807"),
    _int_type("Bits8", "255", signed=False),
    _int_type("Bits16", "65535", signed=False),
    _int_type("Bits32", "4294967295", signed=False),
    _int_type("Bits64", "18446744073709551615", signed=False),
)


@dataclass(frozen=True, slots=True)
class TypeRegistry:
    """Immutable head-name -> TypeInfo lookup."""

    types: Mapping[str, TypeInfo] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def builtin(cls) -> TypeRegistry:
        return cls(MappingProxyType({t.name: t for t in BUILTIN_TYPES}))

    def with_types(self, extra: Iterable[TypeInfo]) -> TypeRegistry:
        merged = dict(self.types)
        merged.update({t.name: t for t in extra})
        return TypeRegistry(MappingProxyType(merged))

    def lookup(self, type_expr: str) -> TypeInfo:
        head = type_head(type_expr)
        info = self.types.get(head)
        if info is not None:
            return info
        return _opaque(head, f"<{head}>")


# =============================================================================
# Source files
# =============================================================================


@dataclass(slots=True)
class SignatureSet:
    """Signatures and data declarations read from source text."""

    signatures: dict[str, Signature] = field(default_factory=dict)  # qualified name -> sig
    data_types: list[TypeInfo] = field(default_factory=list)

    def lookup(self, full_name: str, func_name: str | None = None) -> Signature | None:
        """Exact qualified lookup, else a unique match on the bare name."""
        sig = self.signatures.get(full_name)
        if sig is not None:
            return sig
        bare = func_name or full_name.rsplit(".", 1)[-1]
        found = [s for name, s in self.signatures.items() if name.rsplit(".", 1)[-1] == bare]
        return found[0] if len(found) == 1 else None

    def registry(self, base: TypeRegistry | None = None) -> TypeRegistry:
        return (base or TypeRegistry.builtin()).with_types(self.data_types)


def _ctor_example(name: str, args: list[str], type_name: str) -> tuple[str, bool]:
    rendered: list[str] = []
    recursive = False
    for arg in args:
        if type_name in _WORD.findall(arg):
            rendered.append("{sub}")
            recursive = True
        else:
            rendered.append("x")
    display = name[1:-1] if name.startswith("(") and name.endswith(")") else name
    return (" ".join([display, *rendered]) if rendered else display), recursive


def _info_from_ctors(type_name: str, ctors: list[tuple[str, list[str]]]) -> TypeInfo:
    built: list[Constructor] = []
    for ctor_name, args in ctors:
        example, recursive = _ctor_example(ctor_name, args, type_name)
        short = ctor_name[1:-1] if ctor_name.startswith("(") and ctor_name.endswith(")") else ctor_name
        built.append(Constructor(short, example, recursive))
    if any(c.recursive for c in built):
        kind = TypeKind.RECURSIVE
        representative = next(c.name for c in built if c.recursive)
    elif len(built) == 2 and all(c.example == c.name for c in built):
        kind, representative = TypeKind.BOOLEAN, built[0].name
    else:
        kind, representative = TypeKind.FINITE, built[0].name if built else None
    return TypeInfo(
        name=type_name,
        kind=kind,
        constructors=tuple(built),
        representative=representative,
        hole=type_name[0].lower(),
    )


def _parse_data(first: str, body: list[str]) -> TypeInfo | None:
    m = _DATA.match(first)
    if m is None:
        return None
    type_name = m.group("name")
    rest = m.group("rest")
    ctors: list[tuple[str, list[str]]] = []
    full = " ".join([rest, *body])
    if rest.rstrip().endswith("where"):
        for line in body:
            sig = _SIGNATURE.match(line.strip())
            if sig is None:
                continue
            params, _ = parse_parameters(sig.group("type"))
            ctors.append((sig.group("name"), [p.type_expr for p in params if not p.implicit]))
    elif "=" in full:
        alternatives = full.split("=", 1)[1]
        for alt in split_top_level(alternatives, "|"):
            tokens = split_top_level(alt.replace("(", " (").replace(")", ") "), " ")
            tokens = [t for t in tokens if t]
            if not tokens:
                continue
            ctors.append((tokens[0], tokens[1:]))
    if not ctors:
        return None
    return _info_from_ctors(type_name, ctors)


def parse_signatures(text: str) -> SignatureSet:
    """Read type signatures and data declarations from source text."""
    result = SignatureSet()
    module = ""
    # (header line, indented continuation lines)
    blocks: list[tuple[str, list[str]]] = []
    for raw in text.splitlines():
        line = raw.split("--", 1)[0].rstrip() if not raw.lstrip().startswith("|||") else ""
        if not line.strip():
            continue
        if line[0].isspace() or line.lstrip().startswith("|"):
            if blocks:
                blocks[-1][1].append(line.strip())
            continue
        words = line.split()
        while words and words[0] in _MODIFIERS:
            words = words[1:]
        if not words:
            continue
        blocks.append((" ".join(words), []))

    for header, body in blocks:
        mod = _MODULE.match(header)
        if mod:
            module = mod.group("name")
            continue
        if header.startswith("data "):
            info = _parse_data(header, body)
            if info is not None:
                result.data_types.append(info)
            continue
        sig = _SIGNATURE.match(header)
        if sig is None:
            continue
        params, ret = parse_parameters(" ".join([sig.group("type"), *body]))
        name = sig.group("name")
        qualified = f"{module}.{name}" if module else name
        result.signatures[qualified] = Signature(qualified, params, ret)
    return result
