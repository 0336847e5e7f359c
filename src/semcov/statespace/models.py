"""Equivalence-class estimate model."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Quantity(str, Enum):
    """How often a parameter is used at runtime."""

    ERASED = "erased"  # compile-time only; no runtime state
    LINEAR = "linear"  # consumed exactly once
    UNRESTRICTED = "unrestricted"


@dataclass(frozen=True, slots=True)
class EquivalenceClass:
    """A set of inputs treated as interchangeable, with one concrete example."""

    label: str
    example: str
    constructor: str | None = None  # outermost constructor; None for opaque values
    boundary: bool = False
    size: int = 0  # recursive unrolling depth of the example

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "example": self.example,
            "constructor": self.constructor,
            "boundary": self.boundary,
        }


@dataclass(frozen=True, slots=True)
class ParameterEstimate:
    name: str
    index: int
    type_expr: str
    type_name: str
    quantity: Quantity
    implicit: bool = False
    classes: tuple[EquivalenceClass, ...] = ()
    representative_constructor: str | None = None
    truncated: bool = False  # hit equivalence_class_limit

    @property
    def contributes(self) -> bool:
        """Erased and implicit parameters add nothing to the runtime state space."""
        return self.quantity is not Quantity.ERASED and not self.implicit

    @property
    def class_count(self) -> int:
        return len(self.classes) if self.contributes else 0

    @property
    def representative(self) -> EquivalenceClass | None:
        for cls in self.classes:
            if cls.constructor == self.representative_constructor and not cls.boundary:
                return cls
        for cls in self.classes:
            if not cls.boundary:
                return cls
        return self.classes[0] if self.classes else None

    @property
    def boundary_classes(self) -> tuple[EquivalenceClass, ...]:
        return tuple(c for c in self.classes if c.boundary)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type_expr,
            "quantity": self.quantity.value,
            "implicit": self.implicit,
            "class_count": self.class_count,
            "truncated": self.truncated,
            "classes": [c.to_dict() for c in self.classes] if self.contributes else [],
        }


@dataclass(frozen=True, slots=True)
class PrunedPath:
    """A parameter class removed because the case tree proved it impossible."""

    param_name: str
    param_index: int
    constructor: str
    label: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "param_name": self.param_name,
            "param_index": self.param_index,
            "constructor": self.constructor,
            "label": self.label,
        }


@dataclass(frozen=True, slots=True)
class EquivalenceClassEstimate:
    parameters: tuple[ParameterEstimate, ...]
    estimated_cases: int
    raw_states: int  # unclamped product
    clamped: bool
    pruned: tuple[PrunedPath, ...] = ()

    @property
    def runtime_parameters(self) -> tuple[ParameterEstimate, ...]:
        return tuple(p for p in self.parameters if p.contributes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "estimated_cases": self.estimated_cases,
            "raw_states": self.raw_states,
            "clamped": self.clamped,
            "parameters": [p.to_dict() for p in self.parameters],
            "pruned": [p.to_dict() for p in self.pruned],
        }


def combine(
    parameters: Iterable[ParameterEstimate],
    max_total_states: int,
    pruned: Iterable[PrunedPath] = (),
) -> EquivalenceClassEstimate:
    """Multiply class counts across runtime parameters and clamp."""
    params = tuple(parameters)
    raw = 1
    for p in params:
        if p.contributes:
            raw *= len(p.classes)
    return EquivalenceClassEstimate(
        parameters=params,
        estimated_cases=min(raw, max_total_states),
        raw_states=raw,
        clamped=raw > max_total_states,
        pruned=tuple(pruned),
    )
