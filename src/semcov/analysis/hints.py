"""Prioritized test hints.

Hints are emitted in a fixed order:

1. CRITICAL  - one happy path over representative values, then one
               lifecycle hint per linear parameter
2. IMPORTANT - one error path per missing or unrecognized crash arm
3. NICE      - one hint per boundary class
4. OPTIONAL  - the cross product of remaining classes, only when the
               state space was not clamped

Generation is deterministic: the same function, coverage and estimate
always give the same hints in the same order.
"""

from __future__ import annotations

import itertools
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from string import Template
from typing import Any

from semcov.analysis.coverage import SemanticCoverage
from semcov.config.models import HintsConfig
from semcov.dumpcases.models import CompiledCase, CompiledFunction, CrashReason
from semcov.statespace.models import (
    EquivalenceClass,
    EquivalenceClassEstimate,
    ParameterEstimate,
    Quantity,
)

DEFAULT_TEMPLATE = """\
||| $priority $category: $description
$test_name : IO Bool
$test_name = pure ($func $args == ?expected)
"""

_NON_IDENT = re.compile(r"[^A-Za-z0-9]+")


class HintCategory(str, Enum):
    HAPPY_PATH = "happy_path"
    LINEAR_RESOURCE = "linear_resource"
    ERROR_PATH = "error_path"
    BOUNDARY = "boundary"
    COMBINATION = "combination"


class HintPriority(str, Enum):
    CRITICAL = "critical"
    IMPORTANT = "important"
    NICE = "nice"
    OPTIONAL = "optional"


@dataclass(frozen=True, slots=True)
class HintValue:
    """One concrete argument in a suggested test."""

    param_name: str
    example_value: str
    rationale: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "param_name": self.param_name,
            "example_value": self.example_value,
            "rationale": self.rationale,
        }


@dataclass(frozen=True, slots=True)
class TestHint:
    __test__ = False

    category: HintCategory
    priority: HintPriority
    values: tuple[HintValue, ...]
    description: str
    code_template: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "category": self.category.value,
            "priority": self.priority.value,
            "values": [v.to_dict() for v in self.values],
            "description": self.description,
        }
        if self.code_template is not None:
            result["code_template"] = self.code_template
        return result


@dataclass(frozen=True, slots=True)
class FunctionTestHints:
    func_name: str
    hints: tuple[TestHint, ...] = ()

    def of_priority(self, priority: HintPriority) -> list[TestHint]:
        return [h for h in self.hints if h.priority is priority]

    def to_dict(self) -> dict[str, Any]:
        return {
            "func_name": self.func_name,
            "hints": [h.to_dict() for h in self.hints],
            "minimal_test_suite": len(minimal_test_suite(self.hints)),
        }


# =============================================================================
# Rendering
# =============================================================================


def _argument(value: str) -> str:
    if " " in value and not (value.startswith("(") and value.endswith(")")):
        return f"({value})"
    return value


def hint_test_name(func_name: str, hint: TestHint, index: int = 0) -> str:
    """Identifier for a rendered test, e.g. ``test_Main_add_happy_path_0``."""
    ident = _NON_IDENT.sub("_", func_name).strip("_") or "fn"
    return f"test_{ident}_{hint.category.value}_{index}"


def render_template(
    hint: TestHint,
    func_name: str,
    template: str | None = None,
    *,
    index: int = 0,
) -> str:
    """Substitute hint fields into a ``string.Template``.

    Placeholders: ``$test_name``, ``$func``, ``$args``, ``$category``,
    ``$priority``, ``$description``. Unknown placeholders are left as is.
    """
    short = func_name.rsplit(".", 1)[-1]
    return Template(template or DEFAULT_TEMPLATE).safe_substitute(
        test_name=hint_test_name(func_name, hint, index),
        func=short,
        args=" ".join(_argument(v.example_value) for v in hint.values),
        category=hint.category.value,
        priority=hint.priority.value,
        description=hint.description,
    )


# =============================================================================
# Generation
# =============================================================================


def _representative_values(params: Sequence[ParameterEstimate]) -> list[HintValue]:
    values: list[HintValue] = []
    for p in params:
        rep = p.representative
        if rep is None:
            continue
        values.append(HintValue(p.name, rep.example, f"representative {p.type_name} ({rep.label})"))
    return values


def _with_value(values: list[HintValue], replacement: HintValue) -> tuple[HintValue, ...]:
    return tuple(replacement if v.param_name == replacement.param_name else v for v in values)


def _error_value(case: CompiledCase, param: ParameterEstimate) -> HintValue:
    if case.pattern != "_":
        return HintValue(param.name, case.pattern, f"constructor {case.pattern} has no arm")
    if case.alternatives:
        handled = ", ".join(case.alternatives)
        return HintValue(param.name, f"<not {handled}>", f"any value other than {handled}")
    return HintValue(param.name, "<any>", "default arm")


def _error_hints(
    function: CompiledFunction, params: Sequence[ParameterEstimate], happy: list[HintValue]
) -> list[TestHint]:
    by_index = {p.index: p for p in params}
    hints: list[TestHint] = []
    for case in function.cases:
        reason = case.kind.reason
        if reason is not CrashReason.NOT_COVERED and reason is not CrashReason.OTHER:
            continue
        param = by_index.get(case.param_index) if case.param_index is not None else None
        values = tuple(happy)
        if param is not None:
            values = _with_value(happy, _error_value(case, param))
        where = f" on {param.name}" if param is not None else ""
        if reason is CrashReason.NOT_COVERED:
            description = f"Exercise the missing arm {case.pattern!r}{where}"
        else:
            description = f"Reach the unrecognized crash{where}: {case.kind.message}"
        hints.append(TestHint(HintCategory.ERROR_PATH, HintPriority.IMPORTANT, values, description))
    return hints


def _combination_hints(
    params: Sequence[ParameterEstimate], happy: list[HintValue]
) -> list[TestHint]:
    axes: list[list[tuple[ParameterEstimate, EquivalenceClass]]] = []
    for p in params:
        rep = p.representative
        if rep is None:
            return []
        if p.quantity is Quantity.LINEAR:
            axes.append([(p, rep)])
        else:
            axes.append([(p, cls) for cls in p.classes])

    happy_key = tuple(v.example_value for v in happy)
    hints: list[TestHint] = []
    for combo in itertools.product(*axes):
        if tuple(cls.example for _, cls in combo) == happy_key:
            continue
        values = tuple(HintValue(p.name, cls.example, cls.label) for p, cls in combo)
        labels = ", ".join(f"{p.name}={cls.label}" for p, cls in combo)
        hints.append(
            TestHint(HintCategory.COMBINATION, HintPriority.OPTIONAL, values, f"Combination {labels}")
        )
    return hints


def generate(
    config: HintsConfig,
    function: CompiledFunction,
    coverage: SemanticCoverage,
    state_space: EquivalenceClassEstimate,
) -> FunctionTestHints:
    """Derive prioritized test hints for one function."""
    params = state_space.runtime_parameters
    happy = _representative_values(params)
    hints: list[TestHint] = []

    if coverage.executed_canonical == 0:
        happy_description = "Basic success case; the function never ran under the current tests"
    else:
        happy_description = "Basic success case with representative inputs"
    hints.append(
        TestHint(HintCategory.HAPPY_PATH, HintPriority.CRITICAL, tuple(happy), happy_description)
    )

    for p in params:
        if p.quantity is not Quantity.LINEAR or p.representative is None:
            continue
        value = HintValue(p.name, p.representative.example, "linear: must be consumed exactly once")
        hints.append(
            TestHint(
                HintCategory.LINEAR_RESOURCE,
                HintPriority.CRITICAL,
                _with_value(happy, value),
                f"Verify {p.name} is consumed exactly once on every path",
            )
        )

    hints.extend(_error_hints(function, params, happy))

    for p in params:
        rep = p.representative
        for cls in p.boundary_classes:
            if cls == rep:
                continue
            value = HintValue(p.name, cls.example, f"boundary {p.type_name} ({cls.label})")
            hints.append(
                TestHint(
                    HintCategory.BOUNDARY,
                    HintPriority.NICE,
                    _with_value(happy, value),
                    f"Boundary value {cls.label} for {p.name}",
                )
            )

    if not state_space.clamped:
        hints.extend(_combination_hints(params, happy))

    if config.render_templates:
        hints = [
            replace(h, code_template=render_template(h, function.full_name, config.template, index=i))
            for i, h in enumerate(hints)
        ]

    return FunctionTestHints(function.full_name, tuple(hints))


def minimal_test_suite(hints: FunctionTestHints | Iterable[TestHint]) -> list[TestHint]:
    """Critical hints followed by Important hints, each in original order."""
    items = list(hints.hints if isinstance(hints, FunctionTestHints) else hints)
    return [h for h in items if h.priority is HintPriority.CRITICAL] + [
        h for h in items if h.priority is HintPriority.IMPORTANT
    ]
