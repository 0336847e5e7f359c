"""Equivalence-class estimation over declared parameter types.

Every parameter is mapped to a list of equivalence classes according to
its type kind:

- boolean and finite types: one class per constructor
- recursive types: bounded unrolling, ``base + recursive x previous level``
  per level up to ``recursion_depth``
- opaque types: one representative, plus boundary classes when
  ``boundary_analysis`` is enabled

The per-parameter counts are multiplied and the product is clamped at
``max_total_states``. The result depends only on its inputs.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from semcov.config.models import EstimatorConfig
from semcov.core.logging import get_logger
from semcov.statespace.linearity import classify_quantity
from semcov.statespace.models import (
    EquivalenceClass,
    EquivalenceClassEstimate,
    ParameterEstimate,
    combine,
)
from semcov.statespace.types import Parameter, TypeInfo, TypeKind, TypeRegistry

log = get_logger("statespace.estimator")


def _wrap(example: str) -> str:
    if " " in example and not (example.startswith("(") and example.endswith(")")):
        return f"({example})"
    return example


def _cap(
    classes: list[EquivalenceClass], limit: int
) -> tuple[list[EquivalenceClass], bool]:
    if len(classes) > limit:
        return classes[:limit], True
    return classes, False


def _finite_classes(info: TypeInfo) -> list[EquivalenceClass]:
    return [EquivalenceClass(c.name, c.example, c.name) for c in info.constructors]


def _opaque_classes(info: TypeInfo, boundary_analysis: bool) -> list[EquivalenceClass]:
    classes = [EquivalenceClass("representative", info.representative or f"<{info.name}>")]
    if boundary_analysis:
        classes.extend(
            EquivalenceClass(label, example, boundary=True) for label, example in info.boundaries
        )
    return classes


def _recursive_classes(
    info: TypeInfo, config: EstimatorConfig
) -> tuple[list[EquivalenceClass], bool]:
    limit = config.equivalence_class_limit
    base = [
        EquivalenceClass(c.name, c.example, c.name, boundary=True)
        for c in info.base_constructors
    ]
    steps = info.recursive_constructors

    # Level 0: recursive positions left as a named hole.
    level = base + [
        EquivalenceClass(f"{c.name}/_", c.example.replace("{sub}", info.hole), c.name, size=1)
        for c in steps
    ]
    level, truncated = _cap(level, limit)

    for _ in range(config.recursion_depth):
        following = list(base)
        for ctor in steps:
            for sub in level:
                following.append(
                    EquivalenceClass(
                        label=f"{ctor.name}/{sub.label}",
                        example=ctor.example.replace("{sub}", _wrap(sub.example)),
                        constructor=ctor.name,
                        size=sub.size + 1,
                    )
                )
        following, capped = _cap(following, limit)
        truncated = truncated or capped
        if following == level:
            break
        level = following
    return level, truncated


def estimate_parameter(
    config: EstimatorConfig, parameter: Parameter, registry: TypeRegistry
) -> ParameterEstimate:
    """Equivalence classes for one parameter."""
    info = registry.lookup(parameter.type_expr)
    quantity = classify_quantity(parameter)
    result = ParameterEstimate(
        name=parameter.name,
        index=parameter.index,
        type_expr=parameter.type_expr,
        type_name=info.name,
        quantity=quantity,
        implicit=parameter.implicit,
        representative_constructor=(
            info.representative if info.kind is not TypeKind.OPAQUE else None
        ),
    )
    if not result.contributes:
        return result

    if info.kind is TypeKind.RECURSIVE:
        classes, truncated = _recursive_classes(info, config)
    elif info.kind is TypeKind.OPAQUE:
        classes, truncated = _cap(
            _opaque_classes(info, config.boundary_analysis), config.equivalence_class_limit
        )
    else:
        classes, truncated = _cap(_finite_classes(info), config.equivalence_class_limit)

    return replace(result, classes=tuple(classes), truncated=truncated)


def estimate(
    config: EstimatorConfig,
    parameters: Sequence[Parameter],
    registry: TypeRegistry,
) -> EquivalenceClassEstimate:
    """Estimate the input state space of a function from its parameters."""
    params = [estimate_parameter(config, p, registry) for p in parameters]
    result = combine(params, config.max_total_states)
    if result.clamped:
        log.debug(
            "state_space_clamped",
            raw_states=result.raw_states,
            max_total_states=config.max_total_states,
        )
    return result
