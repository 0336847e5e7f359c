"""Advisory complexity warnings for a single function.

Each flag is derived independently from the function's case tree, its
parameter list and its state-space estimate. Nothing here changes the
coverage numbers.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from semcov.config.models import ComplexityConfig
from semcov.dumpcases.models import CompiledFunction
from semcov.statespace.linearity import linear_parameters
from semcov.statespace.models import EquivalenceClassEstimate
from semcov.statespace.types import Parameter


@dataclass(frozen=True, slots=True)
class ComplexityWarnings:
    too_many_params: bool = False
    state_space_explosion: bool = False
    too_many_branches: bool = False
    deep_nesting: bool = False
    linear_overload: bool = False
    messages: tuple[str, ...] = field(default_factory=tuple)

    @property
    def any(self) -> bool:
        return bool(self.messages)

    def to_dict(self) -> dict[str, Any]:
        return {
            "too_many_params": self.too_many_params,
            "state_space_explosion": self.state_space_explosion,
            "too_many_branches": self.too_many_branches,
            "deep_nesting": self.deep_nesting,
            "linear_overload": self.linear_overload,
            "messages": list(self.messages),
        }


def score(
    config: ComplexityConfig,
    function: CompiledFunction,
    parameters: Sequence[Parameter],
    estimate: EquivalenceClassEstimate,
) -> ComplexityWarnings:
    """Compute complexity flags for one function."""
    messages: list[str] = []

    param_count = len([p for p in parameters if not p.implicit]) or function.arity
    too_many_params = param_count > config.max_params
    if too_many_params:
        messages.append(
            f"{param_count} parameters (max {config.max_params}); consider grouping them in a record"
        )

    states = estimate.estimated_cases
    state_space_explosion = states > config.max_state_space
    if state_space_explosion:
        messages.append(
            f"~{states} input equivalence classes (max {config.max_state_space}); "
            "exhaustive testing is impractical"
        )

    branches = len(function.cases)
    too_many_branches = branches > config.max_branches
    if too_many_branches:
        messages.append(f"{branches} case branches (max {config.max_branches})")

    depth = function.max_depth
    deep_nesting = depth > config.max_pattern_depth
    if deep_nesting:
        messages.append(
            f"case splits nested {depth} deep (max {config.max_pattern_depth}); "
            "consider helper functions"
        )

    linear_count = len(linear_parameters(parameters))
    linear_overload = config.warn_linear_overload and linear_count > config.max_linear_params
    if linear_overload:
        messages.append(
            f"{linear_count} linear parameters (max {config.max_linear_params}); "
            "resource lifecycles are hard to test together"
        )

    return ComplexityWarnings(
        too_many_params=too_many_params,
        state_space_explosion=state_space_explosion,
        too_many_branches=too_many_branches,
        deep_nesting=deep_nesting,
        linear_overload=linear_overload,
        messages=tuple(messages),
    )
