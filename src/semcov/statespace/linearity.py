"""Parameter usage quantities and impossible-path pruning.

Erased parameters carry no runtime state. Linear parameters must be
consumed exactly once and get their own lifecycle hints instead of being
folded into ordinary combinations.

Pruning reads the classifier's output: a constructor is dropped from a
parameter's classes when some case split over that argument marks it
Impossible and no split over the same argument handles it canonically.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from semcov.config.models import EstimatorConfig
from semcov.core.logging import get_logger
from semcov.dumpcases.models import CompiledFunction, CrashReason
from semcov.statespace.models import (
    EquivalenceClassEstimate,
    ParameterEstimate,
    PrunedPath,
    Quantity,
    combine,
)
from semcov.statespace.types import Parameter

log = get_logger("statespace.linearity")


def classify_quantity(parameter: Parameter) -> Quantity:
    if parameter.quantity == "0":
        return Quantity.ERASED
    if parameter.quantity == "1":
        return Quantity.LINEAR
    return Quantity.UNRESTRICTED


def linear_parameters(parameters: Iterable[Parameter]) -> list[Parameter]:
    return [p for p in parameters if classify_quantity(p) is Quantity.LINEAR]


@dataclass(slots=True)
class ImpossibleSet:
    """Constructors of one argument that the case tree ruled out."""

    explicit: set[str] = field(default_factory=set)
    default_alternatives: list[frozenset[str]] = field(default_factory=list)
    canonical: set[str] = field(default_factory=set)

    def excludes(self, constructor: str | None) -> bool:
        if constructor is None or constructor in self.canonical:
            return False
        if constructor in self.explicit:
            return True
        return any(constructor not in alts for alts in self.default_alternatives)


def collect_impossible(function: CompiledFunction) -> dict[int, ImpossibleSet]:
    """Impossible constructors per argument index of one function."""
    sets: dict[int, ImpossibleSet] = {}
    for case in function.cases:
        index = case.param_index
        if index is None:
            continue
        entry = sets.setdefault(index, ImpossibleSet())
        if case.kind.is_canonical:
            if case.pattern != "_":
                entry.canonical.add(case.pattern)
        elif case.kind.reason is CrashReason.IMPOSSIBLE:
            if case.pattern == "_":
                entry.default_alternatives.append(frozenset(case.alternatives))
            else:
                entry.explicit.add(case.pattern)
    return sets


def prune(
    config: EstimatorConfig,
    estimate: EquivalenceClassEstimate,
    function: CompiledFunction,
) -> EquivalenceClassEstimate:
    """Drop classes whose constructor is impossible, then re-multiply.

    Returns the estimate unchanged when prune_early_exits is disabled.
    """
    if not config.prune_early_exits:
        return estimate

    impossible = collect_impossible(function)
    if not impossible:
        return estimate

    pruned: list[PrunedPath] = list(estimate.pruned)
    params: list[ParameterEstimate] = []
    for param in estimate.parameters:
        rule = impossible.get(param.index)
        if rule is None or not param.contributes:
            params.append(param)
            continue
        kept = []
        for cls in param.classes:
            constructor = cls.constructor
            if constructor is not None and rule.excludes(constructor):
                pruned.append(PrunedPath(param.name, param.index, constructor, cls.label))
            else:
                kept.append(cls)
        params.append(replace(param, classes=tuple(kept)))

    if len(pruned) != len(estimate.pruned):
        log.debug(
            "classes_pruned",
            function=function.full_name,
            pruned=len(pruned) - len(estimate.pruned),
        )
    return combine(params, config.max_total_states, pruned)
