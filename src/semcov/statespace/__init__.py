"""Input state-space estimation: signatures, equivalence classes, pruning."""

from semcov.statespace.estimator import estimate, estimate_parameter
from semcov.statespace.linearity import (
    ImpossibleSet,
    classify_quantity,
    collect_impossible,
    linear_parameters,
    prune,
)
from semcov.statespace.models import (
    EquivalenceClass,
    EquivalenceClassEstimate,
    ParameterEstimate,
    PrunedPath,
    Quantity,
    combine,
)
from semcov.statespace.types import (
    BUILTIN_TYPES,
    Constructor,
    Parameter,
    Signature,
    SignatureSet,
    TypeInfo,
    TypeKind,
    TypeRegistry,
    parse_parameters,
    parse_signatures,
    type_head,
)

__all__ = [
    # Types
    "BUILTIN_TYPES",
    "Constructor",
    "Parameter",
    "Signature",
    "SignatureSet",
    "TypeInfo",
    "TypeKind",
    "TypeRegistry",
    "parse_parameters",
    "parse_signatures",
    "type_head",
    # Estimates
    "EquivalenceClass",
    "EquivalenceClassEstimate",
    "ParameterEstimate",
    "PrunedPath",
    "Quantity",
    "combine",
    "estimate",
    "estimate_parameter",
    # Linearity
    "ImpossibleSet",
    "classify_quantity",
    "collect_impossible",
    "linear_parameters",
    "prune",
]
