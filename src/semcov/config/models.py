"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (SEMCOV__SECTION__KEY)
3. YAML config file (semcov.yaml or an explicit path)
4. Built-in defaults (this file)

Environment Variable Format:
    SEMCOV__<SECTION>__<KEY>=<VALUE>

Examples:
    SEMCOV__LOGGING__LEVEL=DEBUG
    SEMCOV__ESTIMATOR__RECURSION_DEPTH=2
    SEMCOV__COMPLEXITY__MAX_BRANCHES=20

Every model is frozen: a config value is passed into each analysis call and
never mutated afterwards.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _non_negative(v: int) -> int:
    if v < 0:
        raise ValueError(f"must be >= 0, got {v}")
    return v


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    model_config = ConfigDict(frozen=True)

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        SEMCOV__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    model_config = ConfigDict(frozen=True)

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every classification decision.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class EstimatorConfig(BaseModel):
    """State-space estimation bounds.

    Env vars:
        SEMCOV__ESTIMATOR__EQUIVALENCE_CLASS_LIMIT: Max classes per parameter
        SEMCOV__ESTIMATOR__MAX_TOTAL_STATES: Clamp for the cross-parameter product
        SEMCOV__ESTIMATOR__RECURSION_DEPTH: Unrolling depth for recursive types
        SEMCOV__ESTIMATOR__PRUNE_EARLY_EXITS: Drop classes proven impossible
        SEMCOV__ESTIMATOR__BOUNDARY_ANALYSIS: Add empty/zero/extremal classes
    """

    model_config = ConfigDict(frozen=True)

    equivalence_class_limit: int = Field(
        default=10,
        description="Max equivalence classes per parameter. Must be >= 1.",
    )
    max_total_states: int = Field(
        default=1000,
        description="Product across parameters is clamped here. "
        "TRADEOFF: Higher values allow exhaustive combination hints for larger functions.",
    )
    recursion_depth: int = Field(
        default=3,
        description="Unrolling depth for recursive inductive types (List, Nat, trees).",
    )
    prune_early_exits: bool = Field(
        default=True,
        description="Remove classes whose constructor the case tree proved impossible.",
    )
    boundary_analysis: bool = Field(
        default=True,
        description="Add boundary classes (empty, zero, extremal) for opaque primitives.",
    )

    @field_validator("recursion_depth")
    @classmethod
    def validate_depth(cls, v: int) -> int:
        return _non_negative(v)

    @field_validator("equivalence_class_limit", "max_total_states")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be >= 1, got {v}")
        return v


class ComplexityConfig(BaseModel):
    """Advisory complexity thresholds.

    Env vars:
        SEMCOV__COMPLEXITY__MAX_PARAMS
        SEMCOV__COMPLEXITY__MAX_STATE_SPACE
        SEMCOV__COMPLEXITY__MAX_PATTERN_DEPTH
        SEMCOV__COMPLEXITY__MAX_BRANCHES
        SEMCOV__COMPLEXITY__WARN_LINEAR_OVERLOAD
        SEMCOV__COMPLEXITY__MAX_LINEAR_PARAMS
    """

    model_config = ConfigDict(frozen=True)

    max_params: int = Field(default=4, description="Warn above this many parameters.")
    max_state_space: int = Field(
        default=50,
        description="Warn when the estimated input classes exceed this.",
    )
    max_pattern_depth: int = Field(default=3, description="Warn above this case-split nesting.")
    max_branches: int = Field(default=10, description="Warn above this many case arms.")
    warn_linear_overload: bool = Field(
        default=True,
        description="Enable the linear-parameter overload warning.",
    )
    max_linear_params: int = Field(
        default=2,
        description="Linear-parameter count above which linear_overload is raised.",
    )

    @field_validator(
        "max_params", "max_state_space", "max_pattern_depth", "max_branches", "max_linear_params"
    )
    @classmethod
    def validate_thresholds(cls, v: int) -> int:
        return _non_negative(v)


class HintsConfig(BaseModel):
    """Test hint generation options."""

    model_config = ConfigDict(frozen=True)

    render_templates: bool = Field(
        default=False,
        description="Attach a rendered code template to every hint.",
    )
    template: str | None = Field(
        default=None,
        description="string.Template override. Placeholders: $test_name, $func, $args, "
        "$category, $priority, $description.",
    )


class ReportConfig(BaseModel):
    """Summary/report options."""

    model_config = ConfigDict(frozen=True)

    high_impact_top: int = Field(
        default=20,
        description="Number of high-impact targets listed in project summaries.",
    )
    apply_exclusions: bool = Field(
        default=True,
        description="Leave stdlib and compiler-generated functions out of project totals.",
    )

    @field_validator("high_impact_top")
    @classmethod
    def validate_top(cls, v: int) -> int:
        return _non_negative(v)


class TestingConfig(BaseModel):
    """Per-test attribution runner configuration.

    Env vars:
        SEMCOV__TESTING__TIMEOUT_SEC: Timeout for each external test invocation
    """

    __test__ = False
    model_config = ConfigDict(frozen=True)

    timeout_sec: float = Field(
        default=300.0,
        description="Per-test timeout. A hung test raises TestTimeoutError.",
    )

    @field_validator("timeout_sec")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"must be > 0, got {v}")
        return v


class SemcovConfig(BaseModel):
    """Root configuration for semcov.

    All settings can be configured via:
    1. Environment variables: SEMCOV__SECTION__KEY
    2. A YAML config file
    3. Direct kwargs to load_config()
    """

    model_config = ConfigDict(frozen=True)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    estimator: EstimatorConfig = Field(default_factory=EstimatorConfig)
    complexity: ComplexityConfig = Field(default_factory=ComplexityConfig)
    hints: HintsConfig = Field(default_factory=HintsConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    testing: TestingConfig = Field(default_factory=TestingConfig)
