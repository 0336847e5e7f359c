"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from semcov.config.models import (
    ComplexityConfig,
    EstimatorConfig,
    HintsConfig,
    LogOutputConfig,
    ReportConfig,
    SemcovConfig,
    TestingConfig,
)


class TestDefaults:
    def test_estimator_defaults(self) -> None:
        config = EstimatorConfig()

        assert config.equivalence_class_limit == 10
        assert config.max_total_states == 1000
        assert config.recursion_depth == 3
        assert config.prune_early_exits is True
        assert config.boundary_analysis is True

    def test_complexity_defaults(self) -> None:
        config = ComplexityConfig()

        assert config.max_params == 4
        assert config.max_state_space == 50
        assert config.max_pattern_depth == 3
        assert config.max_branches == 10
        assert config.warn_linear_overload is True
        assert config.max_linear_params == 2

    def test_other_defaults(self) -> None:
        assert HintsConfig().render_templates is False
        assert ReportConfig().high_impact_top == 20
        assert TestingConfig().timeout_sec == 300.0

    def test_root_contains_all_sections(self) -> None:
        config = SemcovConfig()

        assert config.estimator == EstimatorConfig()
        assert config.complexity == ComplexityConfig()


class TestValidation:
    @pytest.mark.parametrize("field", ["equivalence_class_limit", "max_total_states"])
    def test_estimator_limits_must_be_positive(self, field: str) -> None:
        with pytest.raises(ValidationError):
            EstimatorConfig(**{field: 0})

    def test_recursion_depth_zero_allowed(self) -> None:
        assert EstimatorConfig(recursion_depth=0).recursion_depth == 0

    def test_negative_recursion_depth_rejected(self) -> None:
        with pytest.raises(ValidationError):
            EstimatorConfig(recursion_depth=-1)

    @pytest.mark.parametrize(
        "field",
        ["max_params", "max_state_space", "max_pattern_depth", "max_branches", "max_linear_params"],
    )
    def test_negative_complexity_thresholds_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError):
            ComplexityConfig(**{field: -1})

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            TestingConfig(timeout_sec=0)

    def test_relative_log_destination_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/semcov.log")

    def test_models_are_frozen(self) -> None:
        config = EstimatorConfig()

        with pytest.raises(ValidationError):
            config.recursion_depth = 5  # type: ignore[misc]
