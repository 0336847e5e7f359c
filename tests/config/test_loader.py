"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- load_config() precedence: kwargs > env > YAML > defaults
- error wrapping into ConfigError
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from semcov.config.loader import _load_yaml, load_config
from semcov.config.models import EstimatorConfig
from semcov.core.errors import ConfigError, ErrorCode


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run each test from an empty directory with no SEMCOV__ variables."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.upper().startswith("SEMCOV__"):
            monkeypatch.delenv(key)


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("estimator:\n  recursion_depth: 1\n")

        assert _load_yaml(yaml_file) == {"estimator": {"recursion_depth": 1}}

    def test_returns_empty_for_yaml_null(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "null.yaml"
        yaml_file.write_text("null\n")

        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("estimator:\n  recursion_depth:\n    - invalid: [unclosed")

        with pytest.raises(ConfigError):
            _load_yaml(yaml_file)

    def test_raises_config_error_for_non_mapping(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code is ErrorCode.CONFIG_PARSE_ERROR


class TestLoadConfig:
    def test_defaults_without_any_source(self) -> None:
        config = load_config()

        assert config.estimator == EstimatorConfig()

    def test_reads_default_file_in_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "semcov.yaml").write_text("complexity:\n  max_branches: 25\n")

        config = load_config()

        assert config.complexity.max_branches == 25

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("estimator:\n  max_total_states: 64\n")

        config = load_config(path)

        assert config.estimator.max_total_states == 64
        assert config.estimator.recursion_depth == 3

    def test_missing_explicit_path_is_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "absent.yaml")

        assert exc_info.value.code is ErrorCode.CONFIG_FILE_NOT_FOUND

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "semcov.yaml"
        path.write_text("estimator:\n  recursion_depth: 1\n  max_total_states: 64\n")
        monkeypatch.setenv("SEMCOV__ESTIMATOR__RECURSION_DEPTH", "2")

        config = load_config(path)

        assert config.estimator.recursion_depth == 2
        assert config.estimator.max_total_states == 64

    def test_kwargs_override_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SEMCOV__COMPLEXITY__MAX_PARAMS", "6")

        config = load_config(complexity={"max_params": 8})

        assert config.complexity.max_params == 8

    def test_negative_threshold_raises_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "semcov.yaml"
        path.write_text("complexity:\n  max_branches: -3\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)

        assert exc_info.value.code is ErrorCode.CONFIG_INVALID_VALUE
        assert exc_info.value.details["field"] == "complexity.max_branches"
