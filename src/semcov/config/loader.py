"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (SEMCOV__SECTION__KEY)
3. YAML config file (explicit path, else ./semcov.yaml if present)
4. Built-in defaults (lowest priority)

Any validation failure is raised as ConfigError before analysis starts.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from semcov.config.models import (
    ComplexityConfig,
    EstimatorConfig,
    HintsConfig,
    LoggingConfig,
    ReportConfig,
    SemcovConfig,
    TestingConfig,
)
from semcov.core.errors import ConfigError

DEFAULT_CONFIG_NAME = "semcov.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level YAML value must be a mapping")
    return data


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class bound to one YAML payload."""

    class SemcovSettings(BaseSettings):
        """Root config. Env vars: SEMCOV__ESTIMATOR__RECURSION_DEPTH, etc."""

        model_config = SettingsConfigDict(
            env_prefix="SEMCOV__",
            env_nested_delimiter="__",
            case_sensitive=False,
            frozen=True,
        )

        logging: LoggingConfig = LoggingConfig()
        estimator: EstimatorConfig = EstimatorConfig()
        complexity: ComplexityConfig = ComplexityConfig()
        hints: HintsConfig = HintsConfig()
        report: ReportConfig = ReportConfig()
        testing: TestingConfig = TestingConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml file
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return SemcovSettings


def load_config(config_path: Path | None = None, **kwargs: Any) -> SemcovConfig:
    """Load config: defaults < YAML < env vars < kwargs.

    Args:
        config_path: Explicit YAML file. Missing explicit files are an error;
                     when omitted, ./semcov.yaml is used if it exists.
        **kwargs: Override values (highest precedence), keyed by section.

    Returns:
        Fully resolved, frozen configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or invalid/negative thresholds.
    """
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError.file_not_found(str(config_path))
        yaml_config = _load_yaml(config_path)
    else:
        yaml_config = _load_yaml(Path.cwd() / DEFAULT_CONFIG_NAME)

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e

    return SemcovConfig.model_validate(settings.model_dump())
