"""Config module exports."""

from semcov.config.loader import load_config
from semcov.config.models import (
    ComplexityConfig,
    EstimatorConfig,
    HintsConfig,
    LoggingConfig,
    LogOutputConfig,
    ReportConfig,
    SemcovConfig,
    TestingConfig,
)

__all__ = [
    "load_config",
    "ComplexityConfig",
    "EstimatorConfig",
    "HintsConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ReportConfig",
    "SemcovConfig",
    "TestingConfig",
]
