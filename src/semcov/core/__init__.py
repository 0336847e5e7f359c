"""Core module exports."""

from semcov.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    ParseError,
    SemcovError,
    TestExecutionError,
    TestTimeoutError,
)
from semcov.core.logging import (
    analysis_run,
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "ParseError",
    "SemcovError",
    "TestExecutionError",
    "TestTimeoutError",
    # Logging
    "analysis_run",
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
