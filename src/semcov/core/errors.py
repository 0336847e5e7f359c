"""semcov error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Parse (dump, trace, signatures)
- 4xxx: Correlation
- 7xxx: Test execution
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Parse (3xxx)
    PARSE_MALFORMED_BLOCK = 3001
    PARSE_UNTERMINATED_STRING = 3002
    PARSE_UNBALANCED = 3003
    PARSE_RULES_INVALID = 3010

    # Correlation (4xxx)
    CORRELATION_UNMATCHED = 4001
    CORRELATION_AMBIGUOUS = 4002

    # Test (7xxx)
    TEST_TIMEOUT = 7001
    TEST_TRACE_MISSING = 7002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class SemcovError(Exception):
    """Base error with structured context for reports."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(SemcovError):
    """Configuration-related errors. Fatal before any analysis starts."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class ParseError(SemcovError):
    """A single malformed block. Function-scoped, never aborts a file."""

    @classmethod
    def malformed_block(cls, name: str | None, line: int, reason: str) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_MALFORMED_BLOCK,
            message=f"Malformed block {name or '<unknown>'} at line {line}: {reason}",
            details={"name": name, "line": line, "reason": reason},
        )

    @classmethod
    def unterminated_string(cls, offset: int) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_UNTERMINATED_STRING,
            message=f"Unterminated string literal at offset {offset}",
            details={"offset": offset},
        )

    @classmethod
    def unbalanced(cls, offset: int, found: str, expected: str | None) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_UNBALANCED,
            message=f"Unbalanced bracket {found!r} at offset {offset}"
            + (f", expected {expected!r}" if expected else ""),
            details={"offset": offset, "found": found, "expected": expected},
        )

    @classmethod
    def invalid_rules(cls, source: str, reason: str) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_RULES_INVALID,
            message=f"Invalid rule set {source}: {reason}",
            details={"source": source, "reason": reason},
        )


class TestExecutionError(SemcovError):
    """Errors raised while invoking external test processes."""

    __test__ = False

    @classmethod
    def timeout(cls, test_name: str, timeout_sec: float) -> "TestTimeoutError":
        return TestTimeoutError(
            code=ErrorCode.TEST_TIMEOUT,
            message=f"Test {test_name!r} timed out after {timeout_sec} seconds",
            retryable=True,
            details={"test": test_name, "timeout_sec": timeout_sec},
        )

    @classmethod
    def trace_missing(cls, test_name: str, path: str) -> "TestExecutionError":
        return cls(
            code=ErrorCode.TEST_TRACE_MISSING,
            message=f"Test {test_name!r} produced no profiler trace at {path}",
            details={"test": test_name, "path": path},
        )


class TestTimeoutError(TestExecutionError):
    """A single test invocation exceeded the caller-supplied timeout."""

    __test__ = False


class InternalError(SemcovError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
