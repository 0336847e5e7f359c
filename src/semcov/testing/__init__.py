"""Sequential per-test runs and runtime attribution."""

from semcov.testing.attribution import (
    TestAttribution,
    TestCommand,
    TestRun,
    attribute,
    functions_to_tests,
    run_sequentially,
)

__all__ = [
    "TestAttribution",
    "TestCommand",
    "TestRun",
    "attribute",
    "functions_to_tests",
    "run_sequentially",
]
