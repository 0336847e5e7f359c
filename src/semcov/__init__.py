"""Semantic case-tree coverage for compiled dependently-typed programs."""

__version__ = "0.1.0"
