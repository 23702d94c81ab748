"""
Benchmark Harness Errors
========================

Exception hierarchy shared across the harness.

Bridge failures have no exception class: an unavailable external benchmark
is an expected outcome and is returned as a value (see ``bridge.Unavailable``).
"""

from __future__ import annotations


class BenchmarkError(Exception):
    """Base class for all harness errors."""


class SimulationInvariantViolation(BenchmarkError, ValueError):
    """A simulated run broke an internal invariant (e.g. an empty sample set).

    This is a programming-error class failure. The runner captures it and
    records a failed result for the offending target.
    """


class ResultStoreError(BenchmarkError):
    """Result files or directories could not be created, written or read."""


class ResultDeserializationError(ResultStoreError):
    """A result file does not match the result schema."""


class ConfigError(BenchmarkError):
    """An explicitly requested configuration file is missing or malformed."""
