"""
Sample Statistics
=================

Turns raw nanosecond duration samples into summary records.

Percentiles use a nearest-rank estimator: sort ascending, index at
``floor(count * p)`` clamped to ``count - 1``. No interpolation.

Multi-phase benchmarks summarise each phase independently. The combined
top-level ``mean_ns`` is the unweighted mean of the phase means, not a pooled
mean of all raw samples; result files written by earlier versions of the
harness use the same approximation, so it is kept for comparability.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

from connector_hub_bench.errors import SimulationInvariantViolation

NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class SampleStats:
    """Summary of one sample set. All durations are integer nanoseconds."""

    count: int
    mean_ns: int
    p50_ns: int
    p95_ns: int
    p99_ns: int
    min_ns: int
    max_ns: int
    throughput: float
    """Operations per second derived from ``mean_ns``."""

    def to_metrics(self) -> dict[str, Any]:
        """Full metrics map for a single-phase benchmark."""
        return {
            "mean_ns": self.mean_ns,
            "median_ns": self.p50_ns,
            "p50_ns": self.p50_ns,
            "p95_ns": self.p95_ns,
            "p99_ns": self.p99_ns,
            "min_ns": self.min_ns,
            "max_ns": self.max_ns,
            "throughput": self.throughput,
        }

    def to_phase_metrics(self, include_throughput: bool = True) -> dict[str, Any]:
        """Condensed metrics map used for one phase of a multi-phase benchmark."""
        phase: dict[str, Any] = {
            "mean_ns": self.mean_ns,
            "p99_ns": self.p99_ns,
            "min_ns": self.min_ns,
            "max_ns": self.max_ns,
        }
        if include_throughput:
            phase["throughput"] = self.throughput
        return phase


def percentile_index(count: int, fraction: float) -> int:
    """Index of the nearest-rank percentile in a sorted set of ``count`` samples."""
    if count <= 0:
        raise SimulationInvariantViolation("cannot take a percentile of an empty sample set")
    if not 0.0 <= fraction <= 1.0:
        raise SimulationInvariantViolation(
            f"percentile fraction must be within [0, 1], got {fraction}"
        )
    return min(int(count * fraction), count - 1)


def percentile(sorted_samples: list[int], fraction: float) -> int:
    """Nearest-rank percentile of an already sorted sample set."""
    return sorted_samples[percentile_index(len(sorted_samples), fraction)]


def throughput_from_mean(mean_ns: float) -> float:
    """Operations per second; a zero mean is floored to 1 ns."""
    return NANOS_PER_SECOND / max(mean_ns, 1)


def summarize(samples: list[int]) -> SampleStats:
    """
    Summarise a sample set.

    The list is sorted in place; callers must not rely on insertion order
    afterwards.

    Raises:
        SimulationInvariantViolation: If ``samples`` is empty.
    """
    if not samples:
        raise SimulationInvariantViolation("sample set is empty")

    samples.sort()
    count = len(samples)
    # Python ints do not overflow; floor division keeps the integer-ns format.
    mean_ns = sum(samples) // count

    return SampleStats(
        count=count,
        mean_ns=mean_ns,
        p50_ns=percentile(samples, 0.50),
        p95_ns=percentile(samples, 0.95),
        p99_ns=percentile(samples, 0.99),
        min_ns=samples[0],
        max_ns=samples[-1],
        throughput=throughput_from_mean(mean_ns),
    )


def combine_phase_means(*phase_means: int) -> int:
    """Unweighted integer mean of per-phase means."""
    if not phase_means:
        raise SimulationInvariantViolation("no phase means to combine")
    return sum(phase_means) // len(phase_means)


def collect_samples(
    operation: Callable[[int], Any],
    iterations: int,
    warmup_iterations: int = 0,
) -> list[int]:
    """
    Time ``operation(i)`` once per iteration.

    A warm-up loop of ``warmup_iterations`` calls runs first and its timings
    are discarded. The return value of ``operation`` is kept in a local so
    the call cannot be skipped.

    Returns:
        One duration in nanoseconds per timed iteration, in execution order.
    """
    clock = time.perf_counter_ns
    sink = None

    for i in range(warmup_iterations):
        sink = operation(i)

    samples: list[int] = []
    append = samples.append
    for i in range(iterations):
        start = clock()
        sink = operation(i)
        append(clock() - start)

    del sink
    return samples
