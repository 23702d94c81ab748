"""
Benchmark Targets
=================

A target is a named unit of benchmarking work with a single async ``run``.

Per invocation of ``run``:

    Start -> TryBridge -> Delegated ---------------------------> Done
                       -> Unavailable -> RunSimulated ----------> Done

There are no retries: one bridge attempt, then at most one simulated run.
A simulated run that breaks an invariant (e.g. an empty sample set) raises
``SimulationInvariantViolation``; the runner turns that into a failed result.

Targets keep no state between runs other than their fixed configuration;
sample sets, caches and metrics maps are created fresh inside each call.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from connector_hub_bench import workloads
from connector_hub_bench.bridge import BridgeCapability, Delegated
from connector_hub_bench.stats import (
    collect_samples,
    combine_phase_means,
    summarize,
    throughput_from_mean,
)

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 1000
DEFAULT_WARMUP_ITERATIONS = 100

SIMULATED_STATUS = "simulated"


@dataclass(frozen=True)
class TargetConfig:
    """Iteration counts shared by every run of a target."""

    iterations: int = DEFAULT_ITERATIONS
    warmup_iterations: int = DEFAULT_WARMUP_ITERATIONS

    def __post_init__(self) -> None:
        if self.iterations <= 0:
            raise ValueError(f"iterations must be > 0, got {self.iterations}")
        if self.warmup_iterations < 0:
            raise ValueError(
                f"warmup_iterations must be >= 0, got {self.warmup_iterations}"
            )


class BenchTarget(ABC):
    """
    Abstract base class for benchmark targets.

    Subclasses define ``target_id``, ``bridge_subcommand`` and
    ``run_simulated``. ``run`` prefers the bridge and falls back to the
    simulation when the bridge reports it is unavailable.
    """

    target_id: str = ""
    bridge_subcommand: str = ""

    def __init__(
        self,
        config: Optional[TargetConfig] = None,
        bridge: Optional[BridgeCapability] = None,
    ):
        self.config = config or TargetConfig()
        self.bridge = bridge

    @property
    def id(self) -> str:
        return self.target_id

    async def run(self) -> dict[str, Any]:
        """Execute the benchmark and return its metrics record."""
        if self.bridge is None:
            return self.run_simulated()

        outcome = await self.bridge.try_delegate(self.bridge_subcommand)
        if isinstance(outcome, Delegated):
            return outcome.metrics

        logger.info(
            "External benchmark unavailable for %s: %s, running simulated benchmark",
            self.target_id,
            outcome.reason,
        )
        metrics = self.run_simulated()
        metrics["bridge_unavailable_reason"] = outcome.reason
        if outcome.elapsed_ns:
            metrics["bridge_overhead_ns"] = outcome.elapsed_ns
        return metrics

    @abstractmethod
    def run_simulated(self) -> dict[str, Any]:
        """Run the in-process approximation and return its metrics record."""
        pass

    def _samples(self, operation) -> list[int]:
        return collect_samples(
            operation,
            self.config.iterations,
            self.config.warmup_iterations,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.target_id!r}, config={self.config!r})"


class ProviderResolutionBenchmark(BenchTarget):
    """Provider selection and resolution."""

    target_id = "provider-resolution"
    bridge_subcommand = "bench:hub"

    def run_simulated(self) -> dict[str, Any]:
        stats = summarize(self._samples(lambda _: workloads.resolve_provider()))
        return {
            "iterations": self.config.iterations,
            "warmup_iterations": self.config.warmup_iterations,
            **stats.to_metrics(),
            "status": SIMULATED_STATUS,
        }


class RequestTransformationBenchmark(BenchTarget):
    """Unified <-> provider request/response transformation."""

    target_id = "request-transformation"
    bridge_subcommand = "bench:provider"

    def run_simulated(self) -> dict[str, Any]:
        request = workloads.SAMPLE_REQUEST
        response = workloads.SAMPLE_RESPONSE

        req = summarize(self._samples(lambda _: workloads.transform_request(request)))
        resp = summarize(self._samples(lambda _: workloads.transform_response(response)))

        mean_ns = combine_phase_means(req.mean_ns, resp.mean_ns)
        return {
            "iterations": self.config.iterations,
            "request_transform": req.to_phase_metrics(),
            "response_transform": resp.to_phase_metrics(),
            "mean_ns": mean_ns,
            "p99_ns": combine_phase_means(req.p99_ns, resp.p99_ns),
            "throughput": throughput_from_mean(mean_ns),
            "status": SIMULATED_STATUS,
        }


class MiddlewarePipelineBenchmark(BenchTarget):
    """Single middleware cost versus a composed pipeline."""

    target_id = "middleware-pipeline"
    bridge_subcommand = "bench:middleware"

    pipeline_length = workloads.DEFAULT_PIPELINE_LENGTH

    def run_simulated(self) -> dict[str, Any]:
        length = self.pipeline_length

        single = summarize(self._samples(lambda _: workloads.run_single_middleware()))
        pipeline = summarize(self._samples(lambda _: workloads.run_pipeline(length)))

        pipeline_metrics = pipeline.to_phase_metrics(include_throughput=False)
        pipeline_metrics["overhead_per_middleware_ns"] = workloads.overhead_per_middleware(
            pipeline.mean_ns, single.mean_ns, length
        )
        return {
            "iterations": self.config.iterations,
            "single_middleware": single.to_phase_metrics(include_throughput=False),
            f"pipeline_{length}_middlewares": pipeline_metrics,
            "mean_ns": pipeline.mean_ns,
            "p99_ns": pipeline.p99_ns,
            "throughput": pipeline.throughput,
            "status": SIMULATED_STATUS,
        }


class CacheOperationsBenchmark(BenchTarget):
    """Cache key generation and GET/SET on hit and miss paths."""

    target_id = "cache-operations"
    bridge_subcommand = "bench:cache"

    def run_simulated(self) -> dict[str, Any]:
        iterations = self.config.iterations
        cache = workloads.InMemoryCache(max_size=max(10_000, 2 * iterations))

        # Warm the map and hashing paths, then start empty.
        for i in range(self.config.warmup_iterations):
            key = workloads.generate_cache_key(i)
            cache.set(key, {"data": i})
            cache.get(key)
        cache.clear()

        keygen = collect_samples(workloads.generate_cache_key, iterations)

        keys = [workloads.generate_cache_key(i) for i in range(iterations)]
        values = [{"request": i, "response": "cached"} for i in range(iterations)]
        missing = [workloads.missing_cache_key(i) for i in range(iterations)]

        set_samples = collect_samples(lambda i: cache.set(keys[i], values[i]), iterations)
        hit_samples = collect_samples(lambda i: cache.get(keys[i]), iterations)
        miss_samples = collect_samples(lambda i: cache.get(missing[i]), iterations)

        keygen_stats = summarize(keygen)
        set_stats = summarize(set_samples)
        hit_stats = summarize(hit_samples)
        miss_stats = summarize(miss_samples)

        key_generation = keygen_stats.to_phase_metrics(include_throughput=False)
        return {
            "iterations": iterations,
            "key_generation": key_generation,
            "set_operation": _mean_p99_throughput(set_stats),
            "get_hit": _mean_p99_throughput(hit_stats),
            "get_miss": _mean_p99_throughput(miss_stats),
            "cache_hits": cache.hits,
            "cache_misses": cache.misses,
            # get_miss stays out of the combined mean, as in earlier result files.
            "mean_ns": combine_phase_means(
                keygen_stats.mean_ns, set_stats.mean_ns, hit_stats.mean_ns
            ),
            "throughput": hit_stats.throughput,
            "status": SIMULATED_STATUS,
        }


class StreamParsingBenchmark(BenchTarget):
    """SSE chunk parsing and stream aggregation."""

    target_id = "stream-parsing"
    bridge_subcommand = "bench:provider"

    def run_simulated(self) -> dict[str, Any]:
        chunks = workloads.SAMPLE_CHUNKS
        chunk_count = len(chunks)

        def parse_all(_):
            return [workloads.parse_sse_chunk(chunk) for chunk in chunks]

        parse = summarize(self._samples(parse_all))
        aggregate = summarize(self._samples(lambda _: workloads.aggregate_chunks(chunks)))

        chunk_parsing = parse.to_phase_metrics(include_throughput=False)
        chunk_parsing["per_chunk_ns"] = parse.mean_ns // chunk_count
        return {
            "iterations": self.config.iterations,
            "chunks_per_stream": chunk_count,
            "chunk_parsing": chunk_parsing,
            "stream_aggregation": aggregate.to_phase_metrics(include_throughput=False),
            "mean_ns": parse.mean_ns,
            "p99_ns": parse.p99_ns,
            "throughput": parse.throughput * chunk_count,
            "status": SIMULATED_STATUS,
        }


def _mean_p99_throughput(stats) -> dict[str, Any]:
    return {"mean_ns": stats.mean_ns, "p99_ns": stats.p99_ns, "throughput": stats.throughput}
