"""
Benchmark Runner
================

Executes targets one after another and wraps every outcome in a
``BenchmarkResult``. Targets never run concurrently so one target's
measurement cannot perturb another's.

A target that raises is recorded as ``{"error": ..., "status": "failed"}``;
the batch always yields exactly one result per target, in input order.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Sequence

from connector_hub_bench.observability import get_tracer
from connector_hub_bench.registry import TargetRegistry, get_target_registry
from connector_hub_bench.result import BenchmarkResult
from connector_hub_bench.targets import BenchTarget

logger = logging.getLogger(__name__)

TARGET_SPAN_NAME = "benchmark.target"


class BenchmarkRunner:
    """Sequential executor for benchmark targets."""

    def __init__(self, registry: Optional[TargetRegistry] = None):
        self._registry = registry

    @property
    def registry(self) -> TargetRegistry:
        if self._registry is None:
            self._registry = get_target_registry()
        return self._registry

    async def run(self, targets: Sequence[BenchTarget]) -> list[BenchmarkResult]:
        """Run ``targets`` in order, one result each, regardless of failures."""
        logger.info("Starting benchmark suite with %d targets", len(targets))
        results = [await self.run_target(target) for target in targets]
        failed = sum(1 for r in results if not r.is_success())
        logger.info(
            "Benchmark suite completed: %d results (%d failed)", len(results), failed
        )
        return results

    async def run_all(self) -> list[BenchmarkResult]:
        return await self.run(self.registry.list())

    async def run_by_ids(self, target_ids: Sequence[str]) -> list[BenchmarkResult]:
        """Run only the registered targets named in ``target_ids``, in registry order."""
        selected = self.registry.filter_by_ids(target_ids)
        unknown = set(target_ids) - {t.id for t in selected}
        if unknown:
            logger.warning("Ignoring unknown benchmark targets: %s", ", ".join(sorted(unknown)))
        return await self.run(selected)

    async def run_target(self, target: BenchTarget) -> BenchmarkResult:
        target_id = target.id
        tracer = get_tracer()

        with tracer.start_as_current_span(TARGET_SPAN_NAME) as span:
            span.set_attribute("benchmark.target_id", target_id)
            logger.info("Running benchmark: %s", target_id)
            start = time.monotonic()

            try:
                metrics = await target.run()
            except Exception as e:
                elapsed_ms = (time.monotonic() - start) * 1000
                logger.warning("Benchmark %s failed: %s", target_id, e)
                span.record_exception(e)
                result = BenchmarkResult.failure(target_id, str(e) or type(e).__name__)
            else:
                elapsed_ms = (time.monotonic() - start) * 1000
                logger.info("Benchmark %s completed in %.1fms", target_id, elapsed_ms)
                result = BenchmarkResult.create(target_id, metrics)

            span.set_attribute("benchmark.status", "ok" if result.is_success() else "failed")
            span.set_attribute("benchmark.elapsed_ms", elapsed_ms)

        return result


async def run_all_benchmarks(registry: Optional[TargetRegistry] = None) -> list[BenchmarkResult]:
    """Run every registered target."""
    return await BenchmarkRunner(registry).run_all()


async def run_benchmarks_by_id(
    target_ids: Sequence[str], registry: Optional[TargetRegistry] = None
) -> list[BenchmarkResult]:
    """Run the registered targets named in ``target_ids``."""
    return await BenchmarkRunner(registry).run_by_ids(target_ids)
