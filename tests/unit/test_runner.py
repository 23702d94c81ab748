"""Tests for sequential benchmark execution and failure capture."""

import logging

import pytest

from connector_hub_bench.errors import SimulationInvariantViolation
from connector_hub_bench.registry import TargetRegistry
from connector_hub_bench.runner import (
    TARGET_SPAN_NAME,
    BenchmarkRunner,
    run_all_benchmarks,
    run_benchmarks_by_id,
)
from connector_hub_bench.targets import BenchTarget


class FixedTarget(BenchTarget):
    def __init__(self, target_id, metrics=None, log=None):
        super().__init__()
        self.target_id = target_id
        self._metrics = metrics or {"mean_ns": 10, "status": "simulated"}
        self._log = log

    def run_simulated(self):
        if self._log is not None:
            self._log.append(self.target_id)
        return dict(self._metrics)


class RaisingTarget(BenchTarget):
    def __init__(self, target_id, exc):
        super().__init__()
        self.target_id = target_id
        self._exc = exc

    def run_simulated(self):
        raise self._exc


class TestBenchmarkRunner:
    @pytest.mark.asyncio
    async def test_one_result_per_target_in_order(self):
        log = []
        targets = [FixedTarget(i, log=log) for i in ("a", "b", "c")]

        results = await BenchmarkRunner().run(targets)

        assert [r.target_id for r in results] == ["a", "b", "c"]
        assert log == ["a", "b", "c"]
        assert all(r.is_success() for r in results)

    @pytest.mark.asyncio
    async def test_empty_target_list(self):
        assert await BenchmarkRunner().run([]) == []

    @pytest.mark.asyncio
    async def test_failure_is_captured_and_run_continues(self):
        targets = [
            FixedTarget("first"),
            RaisingTarget("broken", SimulationInvariantViolation("sample set is empty")),
            FixedTarget("last"),
        ]

        results = await BenchmarkRunner().run(targets)

        assert len(results) == 3
        assert results[0].is_success()
        assert results[2].is_success()
        failed = results[1]
        assert failed.target_id == "broken"
        assert failed.metrics == {"error": "sample set is empty", "status": "failed"}

    @pytest.mark.asyncio
    async def test_exception_without_message_uses_type_name(self):
        results = await BenchmarkRunner().run([RaisingTarget("x", RuntimeError())])
        assert results[0].metrics["error"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_timestamps_are_non_decreasing(self):
        results = await BenchmarkRunner().run([FixedTarget("a"), FixedTarget("b")])
        assert results[0].timestamp <= results[1].timestamp

    @pytest.mark.asyncio
    async def test_run_all_uses_registry(self):
        registry = TargetRegistry([FixedTarget("a"), FixedTarget("b")])
        results = await BenchmarkRunner(registry).run_all()
        assert [r.target_id for r in results] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_run_by_ids_keeps_registry_order(self, caplog):
        registry = TargetRegistry([FixedTarget("a"), FixedTarget("b"), FixedTarget("c")])

        with caplog.at_level(logging.WARNING, logger="connector_hub_bench.runner"):
            results = await BenchmarkRunner(registry).run_by_ids(["c", "nope", "a"])

        assert [r.target_id for r in results] == ["a", "c"]
        assert "nope" in caplog.text

    @pytest.mark.asyncio
    async def test_run_by_ids_with_no_match(self):
        registry = TargetRegistry([FixedTarget("a")])
        assert await BenchmarkRunner(registry).run_by_ids(["zzz"]) == []


class TestTracing:
    @pytest.mark.asyncio
    async def test_span_per_target(self, shared_span_exporter):
        await BenchmarkRunner().run(
            [FixedTarget("ok"), RaisingTarget("bad", ValueError("nope"))]
        )

        spans = shared_span_exporter.get_finished_spans()
        target_spans = [s for s in spans if s.name == TARGET_SPAN_NAME]
        assert len(target_spans) == 2

        ok_span, bad_span = target_spans
        assert ok_span.attributes["benchmark.target_id"] == "ok"
        assert ok_span.attributes["benchmark.status"] == "ok"
        assert ok_span.attributes["benchmark.elapsed_ms"] >= 0
        assert bad_span.attributes["benchmark.status"] == "failed"
        assert any(e.name == "exception" for e in bad_span.events)


@pytest.mark.asyncio
async def test_module_level_helpers():
    registry = TargetRegistry([FixedTarget("a"), FixedTarget("b")])

    all_results = await run_all_benchmarks(registry)
    some_results = await run_benchmarks_by_id(["b"], registry)

    assert [r.target_id for r in all_results] == ["a", "b"]
    assert [r.target_id for r in some_results] == ["b"]
