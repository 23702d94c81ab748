"""Tests for Markdown and console rendering."""

from datetime import datetime, timezone

from connector_hub_bench.report import (
    render_markdown,
    render_run_report,
    render_summary_table,
)
from connector_hub_bench.result import BenchmarkResult

TS = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)

OK = BenchmarkResult.with_timestamp(
    "provider-resolution",
    {"mean_ns": 1500, "p99_ns": 4000, "throughput": 666666.666, "status": "simulated"},
    TS,
)
BRIDGED = BenchmarkResult.with_timestamp("stream-parsing", {"status": "completed"}, TS)
FAILED = BenchmarkResult.failure("cache-operations", "sample set is empty")


class TestMarkdown:
    def test_header_and_totals(self):
        md = render_markdown([OK, FAILED], generated_at=TS)
        assert md.startswith("# Connector Hub Benchmark Results\n")
        assert "Generated: 2024-01-15 10:30:00 UTC" in md
        assert "**Total:** 2 | **Successful:** 1 | **Failed:** 1" in md

    def test_table_rows(self):
        md = render_markdown([OK, BRIDGED], generated_at=TS)
        assert "| provider-resolution | OK | 1500 | 4000 | 666666.67 |" in md
        assert "| stream-parsing | OK | - | - | - |" in md

    def test_details(self):
        md = render_markdown([OK, FAILED], generated_at=TS)
        assert "### provider-resolution" in md
        assert "- **Mean:** 1500 ns (1.50 us)" in md
        assert "- **Source:** simulated" in md
        assert "- **Error:** sample set is empty" in md

    def test_optional_metrics_omitted(self):
        md = render_markdown([BRIDGED], generated_at=TS)
        details = md.split("## Details", 1)[1]
        assert "Mean:" not in details
        assert "Throughput:" not in details

    def test_custom_title(self):
        assert render_markdown([], title="Nightly", generated_at=TS).startswith("# Nightly")

    def test_empty(self):
        md = render_markdown([], generated_at=TS)
        assert "**Total:** 0 | **Successful:** 0 | **Failed:** 0" in md


class TestRunReport:
    def test_blocks(self):
        text = render_run_report([OK, FAILED])
        assert "BENCHMARK RESULTS" in text
        assert "[OK] provider-resolution" in text
        assert "  Mean: 1500 ns (1.50 us)" in text
        assert "  P99:  4000 ns (4.00 us)" in text
        assert "  Throughput: 666666.67 ops/sec" in text
        assert "[FAIL] cache-operations" in text
        assert "  Error: sample set is empty" in text
        assert "Total: 2 | Successful: 1 | Failed: 1" in text

    def test_bridge_result_without_stats(self):
        text = render_run_report([BRIDGED])
        assert "[OK] stream-parsing" in text
        assert "Mean:" not in text


class TestSummaryTable:
    def test_rows(self):
        text = render_summary_table([OK, FAILED])
        assert text.startswith("Last Benchmark Results:")
        assert "Run at: 2024-01-15 10:30:00 UTC" in text
        lines = text.splitlines()
        ok_line = next(line for line in lines if line.startswith("provider-resolution"))
        assert ok_line.split() == ["provider-resolution", "OK", "1.50"]
        fail_line = next(line for line in lines if line.startswith("cache-operations"))
        assert fail_line.split() == ["cache-operations", "FAIL", "-"]

    def test_empty(self):
        text = render_summary_table([])
        assert "Run at:" not in text
