"""
Result Rendering
================

Human-readable views of result sets: the Markdown summary file and the
console output of the CLI. Well-known metrics (mean, p99, throughput) are
shown only when present.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from connector_hub_bench.result import BenchmarkResult

DEFAULT_REPORT_TITLE = "Connector Hub Benchmark Results"
RULE_WIDTH = 60


def _status(result: BenchmarkResult) -> str:
    return "OK" if result.is_success() else "FAIL"


def _format_ns(ns: int) -> str:
    return f"{ns} ns ({ns / 1000:.2f} us)"


def _counts(results: Sequence[BenchmarkResult]) -> tuple[int, int, int]:
    total = len(results)
    ok = sum(1 for r in results if r.is_success())
    return total, ok, total - ok


def render_markdown(
    results: Sequence[BenchmarkResult],
    title: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Markdown report: header, overview table and one section per result."""
    generated_at = generated_at or datetime.now(timezone.utc)
    total, ok, failed = _counts(results)

    lines = [
        f"# {title or DEFAULT_REPORT_TITLE}",
        "",
        f"Generated: {generated_at:%Y-%m-%d %H:%M:%S} UTC",
        "",
        f"**Total:** {total} | **Successful:** {ok} | **Failed:** {failed}",
        "",
        "| Target | Status | Mean (ns) | P99 (ns) | Throughput (ops/sec) |",
        "|---|---|---:|---:|---:|",
    ]
    for result in results:
        mean = result.mean_ns()
        p99 = result.p99_ns()
        throughput = result.throughput()
        lines.append(
            f"| {result.target_id} | {_status(result)} "
            f"| {mean if mean is not None else '-'} "
            f"| {p99 if p99 is not None else '-'} "
            f"| {f'{throughput:.2f}' if throughput is not None else '-'} |"
        )

    lines.append("")
    lines.append("## Details")

    for result in results:
        lines.append("")
        lines.append(f"### {result.target_id}")
        lines.append("")
        lines.append(f"- **Status:** {_status(result)}")
        status = result.get_metric("status")
        if status is not None:
            lines.append(f"- **Source:** {status}")
        if not result.is_success() and result.get_metric("error"):
            lines.append(f"- **Error:** {result.get_metric('error')}")
        mean = result.mean_ns()
        if mean is not None:
            lines.append(f"- **Mean:** {_format_ns(mean)}")
        p99 = result.p99_ns()
        if p99 is not None:
            lines.append(f"- **P99:** {_format_ns(p99)}")
        throughput = result.throughput()
        if throughput is not None:
            lines.append(f"- **Throughput:** {throughput:.2f} ops/sec")
        lines.append(f"- **Timestamp:** {result.timestamp.isoformat()}")

    lines.append("")
    return "\n".join(lines)


def render_run_report(results: Sequence[BenchmarkResult]) -> str:
    """Console block printed after ``run``."""
    rule = "=" * RULE_WIDTH
    lines = ["", rule, "BENCHMARK RESULTS", rule]

    for result in results:
        lines.append("")
        lines.append(f"[{_status(result)}] {result.target_id}")
        mean = result.mean_ns()
        if mean is not None:
            lines.append(f"  Mean: {_format_ns(mean)}")
        p99 = result.p99_ns()
        if p99 is not None:
            lines.append(f"  P99:  {_format_ns(p99)}")
        throughput = result.throughput()
        if throughput is not None:
            lines.append(f"  Throughput: {throughput:.2f} ops/sec")
        if not result.is_success():
            lines.append(f"  Error: {result.get_metric('error')}")

    total, ok, failed = _counts(results)
    lines.extend(
        ["", rule, f"Total: {total} | Successful: {ok} | Failed: {failed}", rule]
    )
    return "\n".join(lines)


def render_summary_table(results: Sequence[BenchmarkResult]) -> str:
    """Compact table printed by ``summary``."""
    rule = "-" * RULE_WIDTH
    lines = ["Last Benchmark Results:", "=" * RULE_WIDTH]

    if results:
        lines.append(f"Run at: {results[0].timestamp:%Y-%m-%d %H:%M:%S} UTC")

    lines.extend(["", rule, f"{'Target':<30} {'Status':>10} {'Mean (us)':>15}", rule])
    for result in results:
        mean = result.mean_ns()
        mean_us = f"{mean / 1000:.2f}" if mean is not None else "-"
        lines.append(f"{result.target_id:<30} {_status(result):>10} {mean_us:>15}")
    lines.append(rule)
    return "\n".join(lines)
