"""
Result Store
============

Persists result sets under a base directory:

    <base>/benchmarks/output/summary.md
    <base>/benchmarks/output/raw/results-<YYYYMMDD_HHMMSS>.json
    <base>/benchmarks/output/raw/results-latest.json

History files are never deleted; ``results-latest.json`` is overwritten on
every save. Writes are not transactional and not locked: the harness is
expected to be the only writer.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from connector_hub_bench.errors import ResultDeserializationError, ResultStoreError
from connector_hub_bench.report import DEFAULT_REPORT_TITLE, render_markdown
from connector_hub_bench.result import BenchmarkResult

logger = logging.getLogger(__name__)

OUTPUT_DIR = Path("benchmarks") / "output"
RAW_OUTPUT_DIR = OUTPUT_DIR / "raw"
SUMMARY_FILE = "summary.md"
LATEST_FILE = "results-latest.json"
HISTORY_PREFIX = "results-"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

_RESULTS_ADAPTER = TypeAdapter(list[BenchmarkResult])


def output_dir(base: Path) -> Path:
    return Path(base) / OUTPUT_DIR


def raw_dir(base: Path) -> Path:
    return Path(base) / RAW_OUTPUT_DIR


def latest_path(base: Path) -> Path:
    return raw_dir(base) / LATEST_FILE


def history_file_name(when: datetime) -> str:
    return f"{HISTORY_PREFIX}{when.astimezone(timezone.utc):{TIMESTAMP_FORMAT}}.json"


def ensure_output_layout(base: Path) -> Path:
    """
    Create the output and raw-history directories if missing.

    Returns:
        The output directory.

    Raises:
        ResultStoreError: If a directory cannot be created.
    """
    out = output_dir(base)
    raw = raw_dir(base)
    try:
        out.mkdir(parents=True, exist_ok=True)
        raw.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ResultStoreError(f"Failed to create output directory {out}: {e}") from e

    logger.debug("Output directories ensured at %s", out)
    return out


def _write_text(path: Path, text: str) -> None:
    try:
        Path(path).write_text(text, encoding="utf-8")
    except OSError as e:
        raise ResultStoreError(f"Failed to write {path}: {e}") from e


def write_json(results: Sequence[BenchmarkResult], path: Path) -> None:
    """Write ``results`` as a pretty-printed JSON array."""
    payload = [r.model_dump(mode="json") for r in results]
    _write_text(path, json.dumps(payload, indent=2) + "\n")
    logger.info("Wrote %d results to %s", len(results), path)


def write_summary(
    results: Sequence[BenchmarkResult],
    path: Path,
    title: Optional[str] = None,
) -> None:
    """Write the Markdown summary report."""
    _write_text(path, render_markdown(results, title))
    logger.info("Wrote summary to %s", path)


def read_json(path: Path) -> list[BenchmarkResult]:
    """
    Read a result file written by ``write_json``.

    Raises:
        ResultStoreError: If the file cannot be read.
        ResultDeserializationError: If its content does not match the result schema.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ResultStoreError(f"Failed to read results from {path}: {e}") from e

    try:
        results = _RESULTS_ADAPTER.validate_json(data)
    except (ValidationError, UnicodeDecodeError) as e:
        raise ResultDeserializationError(
            f"Failed to deserialize benchmark results from {path}: {e}"
        ) from e

    logger.debug("Read %d results from %s", len(results), path)
    return results


def save(
    results: Sequence[BenchmarkResult],
    base: Path,
    title: Optional[str] = DEFAULT_REPORT_TITLE,
    now: Optional[datetime] = None,
) -> dict[str, Path]:
    """
    Write the summary, a timestamped history file and the latest pointer.

    Returns:
        Paths written, keyed by ``summary``, ``history`` and ``latest``.
    """
    out = ensure_output_layout(base)
    now = now or datetime.now(timezone.utc)

    paths = {
        "summary": out / SUMMARY_FILE,
        "history": raw_dir(base) / history_file_name(now),
        "latest": latest_path(base),
    }
    write_summary(results, paths["summary"], title)
    write_json(results, paths["history"])
    write_json(results, paths["latest"])

    logger.info("Saved %d benchmark results to %s", len(results), out)
    return paths


def read_latest(base: Path) -> Optional[list[BenchmarkResult]]:
    """Most recently saved result set, or None if nothing has been saved."""
    path = latest_path(base)
    if not path.exists():
        return None
    return read_json(path)


def list_history(base: Path) -> list[Path]:
    """
    Timestamped history files, oldest first.

    The latest pointer is not a history file and is excluded. A missing
    directory yields an empty list.
    """
    raw = raw_dir(base)
    if not raw.is_dir():
        return []
    return sorted(
        p
        for p in raw.glob(f"{HISTORY_PREFIX}*.json")
        if p.is_file() and p.name != LATEST_FILE
    )
