"""
Benchmark Result Model
======================

``BenchmarkResult`` pairs a target id with its open-schema metrics record and
the UTC time the target ran.

Success is a convention on the metrics record: a result failed if and only
if ``metrics["status"] == "failed"``. Well-known keys (``mean_ns``, ``p99_ns``,
``throughput``) have accessors that return ``None`` when the key is absent or
not numeric.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

FAILED_STATUS = "failed"


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


class BenchmarkResult(BaseModel):
    """
    Result of one target execution.

    Fields cannot be reassigned once created. The immutability is shallow:
    ``metrics`` is a plain dict owned by the result (validation copies the
    caller's mapping), and callers must not mutate it.
    """

    model_config = ConfigDict(frozen=True)

    target_id: str = Field(min_length=1)
    metrics: dict[str, Any]
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @classmethod
    def create(cls, target_id: str, metrics: dict[str, Any]) -> "BenchmarkResult":
        """Create a result stamped with the current UTC time."""
        return cls(target_id=target_id, metrics=metrics, timestamp=datetime.now(timezone.utc))

    @classmethod
    def with_timestamp(
        cls, target_id: str, metrics: dict[str, Any], timestamp: datetime
    ) -> "BenchmarkResult":
        """Create a result with an explicit timestamp."""
        return cls(target_id=target_id, metrics=metrics, timestamp=timestamp)

    @classmethod
    def failure(cls, target_id: str, message: str) -> "BenchmarkResult":
        """Create a failed result carrying ``message``."""
        return cls.create(target_id, {"error": message, "status": FAILED_STATUS})

    def is_success(self) -> bool:
        return self.metrics.get("status") != FAILED_STATUS

    def get_metric(self, key: str) -> Any:
        return self.metrics.get(key)

    def mean_ns(self) -> Optional[int]:
        return _as_int(self.metrics.get("mean_ns"))

    def p99_ns(self) -> Optional[int]:
        return _as_int(self.metrics.get("p99_ns"))

    def throughput(self) -> Optional[float]:
        return _as_float(self.metrics.get("throughput"))

    def __str__(self) -> str:
        status = "OK" if self.is_success() else "FAIL"
        return f"[{status}] {self.target_id} @ {self.timestamp:%Y-%m-%d %H:%M:%S} UTC"
