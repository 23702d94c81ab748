"""
Target Registry
===============

Ordered, fixed list of benchmark targets. Registration order is the
execution and listing order.

Usage:
    from connector_hub_bench.registry import get_target_registry

    registry = get_target_registry()
    for target in registry.filter_by_prefix("cache"):
        ...
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Iterable, Optional, Sequence

from connector_hub_bench.bridge import BridgeCapability, BridgeClient
from connector_hub_bench.config import BenchSettings, load_settings
from connector_hub_bench.targets import (
    BenchTarget,
    CacheOperationsBenchmark,
    MiddlewarePipelineBenchmark,
    ProviderResolutionBenchmark,
    RequestTransformationBenchmark,
    StreamParsingBenchmark,
    TargetConfig,
)

logger = logging.getLogger(__name__)

TARGET_CLASSES: tuple[type[BenchTarget], ...] = (
    ProviderResolutionBenchmark,
    RequestTransformationBenchmark,
    MiddlewarePipelineBenchmark,
    CacheOperationsBenchmark,
    StreamParsingBenchmark,
)


class TargetRegistry:
    """Registry of benchmark targets keyed by id, preserving insertion order."""

    def __init__(self, targets: Optional[Iterable[BenchTarget]] = None):
        self._targets: dict[str, BenchTarget] = {}
        self._lock = threading.RLock()
        for target in targets or ():
            self.register(target)

    def register(self, target: BenchTarget) -> None:
        """
        Add a target.

        Raises:
            ValueError: If the id is empty or already registered.
        """
        target_id = target.id
        if not target_id:
            raise ValueError(f"{target!r} has an empty target id")
        with self._lock:
            if target_id in self._targets:
                raise ValueError(f"Duplicate benchmark target id: {target_id}")
            self._targets[target_id] = target
        logger.debug("Registered benchmark target: %s", target_id)

    def list(self) -> list[BenchTarget]:
        with self._lock:
            return list(self._targets.values())

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._targets)

    def get(self, target_id: str) -> Optional[BenchTarget]:
        with self._lock:
            return self._targets.get(target_id)

    def filter_by_prefix(self, prefix: str) -> list[BenchTarget]:
        return [t for t in self.list() if t.id.startswith(prefix)]

    def filter_by_ids(self, target_ids: Sequence[str]) -> list[BenchTarget]:
        """Targets whose id is in ``target_ids``, in registry order. Unknown ids are ignored."""
        wanted = set(target_ids)
        return [t for t in self.list() if t.id in wanted]

    def __len__(self) -> int:
        return len(self._targets)

    def __contains__(self, target_id: str) -> bool:
        return target_id in self._targets


def build_bridge(settings: BenchSettings) -> Optional[BridgeCapability]:
    """Bridge client described by ``settings``, or None when the bridge is disabled."""
    if not settings.bridge_enabled:
        return None
    return BridgeClient(
        hub_root=Path(settings.hub_root),
        command=settings.bridge_command,
        timeout_s=settings.bridge_timeout_s,
    )


def default_targets(settings: Optional[BenchSettings] = None) -> list[BenchTarget]:
    """One instance of every built-in target, sharing a single bridge client."""
    settings = settings or load_settings()
    config = TargetConfig(
        iterations=settings.iterations,
        warmup_iterations=settings.warmup_iterations,
    )
    bridge = build_bridge(settings)
    return [cls(config=config, bridge=bridge) for cls in TARGET_CLASSES]


# Singleton instance
_registry: Optional[TargetRegistry] = None
_registry_lock = threading.Lock()


def get_target_registry(settings: Optional[BenchSettings] = None) -> TargetRegistry:
    """Get the global target registry, building it from ``settings`` on first use."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = TargetRegistry(default_targets(settings))
        return _registry


def reset_target_registry() -> None:
    """Drop the global registry (for tests and settings changes)."""
    global _registry
    with _registry_lock:
        _registry = None
