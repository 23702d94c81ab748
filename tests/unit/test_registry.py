"""Tests for the target registry and default target construction."""

from pathlib import Path

import pytest

from connector_hub_bench.bridge import BridgeClient
from connector_hub_bench.config import BenchSettings
from connector_hub_bench.registry import (
    TargetRegistry,
    build_bridge,
    default_targets,
    get_target_registry,
    reset_target_registry,
)
from connector_hub_bench.targets import (
    BenchTarget,
    CacheOperationsBenchmark,
    ProviderResolutionBenchmark,
    StreamParsingBenchmark,
)

EXPECTED_IDS = [
    "provider-resolution",
    "request-transformation",
    "middleware-pipeline",
    "cache-operations",
    "stream-parsing",
]


class Named(BenchTarget):
    def __init__(self, target_id):
        super().__init__()
        self.target_id = target_id

    def run_simulated(self):
        return {}


class TestTargetRegistry:
    def test_preserves_registration_order(self):
        registry = TargetRegistry([Named("b"), Named("a"), Named("c")])
        assert registry.ids() == ["b", "a", "c"]
        assert [t.id for t in registry.list()] == ["b", "a", "c"]

    def test_duplicate_id_rejected(self):
        registry = TargetRegistry([Named("a")])
        with pytest.raises(ValueError, match="Duplicate"):
            registry.register(Named("a"))
        assert len(registry) == 1

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            TargetRegistry([Named("")])

    def test_get(self):
        target = Named("a")
        registry = TargetRegistry([target])
        assert registry.get("a") is target
        assert registry.get("missing") is None
        assert "a" in registry
        assert "missing" not in registry

    def test_filter_by_prefix(self):
        registry = TargetRegistry([Named("cache-a"), Named("stream"), Named("cache-b")])
        assert [t.id for t in registry.filter_by_prefix("cache")] == ["cache-a", "cache-b"]
        assert registry.filter_by_prefix("zzz") == []

    def test_filter_by_ids_keeps_registry_order(self):
        registry = TargetRegistry([Named("a"), Named("b"), Named("c")])
        selected = registry.filter_by_ids(["c", "unknown", "a"])
        assert [t.id for t in selected] == ["a", "c"]

    def test_filter_by_ids_empty(self):
        registry = TargetRegistry([Named("a")])
        assert registry.filter_by_ids([]) == []

    def test_list_is_a_copy(self):
        registry = TargetRegistry([Named("a")])
        registry.list().clear()
        assert len(registry) == 1


class TestDefaultTargets:
    def test_all_five_in_order(self, tmp_path):
        settings = BenchSettings(base_path=tmp_path, hub_root=tmp_path)
        targets = default_targets(settings)
        assert [t.id for t in targets] == EXPECTED_IDS

    def test_ids_unique(self, tmp_path):
        targets = default_targets(BenchSettings(base_path=tmp_path, hub_root=tmp_path))
        assert len({t.id for t in targets}) == len(targets)

    def test_config_from_settings(self, tmp_path):
        settings = BenchSettings(hub_root=tmp_path, iterations=7, warmup_iterations=2)
        for target in default_targets(settings):
            assert target.config.iterations == 7
            assert target.config.warmup_iterations == 2

    def test_targets_share_one_bridge(self, tmp_path):
        targets = default_targets(BenchSettings(hub_root=tmp_path))
        bridges = {id(t.bridge) for t in targets}
        assert len(bridges) == 1
        assert isinstance(targets[0].bridge, BridgeClient)

    def test_bridge_disabled(self, tmp_path):
        targets = default_targets(BenchSettings(hub_root=tmp_path, bridge_enabled=False))
        assert all(t.bridge is None for t in targets)

    def test_default_target_types(self, tmp_path):
        targets = default_targets(BenchSettings(hub_root=tmp_path))
        assert isinstance(targets[0], ProviderResolutionBenchmark)
        assert isinstance(targets[3], CacheOperationsBenchmark)
        assert isinstance(targets[4], StreamParsingBenchmark)


def test_build_bridge_uses_settings(tmp_path):
    settings = BenchSettings(hub_root=tmp_path, bridge_command="pnpm", bridge_timeout_s=30.0)
    bridge = build_bridge(settings)
    assert bridge.hub_root == Path(tmp_path)
    assert bridge.command == "pnpm"
    assert bridge.timeout_s == 30.0


class TestSingleton:
    def test_same_instance_until_reset(self, tmp_path):
        settings = BenchSettings(hub_root=tmp_path, bridge_enabled=False)
        first = get_target_registry(settings)
        assert get_target_registry() is first

        reset_target_registry()
        assert get_target_registry(settings) is not first

    def test_registry_contents(self, tmp_path):
        registry = get_target_registry(BenchSettings(hub_root=tmp_path, bridge_enabled=False))
        assert registry.ids() == EXPECTED_IDS
