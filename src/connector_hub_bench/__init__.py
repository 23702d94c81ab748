"""
Connector Hub Benchmarks
========================

Benchmark harness for LLM Connector Hub operations: provider resolution,
request/response transformation, middleware pipelines, cache access and
streamed-response parsing.

Each target first delegates to the hub's own benchmark toolchain through a
subprocess bridge and falls back to an in-process simulated workload when
that is unavailable, so every run yields comparable latency/throughput
metrics. Results are written to ``benchmarks/output``.

Usage:
    import asyncio
    from pathlib import Path

    from connector_hub_bench import run_all_benchmarks, store

    results = asyncio.run(run_all_benchmarks())
    store.save(results, Path("."))
"""

from .bridge import (
    BridgeCapability,
    BridgeClient,
    BridgeOutcome,
    Delegated,
    Unavailable,
    extract_json_object,
)
from .config import BenchSettings, load_settings
from .errors import (
    BenchmarkError,
    ConfigError,
    ResultDeserializationError,
    ResultStoreError,
    SimulationInvariantViolation,
)
from .hub_adapters import ConfigAdapter, SpanAdapter, ValidationAdapter
from .registry import (
    TargetRegistry,
    default_targets,
    get_target_registry,
    reset_target_registry,
)
from .result import BenchmarkResult
from .runner import BenchmarkRunner, run_all_benchmarks, run_benchmarks_by_id
from .stats import SampleStats, summarize
from .targets import (
    BenchTarget,
    CacheOperationsBenchmark,
    MiddlewarePipelineBenchmark,
    ProviderResolutionBenchmark,
    RequestTransformationBenchmark,
    StreamParsingBenchmark,
    TargetConfig,
)
from . import store

__version__ = "0.1.0"
__all__ = [
    # Results
    "BenchmarkResult",
    "store",
    # Targets & registry
    "BenchTarget",
    "TargetConfig",
    "ProviderResolutionBenchmark",
    "RequestTransformationBenchmark",
    "MiddlewarePipelineBenchmark",
    "CacheOperationsBenchmark",
    "StreamParsingBenchmark",
    "TargetRegistry",
    "default_targets",
    "get_target_registry",
    "reset_target_registry",
    # Runner
    "BenchmarkRunner",
    "run_all_benchmarks",
    "run_benchmarks_by_id",
    # Bridge
    "BridgeCapability",
    "BridgeClient",
    "BridgeOutcome",
    "Delegated",
    "Unavailable",
    "extract_json_object",
    # Statistics
    "SampleStats",
    "summarize",
    # Settings
    "BenchSettings",
    "load_settings",
    # Collaborator stand-ins
    "ConfigAdapter",
    "SpanAdapter",
    "ValidationAdapter",
    # Errors
    "BenchmarkError",
    "ConfigError",
    "ResultDeserializationError",
    "ResultStoreError",
    "SimulationInvariantViolation",
]
