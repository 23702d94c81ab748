"""
Pytest configuration for unit tests.

This conftest provides a shared OpenTelemetry tracer provider for tracing tests,
ensuring all unit tests can properly export and verify spans.
"""

import pytest

# ============================================================================
# Shared OpenTelemetry configuration - set up once for all tracing tests
# ============================================================================

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.sdk.trace.export import SimpleSpanProcessor

# Shared tracer provider and exporter for all tracing tests
_shared_exporter = InMemorySpanExporter()
_shared_provider = TracerProvider()
_shared_provider.add_span_processor(SimpleSpanProcessor(_shared_exporter))

# Set the global tracer provider once
trace.set_tracer_provider(_shared_provider)

# Env vars read by settings loading; removed so the host environment
# doesn't leak into tests.
_HARNESS_ENV_VARS = (
    "HUB_BENCH_BASE_PATH",
    "HUB_BENCH_HUB_ROOT",
    "HUB_BENCH_ITERATIONS",
    "HUB_BENCH_WARMUP_ITERATIONS",
    "HUB_BENCH_BRIDGE_ENABLED",
    "HUB_BENCH_BRIDGE_COMMAND",
    "HUB_BENCH_BRIDGE_TIMEOUT_S",
    "HUB_BENCH_CONFIG",
    "OTEL_EXPORTER_OTLP_ENDPOINT",
)


@pytest.fixture
def shared_span_exporter():
    """
    Provides the shared span exporter for tests that need to verify spans.

    Clears spans before and after each test.
    """
    _shared_exporter.clear()
    yield _shared_exporter
    _shared_exporter.clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in _HARNESS_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _reset_all_singletons():
    """Reset all module-level singletons between tests to prevent cross-test contamination."""
    yield

    from connector_hub_bench.observability import reset_observability_manager
    from connector_hub_bench.registry import reset_target_registry

    reset_observability_manager()
    reset_target_registry()
