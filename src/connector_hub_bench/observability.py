"""
Logging and OpenTelemetry Setup
===============================

- ``configure_logging`` installs one stream handler on the package logger.
- ``init_observability`` sets up tracing for the harness itself; spans are
  exported over OTLP/gRPC when an endpoint is configured.
- ``get_tracer`` always returns a usable tracer, falling back to the global
  (possibly no-op) provider when observability was never initialised.
"""

import logging
import os
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "connector_hub_bench"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DEFAULT_SERVICE_NAME = "connector-hub-bench"
TRACER_NAME = "connector_hub_bench"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Log to stderr at INFO, or DEBUG when ``verbose``. Idempotent."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not any(getattr(h, "_hub_bench_handler", False) for h in package_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._hub_bench_handler = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)

    return package_logger


class ObservabilityManager:
    """
    Owns the tracer used by the harness.

    An existing SDK ``TracerProvider`` (e.g. one installed by a test suite or
    a host application) is reused instead of replaced.
    """

    def __init__(
        self,
        service_name: str = DEFAULT_SERVICE_NAME,
        service_version: str = "0.1.0",
        otlp_endpoint: Optional[str] = None,
    ):
        self.service_name = service_name
        self.service_version = service_version
        self.otlp_endpoint = otlp_endpoint
        self.resource = Resource.create(
            {
                SERVICE_NAME: self.service_name,
                SERVICE_VERSION: self.service_version,
            }
        )
        self._tracer_provider: Optional[TracerProvider] = None
        self._tracer: Optional[trace.Tracer] = None

    def initialize(self) -> None:
        existing_provider = trace.get_tracer_provider()
        if isinstance(existing_provider, TracerProvider):
            self._tracer_provider = existing_provider
            logger.debug("Using existing TracerProvider")
        else:
            self._tracer_provider = TracerProvider(resource=self.resource)
            trace.set_tracer_provider(self._tracer_provider)
            logger.debug("Created new TracerProvider")

        if self.otlp_endpoint:
            exporter = OTLPSpanExporter(endpoint=self.otlp_endpoint, insecure=True)
            self._tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
            logger.info("Tracing exported to OTLP endpoint: %s", self.otlp_endpoint)

        self._tracer = trace.get_tracer(TRACER_NAME, self.service_version)

    def get_tracer(self) -> trace.Tracer:
        if self._tracer is None:
            raise RuntimeError("Tracing not initialized. Call initialize() first.")
        return self._tracer

    def shutdown(self) -> None:
        """Flush pending spans."""
        if self._tracer_provider is not None:
            self._tracer_provider.force_flush()


# Global observability manager instance
_observability_manager: Optional[ObservabilityManager] = None


def init_observability(
    service_name: Optional[str] = None,
    otlp_endpoint: Optional[str] = None,
) -> ObservabilityManager:
    """Initialize the global observability manager."""
    global _observability_manager

    service_name = service_name or os.getenv("OTEL_SERVICE_NAME", DEFAULT_SERVICE_NAME)
    _observability_manager = ObservabilityManager(
        service_name=service_name,
        otlp_endpoint=otlp_endpoint,
    )
    _observability_manager.initialize()
    return _observability_manager


def get_observability_manager() -> Optional[ObservabilityManager]:
    return _observability_manager


def get_tracer() -> trace.Tracer:
    """Harness tracer; the global tracer when observability is not initialised."""
    if _observability_manager is None:
        return trace.get_tracer(TRACER_NAME)
    return _observability_manager.get_tracer()


def reset_observability_manager() -> None:
    global _observability_manager
    _observability_manager = None
