"""
Connector Hub Collaborator Stand-ins
====================================

No-op-safe replacements for the services the connector hub consumes:
provider configuration and credentials, payload schema validation, and
telemetry spans. The benchmark core does not call them; they exist so code
written against these interfaces can run without the real services.

Each interface is a ``Protocol``; the concrete adapters below satisfy them
structurally.
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from connector_hub_bench.errors import BenchmarkError
from connector_hub_bench.observability import get_tracer

logger = logging.getLogger(__name__)


class ProviderConfigError(BenchmarkError):
    """Provider configuration could not be produced."""


class SchemaViolation(BenchmarkError):
    """A payload failed schema validation."""


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class ProviderConfigLoader(Protocol):
    def load_provider_config(self, provider: str) -> "ProviderConfig":
        ...

    def get_credential(self, provider: str, name: str) -> Optional[str]:
        ...


@runtime_checkable
class PayloadValidator(Protocol):
    def validate(self, provider: str, payload: Any, direction: str) -> None:
        ...


@runtime_checkable
class SpanRecorder(Protocol):
    def start_span(self, provider: str, model: str) -> str:
        ...

    def record_usage(self, span_id: str, prompt_tokens: int, completion_tokens: int) -> None:
        ...

    def finish_span(self, span_id: str, success: bool) -> None:
        ...


# =============================================================================
# Configuration
# =============================================================================

_DEFAULT_ENDPOINTS: dict[str, str] = {
    "openai": "https://api.openai.com/v1",
    "anthropic": "https://api.anthropic.com/v1",
    "google": "https://generativelanguage.googleapis.com/v1",
}

_DEFAULT_MODELS: dict[str, tuple[str, ...]] = {
    "openai": ("gpt-4", "gpt-4-turbo", "gpt-3.5-turbo"),
    "anthropic": (
        "claude-3-opus-20240229",
        "claude-3-sonnet-20240229",
        "claude-3-haiku-20240307",
    ),
    "google": ("gemini-pro", "gemini-ultra"),
}


@dataclass
class ProviderConfig:
    """Configuration of one LLM provider."""

    provider: str
    endpoint: Optional[str] = None
    models: list[str] = field(default_factory=list)
    settings: dict[str, Any] = field(default_factory=dict)


class ConfigAdapter:
    """
    Provider configuration with built-in defaults.

    Credentials are read from ``<PROVIDER>_<NAME>`` environment variables,
    e.g. ``OPENAI_API_KEY`` for ``get_credential("openai", "api_key")``.
    """

    def __init__(self, namespace: str = "connector-hub", env: Optional[Mapping[str, str]] = None):
        self.namespace = namespace
        self._env = env
        self._cache: dict[str, ProviderConfig] = {}

    def load_provider_config(self, provider: str) -> ProviderConfig:
        """
        Configuration for ``provider``, cached after the first load.

        Raises:
            ProviderConfigError: If ``provider`` is empty.
        """
        name = provider.strip().lower()
        if not name:
            raise ProviderConfigError("provider name must not be empty")

        cached = self._cache.get(name)
        if cached is not None:
            logger.debug("Using cached provider config for %s", name)
            return cached

        logger.debug("Loading provider configuration for %s", name)
        config = ProviderConfig(
            provider=name,
            endpoint=_DEFAULT_ENDPOINTS.get(name),
            models=list(_DEFAULT_MODELS.get(name, ())),
        )
        self._cache[name] = config
        return config

    def get_credential(self, provider: str, name: str) -> Optional[str]:
        """Credential value, or None when not configured."""
        env = os.environ if self._env is None else self._env
        env_var = f"{provider.upper()}_{name.upper()}"
        value = env.get(env_var)
        if value is None:
            logger.debug("Credential %s not found (looked for %s)", name, env_var)
        return value


# =============================================================================
# Schema validation
# =============================================================================


class ValidationMode(str, Enum):
    STRICT = "strict"
    LENIENT = "lenient"
    DISABLED = "disabled"


VALID_DIRECTIONS = frozenset({"request", "response"})


class ValidationAdapter:
    """Minimal payload validation: payloads must be non-empty mappings."""

    def __init__(self, mode: ValidationMode = ValidationMode.STRICT):
        self.mode = ValidationMode(mode)

    def validate(self, provider: str, payload: Any, direction: str) -> None:
        """
        Validate a request or response payload.

        Raises:
            ValueError: If ``direction`` is not ``request`` or ``response``.
            SchemaViolation: In strict mode, for an empty or non-mapping payload.
        """
        if direction not in VALID_DIRECTIONS:
            raise ValueError(
                f"direction must be one of {sorted(VALID_DIRECTIONS)}, got {direction!r}"
            )
        if self.mode is ValidationMode.DISABLED:
            return

        problem = None
        if not isinstance(payload, Mapping):
            problem = f"{direction} payload must be an object, got {type(payload).__name__}"
        elif not payload:
            problem = f"empty {direction} payload"

        if problem is None:
            logger.debug("%s %s validation passed", provider, direction)
            return
        if self.mode is ValidationMode.STRICT:
            raise SchemaViolation(f"{provider}: {problem}")
        logger.warning("%s: %s (lenient mode, continuing)", provider, problem)


# =============================================================================
# Telemetry
# =============================================================================


@dataclass
class _ActiveSpan:
    span: trace.Span
    started_at: float


class SpanAdapter:
    """
    Provider-call spans backed by OpenTelemetry.

    A disabled adapter returns an empty span id and ignores every call.
    Unknown span ids are logged and ignored.
    """

    def __init__(self, enabled: bool = True, environment: str = "production"):
        self.enabled = enabled
        self.environment = environment
        self._active: dict[str, _ActiveSpan] = {}

    def start_span(self, provider: str, model: str) -> str:
        if not self.enabled:
            return ""

        span_id = str(uuid.uuid4())
        span = get_tracer().start_span(f"llm.{provider}.completion")
        span.set_attribute("llm.provider", provider)
        span.set_attribute("llm.model", model)
        span.set_attribute("deployment.environment", self.environment)
        self._active[span_id] = _ActiveSpan(span=span, started_at=time.monotonic())
        logger.debug("Provider span started: %s (%s/%s)", span_id, provider, model)
        return span_id

    def record_usage(self, span_id: str, prompt_tokens: int, completion_tokens: int) -> None:
        active = self._lookup(span_id)
        if active is None:
            return
        active.span.set_attribute("llm.usage.prompt_tokens", prompt_tokens)
        active.span.set_attribute("llm.usage.completion_tokens", completion_tokens)
        active.span.set_attribute("llm.usage.total_tokens", prompt_tokens + completion_tokens)

    def finish_span(self, span_id: str, success: bool) -> None:
        active = self._lookup(span_id)
        if active is None:
            return
        del self._active[span_id]

        latency_ms = (time.monotonic() - active.started_at) * 1000
        active.span.set_attribute("llm.latency_ms", latency_ms)
        active.span.set_status(Status(StatusCode.OK if success else StatusCode.ERROR))
        active.span.end()

    @property
    def active_span_count(self) -> int:
        return len(self._active)

    def _lookup(self, span_id: str) -> Optional[_ActiveSpan]:
        if not self.enabled or not span_id:
            return None
        active = self._active.get(span_id)
        if active is None:
            logger.warning("Span not found: %s", span_id)
        return active
