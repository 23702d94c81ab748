"""
Simulated Workloads
===================

Deterministic in-process stand-ins for connector-hub operations, used when
the external benchmark is unavailable. Each function approximates the cost
shape of the real operation, performs no I/O and has no hidden randomness.

Catalogue:
- Provider resolution: provider-list hashing and healthy/lowest-latency selection
- Cache key generation: 32-bit integer mix folded into a formatted key
- Cache GET/SET: LRU map with hit/miss accounting
- Middleware pipeline: fixed accumulation loop composed N times
- Request/response transform: field selection and renaming on sample payloads
- Stream chunk parsing: SSE ``data:`` line parsing and text aggregation
"""

from __future__ import annotations

import json
from collections import OrderedDict
from typing import Any, Iterable, Optional

_U32_MASK = 0xFFFFFFFF

# =============================================================================
# Provider resolution
# =============================================================================

PROVIDERS: tuple[str, ...] = ("openai", "anthropic", "google", "azure", "bedrock")

# (name, healthy, latency_ms)
PROVIDER_CANDIDATES: tuple[tuple[str, bool, int], ...] = (
    ("openai", True, 100),
    ("anthropic", True, 150),
    ("google", False, 200),
    ("azure", True, 120),
    ("bedrock", True, 180),
)


def provider_hash(providers: Iterable[str] = PROVIDERS) -> int:
    """Wrapping 32-bit sum of ``len(name) * (index + 1)``."""
    value = 0
    for i, name in enumerate(providers):
        value = (value + len(name) * (i + 1)) & _U32_MASK
    return value


def select_provider(
    candidates: Iterable[tuple[str, bool, int]] = PROVIDER_CANDIDATES,
) -> Optional[str]:
    """First healthy provider with the lowest latency, or None if none is healthy."""
    best: Optional[tuple[str, bool, int]] = None
    for candidate in candidates:
        if not candidate[1]:
            continue
        if best is None or candidate[2] < best[2]:
            best = candidate
    return best[0] if best else None


def resolve_provider() -> tuple[int, Optional[str]]:
    """One simulated provider resolution: hash the provider list, then select."""
    return provider_hash(PROVIDERS), select_provider(PROVIDER_CANDIDATES)


# =============================================================================
# Cache operations
# =============================================================================

CACHE_KEY_MULTIPLIER = 0x5BD1E995
CACHE_KEY_PREFIX = "cache:provider:model:"
MISSING_KEY_PREFIX = "nonexistent-key-"


def generate_cache_key(seed: int) -> str:
    """
    Deterministic cache key for ``seed``.

    Multiplying by an odd constant modulo 2**32 and xor-shifting are both
    bijections on 32-bit values, so distinct 32-bit seeds map to distinct keys.
    """
    value = (seed * CACHE_KEY_MULTIPLIER) & _U32_MASK
    value ^= value >> 15
    return f"{CACHE_KEY_PREFIX}{value:08x}"


def missing_cache_key(seed: int) -> str:
    """A key that ``generate_cache_key`` can never produce."""
    return f"{MISSING_KEY_PREFIX}{seed}"


class InMemoryCache:
    """
    LRU map used by the cache simulation.

    Instances are created per simulated run and discarded afterwards.
    """

    def __init__(self, max_size: int = 10_000) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self._store: OrderedDict[str, Any] = OrderedDict()
        self._max_size = max_size
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Any:
        """Value for ``key`` (refreshing its LRU position), or None when absent."""
        if key not in self._store:
            self._misses += 1
            return None
        self._store.move_to_end(key)
        self._hits += 1
        return self._store[key]

    def set(self, key: str, value: Any) -> None:
        """Insert or replace ``key``, evicting the least recently used entry at capacity."""
        if key in self._store:
            del self._store[key]
        while len(self._store) >= self._max_size:
            self._store.popitem(last=False)
        self._store[key] = value

    def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def __contains__(self, key: str) -> bool:
        return key in self._store

    @property
    def size(self) -> int:
        return len(self._store)

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def clear(self) -> None:
        """Clear all entries and reset counters."""
        self._store.clear()
        self._hits = 0
        self._misses = 0


# =============================================================================
# Middleware pipeline
# =============================================================================

MIDDLEWARE_LOOP_COUNT = 10
DEFAULT_PIPELINE_LENGTH = 5


def run_single_middleware() -> int:
    """One middleware: a fixed-count wrapping accumulation."""
    result = 0
    for i in range(MIDDLEWARE_LOOP_COUNT):
        result = (result + i) & _U32_MASK
    return result


def run_pipeline(count: int = DEFAULT_PIPELINE_LENGTH) -> int:
    """``count`` middlewares executed sequentially."""
    result = 0
    for _ in range(count):
        result = (result + run_single_middleware()) & _U32_MASK
    return result


def overhead_per_middleware(pipeline_mean_ns: int, single_mean_ns: int, count: int) -> int:
    """
    ``(pipeline_mean - single_mean) / (count - 1)`` in integer nanoseconds.

    Clamped at 0 when timer noise makes the pipeline faster than one
    middleware; a single-middleware pipeline has no per-middleware overhead.
    """
    if count <= 1:
        return 0
    return max(pipeline_mean_ns - single_mean_ns, 0) // (count - 1)


# =============================================================================
# Request / response transformation
# =============================================================================

SAMPLE_REQUEST: dict[str, Any] = {
    "model": "gpt-4",
    "messages": [
        {"role": "system", "content": "You are a helpful assistant."},
        {"role": "user", "content": "Hello, how are you?"},
    ],
    "max_tokens": 1000,
    "temperature": 0.7,
}

SAMPLE_RESPONSE: dict[str, Any] = {
    "id": "chatcmpl-123",
    "object": "chat.completion",
    "choices": [
        {
            "index": 0,
            "message": {"role": "assistant", "content": "I'm doing well, thank you!"},
            "finish_reason": "stop",
        }
    ],
    "usage": {"prompt_tokens": 10, "completion_tokens": 8, "total_tokens": 18},
}


def transform_request(request: dict[str, Any]) -> dict[str, Any]:
    """Unified request -> provider (completion-style) request. No validation."""
    return {
        "model": request.get("model"),
        "prompt": list(request.get("messages") or []),
        "max_tokens_to_sample": request.get("max_tokens"),
    }


def transform_response(response: dict[str, Any]) -> dict[str, Any]:
    """Provider response -> unified response. No validation."""
    choices = response.get("choices") or []
    first = choices[0] if choices else {}
    return {
        "content": first.get("message") if isinstance(first, dict) else None,
        "usage": response.get("usage"),
        "id": response.get("id"),
    }


# =============================================================================
# Stream chunk parsing
# =============================================================================

SSE_DATA_PREFIX = "data: "
SSE_DONE_SENTINEL = "[DONE]"

SAMPLE_CHUNKS: tuple[str, ...] = (
    'data: {"choices":[{"delta":{"content":"Hello"}}]}\n\n',
    'data: {"choices":[{"delta":{"content":" world"}}]}\n\n',
    'data: {"choices":[{"delta":{"content":"!"}}]}\n\n',
    "data: [DONE]\n\n",
)


def parse_sse_chunk(chunk: str) -> Optional[str]:
    """
    Extract ``choices[0].delta.content`` from one SSE ``data:`` line.

    Returns None for the ``[DONE]`` sentinel, lines without the data prefix,
    malformed JSON, or payloads without text content.
    """
    if chunk.startswith(SSE_DATA_PREFIX + SSE_DONE_SENTINEL):
        return None
    if not chunk.startswith(SSE_DATA_PREFIX):
        return None

    try:
        payload = json.loads(chunk[len(SSE_DATA_PREFIX) :].strip())
    except json.JSONDecodeError:
        return None

    try:
        content = payload["choices"][0]["delta"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


def aggregate_chunks(chunks: Iterable[str]) -> str:
    """Concatenate the text content of an ordered chunk sequence."""
    parts = []
    for chunk in chunks:
        content = parse_sse_chunk(chunk)
        if content is not None:
            parts.append(content)
    return "".join(parts)
