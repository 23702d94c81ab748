"""
Environment Variable Validation
================================

Validates ``HUB_BENCH_*`` environment variables so misconfigurations are
reported before a run starts. Advisory only: problems are logged and
returned, never raised, and the affected setting falls back to its default.

Usage::

    from connector_hub_bench.env_validation import validate_environment

    result = validate_environment()
    # result.errors  -> list[str]
    # result.warnings -> list[str]
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


@dataclass
class ValidationResult:
    """Holds errors and warnings produced by environment validation."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


# ---------------------------------------------------------------------------
# Known env vars
# ---------------------------------------------------------------------------

ENV_BASE_PATH = "HUB_BENCH_BASE_PATH"
ENV_HUB_ROOT = "HUB_BENCH_HUB_ROOT"
ENV_ITERATIONS = "HUB_BENCH_ITERATIONS"
ENV_WARMUP_ITERATIONS = "HUB_BENCH_WARMUP_ITERATIONS"
ENV_BRIDGE_ENABLED = "HUB_BENCH_BRIDGE_ENABLED"
ENV_BRIDGE_COMMAND = "HUB_BENCH_BRIDGE_COMMAND"
ENV_BRIDGE_TIMEOUT_S = "HUB_BENCH_BRIDGE_TIMEOUT_S"
ENV_CONFIG = "HUB_BENCH_CONFIG"

_BOOLEAN_ENV_VARS: tuple[str, ...] = (ENV_BRIDGE_ENABLED,)

_TRUE_VALUES: frozenset[str] = frozenset({"true", "1", "yes"})
_FALSE_VALUES: frozenset[str] = frozenset({"false", "0", "no"})

_POSITIVE_INT_ENV_VARS: tuple[str, ...] = (ENV_ITERATIONS,)

_NON_NEGATIVE_INT_ENV_VARS: tuple[str, ...] = (ENV_WARMUP_ITERATIONS,)

_POSITIVE_FLOAT_ENV_VARS: tuple[str, ...] = (ENV_BRIDGE_TIMEOUT_S,)

_DIRECTORY_ENV_VARS: tuple[str, ...] = (ENV_HUB_ROOT,)

# ---------------------------------------------------------------------------
# Value parsers (shared with config loading)
# ---------------------------------------------------------------------------


def parse_bool(value: str) -> Optional[bool]:
    """Parse a boolean env value; None if unrecognised."""
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def parse_int(value: str, minimum: int) -> Optional[int]:
    """Parse an integer >= ``minimum``; None if invalid."""
    try:
        parsed = int(value.strip())
    except ValueError:
        return None
    return parsed if parsed >= minimum else None


def parse_positive_float(value: str) -> Optional[float]:
    try:
        parsed = float(value.strip())
    except ValueError:
        return None
    return parsed if parsed > 0 else None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_environment(env: Optional[Mapping[str, str]] = None) -> ValidationResult:
    """Validate known environment variables and return a summary.

    The function **never** raises an exception.
    """
    env = os.environ if env is None else env
    result = ValidationResult()

    _validate_boolean_vars(env, result)
    _validate_int_vars(env, result)
    _validate_float_vars(env, result)
    _validate_directories(env, result)
    _validate_config_path(env, result)

    for msg in result.errors:
        logger.error("Environment validation: %s", msg)
    for msg in result.warnings:
        logger.warning("Environment validation: %s", msg)

    logger.debug(
        "Environment validation complete: %d error(s), %d warning(s)",
        len(result.errors),
        len(result.warnings),
    )
    return result


# ---------------------------------------------------------------------------
# Individual validators
# ---------------------------------------------------------------------------


def _validate_boolean_vars(env: Mapping[str, str], result: ValidationResult) -> None:
    for name in _BOOLEAN_ENV_VARS:
        value = env.get(name)
        if value is not None and value.strip() and parse_bool(value) is None:
            result.warnings.append(
                f"{name}={value!r} is not a recognised boolean; using the default"
            )


def _validate_int_vars(env: Mapping[str, str], result: ValidationResult) -> None:
    for names, minimum, label in (
        (_POSITIVE_INT_ENV_VARS, 1, "a positive integer"),
        (_NON_NEGATIVE_INT_ENV_VARS, 0, "a non-negative integer"),
    ):
        for name in names:
            value = env.get(name)
            if value is not None and parse_int(value, minimum) is None:
                result.warnings.append(f"{name}={value!r} is not {label}; using the default")


def _validate_float_vars(env: Mapping[str, str], result: ValidationResult) -> None:
    for name in _POSITIVE_FLOAT_ENV_VARS:
        value = env.get(name)
        if value is not None and value.strip() and parse_positive_float(value) is None:
            result.warnings.append(
                f"{name}={value!r} is not a positive number of seconds; no timeout applied"
            )


def _validate_directories(env: Mapping[str, str], result: ValidationResult) -> None:
    for name in _DIRECTORY_ENV_VARS:
        value = env.get(name)
        if value and not Path(value).is_dir():
            result.warnings.append(
                f"{name} points to {value}, which is not a directory; "
                "external benchmarks will be unavailable"
            )


def _validate_config_path(env: Mapping[str, str], result: ValidationResult) -> None:
    value = env.get(ENV_CONFIG)
    if value and not Path(value).is_file():
        result.errors.append(f"{ENV_CONFIG} points to missing file: {value}")
