"""
Harness Configuration
=====================

Settings come from, in increasing precedence:

1. Built-in defaults
2. An optional YAML file (``--config`` or ``HUB_BENCH_CONFIG``)
3. ``HUB_BENCH_*`` environment variables
4. Explicit overrides passed by the CLI (e.g. ``--output``)

Invalid environment values are reported by ``env_validation`` and ignored.
A YAML file that was asked for but is missing or malformed raises
``ConfigError``.

Example YAML::

    iterations: 5000
    warmup_iterations: 500
    bridge_enabled: false
    hub_root: ../connector-hub
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from connector_hub_bench import env_validation as ev
from connector_hub_bench.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_OTLP_ENDPOINT = "OTEL_EXPORTER_OTLP_ENDPOINT"


@dataclass(frozen=True)
class BenchSettings:
    """Resolved harness settings."""

    base_path: Path = Path(".")
    """Directory under which ``benchmarks/output`` is written."""

    hub_root: Path = Path(".")
    """Working directory of the external benchmark toolchain."""

    iterations: int = 1000
    warmup_iterations: int = 100
    bridge_enabled: bool = True
    bridge_command: str = "npm"
    bridge_timeout_s: Optional[float] = None
    otlp_endpoint: Optional[str] = None

    def with_overrides(self, **overrides: Any) -> "BenchSettings":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


_FIELD_NAMES = frozenset(f.name for f in fields(BenchSettings))


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    unknown = set(data) - _FIELD_NAMES
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(sorted(unknown)))
    return {k: v for k, v in data.items() if k in _FIELD_NAMES}


def _coerce_file_values(values: dict[str, Any], source: Path) -> dict[str, Any]:
    coerced: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        if key in ("base_path", "hub_root"):
            path = Path(str(value))
            # Relative paths in the file are relative to the file itself.
            coerced[key] = path if path.is_absolute() else source.parent / path
        elif key in ("iterations", "warmup_iterations"):
            parsed = ev.parse_int(str(value), 1 if key == "iterations" else 0)
            if parsed is None:
                raise ConfigError(f"{source}: {key} has invalid value {value!r}")
            coerced[key] = parsed
        elif key == "bridge_enabled":
            parsed_bool = value if isinstance(value, bool) else ev.parse_bool(str(value))
            if parsed_bool is None:
                raise ConfigError(f"{source}: bridge_enabled has invalid value {value!r}")
            coerced[key] = parsed_bool
        elif key == "bridge_timeout_s":
            parsed_float = ev.parse_positive_float(str(value))
            if parsed_float is None:
                raise ConfigError(f"{source}: bridge_timeout_s has invalid value {value!r}")
            coerced[key] = parsed_float
        else:
            coerced[key] = str(value)
    return coerced


def _env_values(env: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}

    if env.get(ev.ENV_BASE_PATH):
        values["base_path"] = Path(env[ev.ENV_BASE_PATH])
    if env.get(ev.ENV_HUB_ROOT):
        values["hub_root"] = Path(env[ev.ENV_HUB_ROOT])
    if env.get(ev.ENV_BRIDGE_COMMAND):
        values["bridge_command"] = env[ev.ENV_BRIDGE_COMMAND]
    if env.get(ENV_OTLP_ENDPOINT):
        values["otlp_endpoint"] = env[ENV_OTLP_ENDPOINT]

    if ev.ENV_ITERATIONS in env:
        parsed = ev.parse_int(env[ev.ENV_ITERATIONS], 1)
        if parsed is not None:
            values["iterations"] = parsed
    if ev.ENV_WARMUP_ITERATIONS in env:
        parsed = ev.parse_int(env[ev.ENV_WARMUP_ITERATIONS], 0)
        if parsed is not None:
            values["warmup_iterations"] = parsed
    if ev.ENV_BRIDGE_ENABLED in env:
        enabled = ev.parse_bool(env[ev.ENV_BRIDGE_ENABLED])
        if enabled is not None:
            values["bridge_enabled"] = enabled
    if env.get(ev.ENV_BRIDGE_TIMEOUT_S):
        timeout = ev.parse_positive_float(env[ev.ENV_BRIDGE_TIMEOUT_S])
        if timeout is not None:
            values["bridge_timeout_s"] = timeout

    return values


def load_settings(
    config_path: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> BenchSettings:
    """
    Build settings from defaults, an optional YAML file and the environment.

    Raises:
        ConfigError: If a config file was requested but cannot be used.
    """
    env = os.environ if env is None else env
    ev.validate_environment(env)

    cwd = Path.cwd()
    values: dict[str, Any] = {"base_path": cwd, "hub_root": cwd}

    path_value = config_path or env.get(ev.ENV_CONFIG)
    if path_value:
        path = Path(path_value)
        values.update(_coerce_file_values(_read_yaml(path), path))
        logger.debug("Loaded config file %s", path)

    values.update(_env_values(env))
    return BenchSettings(**values)
