"""
Bridging Protocol Client
========================

Delegates a benchmark to the external connector-hub toolchain and reads its
metrics back.

Protocol:
- The client runs ``<command> run <subcommand> -- --json`` in the hub root.
- On exit code 0, stdout is expected to contain one JSON object. The object
  is located heuristically as the substring from the first ``{`` to the last
  ``}`` so log noise printed around it is tolerated.
- If no object can be parsed the run is still recorded with a minimal
  ``{"status": "completed", "source": "bridge", ...}`` record.
- Any other failure (command missing, non-zero exit, optional deadline
  exceeded) yields ``Unavailable`` so the caller can fall back to a simulated
  workload.

Outcomes are returned as tagged values rather than raised:

    outcome = await client.try_delegate("bench:cache")
    if isinstance(outcome, Delegated):
        metrics = outcome.metrics
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol, Sequence, Union, runtime_checkable

logger = logging.getLogger(__name__)

DEFAULT_BRIDGE_COMMAND = "npm"
DEFAULT_INSTALL_MARKER = "node_modules"
BRIDGE_SOURCE = "bridge"

_STDERR_TAIL_CHARS = 500


@dataclass(frozen=True)
class Delegated:
    """The external benchmark ran and exited 0."""

    metrics: dict[str, Any]
    elapsed_ns: int = 0
    degraded: bool = False
    """True when stdout held no parseable object and ``metrics`` was synthesized."""


@dataclass(frozen=True)
class Unavailable:
    """The external benchmark could not be used."""

    reason: str
    elapsed_ns: int = 0
    """Bridge overhead measured before the failure (0 if the process never started)."""
    returncode: Optional[int] = None
    stderr: str = ""


BridgeOutcome = Union[Delegated, Unavailable]


@runtime_checkable
class BridgeCapability(Protocol):
    """Anything that can try to delegate a benchmark subcommand."""

    async def try_delegate(self, subcommand: str) -> BridgeOutcome:
        ...


def extract_json_object(text: str) -> Optional[dict[str, Any]]:
    """
    Parse the substring between the first ``{`` and the last ``}`` of ``text``.

    Returns:
        The parsed object, or None if no braces were found, the substring is
        not valid JSON, or it does not decode to an object.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None

    try:
        parsed = json.loads(text[start : end + 1])
    except (ValueError, RecursionError):
        # Oversized integer literals and deep nesting fail here too.
        return None

    return parsed if isinstance(parsed, dict) else None


def degraded_metrics(elapsed_ns: int) -> dict[str, Any]:
    """Minimal record for a successful bridge run whose output was unparseable."""
    return {
        "bridge_execution_ns": elapsed_ns,
        "bridge_execution_ms": elapsed_ns // 1_000_000,
        "status": "completed",
        "source": BRIDGE_SOURCE,
    }


@dataclass
class BridgeClient:
    """
    Runs the external benchmark toolchain as a subprocess.

    Attributes:
        hub_root: Working directory for every invocation.
        command: Executable of the external toolchain.
        install_marker: Directory under ``hub_root`` whose absence triggers a
            one-time ``<command> install``. None disables the install step.
        install_args: Arguments for the install step.
        timeout_s: Optional per-call deadline. None waits for the process to
            exit on its own.
    """

    hub_root: Path
    command: str = DEFAULT_BRIDGE_COMMAND
    install_marker: Optional[str] = DEFAULT_INSTALL_MARKER
    install_args: Sequence[str] = ("install",)
    timeout_s: Optional[float] = None
    _install_attempted: bool = field(default=False, init=False, repr=False)

    def delegate_args(self, subcommand: str) -> list[str]:
        return ["run", subcommand, "--", "--json"]

    async def try_delegate(self, subcommand: str) -> BridgeOutcome:
        """Run one benchmark subcommand of the external toolchain."""
        logger.info("Running external benchmark %s via %s", subcommand, self.command)
        await self.ensure_dependencies()
        return await self.invoke(self.command, self.delegate_args(subcommand), self.hub_root)

    async def ensure_dependencies(self) -> None:
        """
        Best-effort, one-time install of the external toolchain's dependencies.

        Failures are logged and otherwise ignored; the following invocation
        reports the real problem.
        """
        if self._install_attempted or self.install_marker is None:
            return
        self._install_attempted = True

        marker = Path(self.hub_root) / self.install_marker
        if marker.exists():
            return

        logger.info(
            "%s not found, running %s %s first",
            marker,
            self.command,
            " ".join(self.install_args),
        )
        outcome = await self.invoke(self.command, list(self.install_args), self.hub_root)
        if isinstance(outcome, Unavailable):
            logger.warning("Dependency install failed: %s", outcome.reason)
            if outcome.stderr:
                logger.debug("Install stderr: %s", outcome.stderr)

    async def invoke(
        self,
        command: str,
        args: Sequence[str],
        working_directory: Optional[Path] = None,
    ) -> BridgeOutcome:
        """
        Launch ``command args`` and interpret its result.

        Never raises for process-level failures; those become ``Unavailable``.
        """
        logger.debug("Bridge invocation: %s %s (cwd=%s)", command, list(args), working_directory)
        start = time.perf_counter_ns()

        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                cwd=str(working_directory) if working_directory is not None else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return Unavailable(reason=f"failed to start {command}: {e}")

        try:
            if self.timeout_s is None:
                stdout, stderr = await process.communicate()
            else:
                stdout, stderr = await asyncio.wait_for(
                    process.communicate(), timeout=self.timeout_s
                )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            elapsed_ns = time.perf_counter_ns() - start
            return Unavailable(
                reason=f"timed out after {self.timeout_s}s",
                elapsed_ns=elapsed_ns,
                returncode=process.returncode,
            )

        elapsed_ns = time.perf_counter_ns() - start
        stdout_text = stdout.decode("utf-8", errors="replace")
        stderr_text = stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            logger.debug("Bridge stderr: %s", stderr_text)
            return Unavailable(
                reason=f"{command} exited with code {process.returncode}",
                elapsed_ns=elapsed_ns,
                returncode=process.returncode,
                stderr=stderr_text[-_STDERR_TAIL_CHARS:],
            )

        parsed = extract_json_object(stdout_text)
        if parsed is None:
            logger.debug("No JSON object in bridge output (%d chars)", len(stdout_text))
            return Delegated(
                metrics=degraded_metrics(elapsed_ns),
                elapsed_ns=elapsed_ns,
                degraded=True,
            )

        return Delegated(metrics=parsed, elapsed_ns=elapsed_ns)
