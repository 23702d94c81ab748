"""
Command-line interface.

    connector-hub-bench run [--targets a,b] [--save/--no-save]
    connector-hub-bench list
    connector-hub-bench summary

Exit codes:
    0: Command completed (individual benchmark failures included)
    2: Setup error (unusable config file, unwritable/unreadable output)
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import click

from connector_hub_bench import store
from connector_hub_bench.config import BenchSettings, load_settings
from connector_hub_bench.errors import ConfigError, ResultStoreError
from connector_hub_bench.observability import configure_logging, init_observability
from connector_hub_bench.registry import TargetRegistry, default_targets
from connector_hub_bench.report import render_run_report, render_summary_table
from connector_hub_bench.runner import BenchmarkRunner

logger = logging.getLogger(__name__)

EXIT_SETUP_ERROR = 2


def _fail(ctx: click.Context, message: str) -> None:
    click.echo(f"ERROR: {message}", err=True)
    ctx.exit(EXIT_SETUP_ERROR)


def _settings(ctx: click.Context) -> BenchSettings:
    return ctx.obj["settings"]


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Base directory for results (benchmarks/output is created beneath it).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file.",
)
@click.version_option(package_name="connector-hub-bench")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, output: Optional[Path], config_path: Optional[Path]):
    """Benchmark suite for the LLM Connector Hub."""
    configure_logging(verbose)

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        _fail(ctx, str(e))
        return

    settings = settings.with_overrides(base_path=output)
    init_observability(otlp_endpoint=settings.otlp_endpoint)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["registry"] = TargetRegistry(default_targets(settings))

    if ctx.invoked_subcommand is None:
        ctx.invoke(run_command)


@cli.command("run")
@click.option(
    "-t",
    "--targets",
    default=None,
    help="Comma-separated target ids to run (default: all).",
)
@click.option(
    "--save/--no-save",
    default=True,
    show_default=True,
    help="Write results to the output directory.",
)
@click.pass_context
def run_command(ctx: click.Context, targets: Optional[str] = None, save: bool = True):
    """Run benchmarks."""
    settings = _settings(ctx)
    runner = BenchmarkRunner(ctx.obj["registry"])

    logger.info("Starting Connector Hub Benchmark Suite")
    if targets:
        target_ids = [t.strip() for t in targets.split(",") if t.strip()]
        logger.info("Running %d specific benchmarks", len(target_ids))
        results = asyncio.run(runner.run_by_ids(target_ids))
    else:
        logger.info("Running all benchmarks")
        results = asyncio.run(runner.run_all())

    click.echo(render_run_report(results))

    if not save:
        return

    try:
        paths = store.save(results, settings.base_path)
    except ResultStoreError as e:
        _fail(ctx, str(e))
        return

    click.echo("\nResults saved to:")
    click.echo(f"  - {paths['summary']}")
    click.echo(f"  - {paths['latest']}")


@cli.command("list")
@click.pass_context
def list_command(ctx: click.Context):
    """List available benchmark targets."""
    click.echo("Available Benchmark Targets:")
    click.echo("=" * 40)
    for target_id in ctx.obj["registry"].ids():
        click.echo(f"  - {target_id}")
    click.echo("\nUse --targets to run specific benchmarks:")
    click.echo("  connector-hub-bench run --targets provider-resolution,cache-operations")


@cli.command("summary")
@click.pass_context
def summary_command(ctx: click.Context):
    """Show the results of the last saved run."""
    try:
        results = store.read_latest(_settings(ctx).base_path)
    except ResultStoreError as e:
        _fail(ctx, str(e))
        return

    if results is None:
        click.echo("No previous benchmark results found.")
        click.echo("Run 'connector-hub-bench run' to generate results.")
        return

    click.echo(render_summary_table(results))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
