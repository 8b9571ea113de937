"""
buildstamp.cli — Command-line entry point for the pre-build version step.

Usage:
    buildstamp resolve         Stamp the version record from the last Git tag
    buildstamp show            Show the current version record
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from buildstamp import __version__
from buildstamp.core.errors import (
    BuildAbortError,
    BuildStage,
    ConfigError,
    DuplicateRecordError,
    StoreError,
)

console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s — %(message)s",
        datefmt="%H:%M:%S",
    )


def _get_config(project: str | None):
    from buildstamp.core.models import BuildstampConfig
    try:
        return BuildstampConfig.for_project(Path(project).resolve() if project else None)
    except ConfigError as e:
        raise BuildAbortError(BuildStage.CONFIG, str(e)) from e


def _abort(headline: str, error: Exception) -> None:
    err_console.print(f"[red]✗[/red] {headline}")
    err_console.print(str(error), markup=False, highlight=False)
    sys.exit(1)


@click.group()
@click.version_option(__version__, prog_name="buildstamp")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """buildstamp — version builds from Git tags."""
    _setup_logging(verbose)


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------

@main.command()
@click.option("--project", default=None, help="Project root (auto-detected if omitted).")
def resolve(project: str | None) -> None:
    """Stamp the version record for this build (run before building)."""
    from buildstamp.operations.resolver import BuildVersionResolver

    try:
        result = BuildVersionResolver.from_config(_get_config(project)).resolve()
    except BuildAbortError as e:
        _abort(f"Build aborted: [bold]{e.stage}[/bold]", e)

    console.print(f"[green]✓[/green] Version [bold]{result.version_string}[/bold]")
    console.print(f"  Commit:    {result.git_hash}")
    console.print(f"  Timestamp: {result.build_timestamp}")
    console.print(f"  Record:    {result.location}")


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------

@main.command()
@click.option("--project", default=None, help="Project root (auto-detected if omitted).")
def show(project: str | None) -> None:
    """Show the current version record without modifying it."""
    from buildstamp.core.store import VersionRecordStore

    try:
        config = _get_config(project)
    except BuildAbortError as e:
        _abort(f"Invalid configuration: [bold]{e.stage}[/bold]", e)

    try:
        store = VersionRecordStore(config.assets_path, config.record_file)
        locations = store.find_records()
        if len(locations) > 1:
            raise DuplicateRecordError(locations)
        if not locations:
            console.print(f"[yellow]![/yellow] No version record under {config.assets_path}")
            console.print("[dim]Run [bold]buildstamp resolve[/bold] to create one.[/dim]")
            return
        handle = store.load_record(locations[0])
    except StoreError as e:
        _abort("Cannot read version record", e)

    record = handle.record
    table = Table(title="Build Version")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Version", str(record.game_version))
    table.add_row("Commit", record.git_hash or "—")
    table.add_row("Built (UTC)", record.build_timestamp or "—")
    table.add_row("Record", str(handle.location))
    console.print(table)


if __name__ == "__main__":
    main()
