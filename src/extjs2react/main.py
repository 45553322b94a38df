"""extjs2react CLI Main Entry Point

Compiles Ext JS class definitions into React modules.

Usage:
    extjs2react transpile              # Compile source_dir into target_dir
    extjs2react classnames             # Rank export names
    extjs2react calls                  # Rank call frequencies
    extjs2react snapshot <id>          # Cache the resolved registry
    extjs2react manifest -o index.js   # Framework widget manifest
    extjs2react -c path/extjs2react.yaml transpile
    extjs2react --version
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from ._version import __version__
from .commands import (
    calls_command,
    classnames_command,
    manifest_command,
    snapshot_command,
    transpile_command,
)
from .commands.utils import setup_logging
from .errors import Extjs2ReactError, handle_error
from .framework import REACTIFY_SOURCE

typer_app = typer.Typer(no_args_is_help=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"extjs2react {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Path to extjs2react.yaml."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show progress logs."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Compile Ext JS class definitions into React modules."""
    setup_logging(verbose)
    ctx.obj = {"config": config}


def _config(ctx: typer.Context) -> Optional[Path]:
    return (ctx.obj or {}).get("config")


@typer_app.command()
def transpile(
    ctx: typer.Context,
    report: bool = typer.Option(
        False, "--report", help="Print property and capability diagnostics."
    ),
) -> None:
    """Compile every source unit into the target directory."""
    try:
        transpile_command(_config(ctx), report=report)
    except Extjs2ReactError as e:
        handle_error(e)


@typer_app.command()
def classnames(
    ctx: typer.Context,
    snapshot: Optional[str] = typer.Option(
        None, "-s", "--snapshot", help="Read the registry from this snapshot id."
    ),
) -> None:
    """Rank the distinct export names of the application's classes."""
    try:
        classnames_command(_config(ctx), snapshot)
    except Extjs2ReactError as e:
        handle_error(e)


@typer_app.command()
def calls(
    ctx: typer.Context,
    snapshot: Optional[str] = typer.Option(
        None, "-s", "--snapshot", help="Read the registry from this snapshot id."
    ),
    limit: int = typer.Option(50, "-n", "--limit", help="Rows to show; 0 for all."),
) -> None:
    """Rank call frequencies (Ext.x, Math.x, .x)."""
    try:
        calls_command(_config(ctx), snapshot, limit)
    except Extjs2ReactError as e:
        handle_error(e)


@typer_app.command()
def snapshot(
    ctx: typer.Context,
    snapshot_id: str = typer.Argument(..., help="Logical snapshot id."),
) -> None:
    """Build the registry and cache it as a snapshot."""
    try:
        snapshot_command(snapshot_id, _config(ctx))
    except Extjs2ReactError as e:
        handle_error(e)


@typer_app.command()
def manifest(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write the manifest to this file."
    ),
    reactify_source: str = typer.Option(
        REACTIFY_SOURCE, "--reactify-source", help="Module providing reactify."
    ),
) -> None:
    """Print the framework's index.js manifest."""
    try:
        manifest_command(_config(ctx), output, reactify_source)
    except Extjs2ReactError as e:
        handle_error(e)


def app(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    typer_app(args=argv)


if __name__ == "__main__":
    app()
