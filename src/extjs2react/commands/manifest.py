"""Manifest command - framework widget exports"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from extjs2react.codebase import Codebase
from extjs2react.errors import ConfigError
from extjs2react.framework import REACTIFY_SOURCE, render_manifest

from .utils import console, get_settings


def manifest_command(
    config_path: Optional[Path] = None,
    output: Optional[Path] = None,
    reactify_source: str = REACTIFY_SOURCE,
) -> None:
    """Print or write the framework's index.js manifest."""
    codebase = Codebase(get_settings(config_path))
    framework = codebase.framework()
    if framework is None:
        raise ConfigError("framework_file is not configured")

    manifest = render_manifest(framework, reactify_source)
    if output is None:
        typer.echo(manifest, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(manifest)
    console.print(f"[green]Wrote manifest[/green] to {output}")
