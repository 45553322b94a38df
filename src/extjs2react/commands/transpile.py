"""Transpile command - compile the application into the output root"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from extjs2react.codebase import Codebase
from extjs2react.diagnostics import rank

from .utils import console, get_settings, ranking_table


def transpile_command(config_path: Optional[Path] = None, report: bool = False) -> None:
    """Compile every source unit into the target directory."""
    settings = get_settings(config_path)
    codebase = Codebase(settings)
    result = codebase.transpile()

    console.print(
        f"[green]Wrote {len(result.written)} units[/green] to {settings.target_dir} "
        f"({len(result.copied)} copied, {len(result.removed)} removed)"
    )
    if result.fallbacks:
        console.print(
            f"[yellow]{len(result.fallbacks)} kept as is:[/yellow] {', '.join(result.fallbacks)}"
        )

    if report:
        diagnostics = codebase.diagnostics
        console.print(ranking_table("Top properties", "Property", rank(diagnostics.properties)))
        console.print(ranking_table("Unrecognized tags", "Tag", rank(diagnostics.unrecognized_tags)))
        console.print(
            ranking_table("Unrecognized props", "Prop", rank(diagnostics.unrecognized_props))
        )
