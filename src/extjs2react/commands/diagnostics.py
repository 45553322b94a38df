"""Diagnostic commands - rank export names and call frequencies"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from extjs2react.codebase import Codebase

from .utils import console, get_settings, ranking_table


def classnames_command(config_path: Optional[Path] = None, snapshot: Optional[str] = None) -> None:
    """Print the distinct export names of the application's classes."""
    codebase = Codebase(get_settings(config_path))
    registry = codebase.load(snapshot)
    console.print(ranking_table("Class names", "Export name", codebase.class_names(registry)))


def calls_command(
    config_path: Optional[Path] = None,
    snapshot: Optional[str] = None,
    limit: int = 50,
) -> None:
    """Print call frequencies normalized to Ext.x / Math.x / .x."""
    codebase = Codebase(get_settings(config_path))
    registry = codebase.load(snapshot)
    rows = codebase.calls(registry)
    console.print(ranking_table("Calls", "Call", rows[:limit] if limit > 0 else rows))
