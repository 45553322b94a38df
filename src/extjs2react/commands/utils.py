"""Shared utilities for CLI commands"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from extjs2react.config import Settings, find_config_file, load_settings

console = Console()

DEBUG_ENV = "EXTJS2REACT_DEBUG"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the extjs2react CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level - shows per-unit progress and summaries
    - Debug (EXTJS2REACT_DEBUG=1): DEBUG level - shows everything
    """
    debug = bool(os.environ.get(DEBUG_ENV))
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("extjs2react")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def get_settings(config_path: Optional[Path] = None) -> Settings:
    """Settings from the given file, the nearest extjs2react.yaml, or defaults."""
    if config_path is not None:
        return load_settings(config_path)
    found = find_config_file()
    if found is not None:
        return load_settings(found)
    return Settings().resolve_paths(Path.cwd())


def ranking_table(title: str, column: str, rows: list[tuple[str, int]]) -> Table:
    table = Table(title=title)
    table.add_column(column, style="cyan")
    table.add_column("Count", justify="right")
    for name, count in rows:
        table.add_row(name, str(count))
    return table
