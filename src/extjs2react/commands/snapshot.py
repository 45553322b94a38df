"""Snapshot command - cache the resolved registry"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from extjs2react.codebase import Codebase
from extjs2react.errors import ConfigError
from extjs2react.registry.snapshot import save_snapshot, snapshot_path, to_snapshot

from .utils import console, get_settings


def snapshot_command(snapshot_id: str, config_path: Optional[Path] = None) -> None:
    """Build the registry and save it under snapshot_id."""
    settings = get_settings(config_path)
    if settings.snapshot_dir is None:
        raise ConfigError("snapshot_dir is not configured")

    codebase = Codebase(settings)
    registry = codebase.build()
    path = snapshot_path(settings.snapshot_dir, snapshot_id)
    save_snapshot(path, to_snapshot(registry))
    console.print(f"[green]Saved {len(registry.class_names)} classes[/green] to {path}")
