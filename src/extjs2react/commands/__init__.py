"""CLI commands"""

from .diagnostics import calls_command, classnames_command
from .manifest import manifest_command
from .snapshot import snapshot_command
from .transpile import transpile_command

__all__ = [
    "calls_command",
    "classnames_command",
    "manifest_command",
    "snapshot_command",
    "transpile_command",
]
