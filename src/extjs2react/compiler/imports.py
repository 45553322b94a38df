"""Import statements of one output unit."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from extjs2react.config import LibraryConfig
from extjs2react.util import module_specifier

log = logging.getLogger(__name__)

FRAMEWORK_SOURCE = "framework"
SOURCE_ORDER = ("app", "react", "lodash", FRAMEWORK_SOURCE)


@dataclass
class ImportPlan:
    """What one unit imports: helper tags, framework names and project classes.

    Args:
        unit_path: Path of the unit being written, relative to the output root.
        libraries: Helper library table.
    """

    unit_path: str
    libraries: list[LibraryConfig]
    tags: list[str] = field(default_factory=list)
    framework: dict[str, str] = field(default_factory=dict)
    project: dict[str, tuple[str, str | None]] = field(default_factory=dict)

    def use_tag(self, tag: str) -> None:
        if tag not in self.tags:
            self.tags.append(tag)

    def use_framework(self, export_name: str, import_name: str | None = None) -> None:
        """Import export_name from the framework module, optionally renamed."""
        self.framework.setdefault(import_name or export_name, export_name)

    def use_project(self, import_name: str, unit_path: str, export_name: str | None = None) -> None:
        """Import a project class; export_name None means the unit's default export."""
        if unit_path != self.unit_path:
            self.project.setdefault(import_name, (unit_path, export_name))

    def _sources(self) -> list[LibraryConfig]:
        known = {lib.source: lib for lib in self.libraries}
        if FRAMEWORK_SOURCE not in known:
            known[FRAMEWORK_SOURCE] = LibraryConfig(source=FRAMEWORK_SOURCE)

        def order(lib: LibraryConfig) -> tuple[int, int]:
            if lib.source in SOURCE_ORDER:
                return (SOURCE_ORDER.index(lib.source), 0)
            return (len(SOURCE_ORDER), list(known).index(lib.source))

        return sorted(known.values(), key=order)

    def statements(self) -> list[str]:
        """Import lines: helper libraries in fixed order, then project paths alphabetically."""
        claimed = {tag for lib in self.libraries for tag in lib.tags()}
        for tag in self.tags:
            if tag not in claimed:
                log.warning(f"No library provides {tag}; add it to the libraries table")

        lines: list[str] = []
        for lib in self._sources():
            default = lib.default if lib.default in self.tags else None
            named = [tag for tag in lib.named if tag in self.tags]
            if lib.source == FRAMEWORK_SOURCE:
                named += [
                    name if name == export else f"{export} as {name}"
                    for name, export in self.framework.items()
                    if name not in named
                ]
            line = _statement(default, named, lib.source)
            if line:
                lines.append(line)

        by_specifier: dict[str, tuple[list[str], list[str]]] = {}
        for name, (path, export) in self.project.items():
            defaults, named = by_specifier.setdefault(module_specifier(self.unit_path, path), ([], []))
            if export is None:
                defaults.append(name)
            else:
                named.append(name if name == export else f"{export} as {name}")

        for specifier in sorted(by_specifier):
            defaults, named = by_specifier[specifier]
            for i, default in enumerate(defaults or [None]):
                line = _statement(default, named if i == 0 else [], specifier)
                if line:
                    lines.append(line)
        return lines


def _statement(default: str | None, named: list[str], source: str) -> str | None:
    if not default and not named:
        return None
    parts = []
    if default:
        parts.append(default)
    if named:
        parts.append("{ " + ", ".join(named) + " }")
    return f"import {', '.join(parts)} from '{source}'"
