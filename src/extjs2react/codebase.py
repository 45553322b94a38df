"""The transpile pipeline: load, register, finalize, compile, write."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from extjs2react.compiler.unit import UnitCompiler
from extjs2react.config import Settings
from extjs2react.diagnostics import Diagnostics, rank, rank_calls
from extjs2react.elements.capabilities import CapabilityTable
from extjs2react.errors import ConfigError, SnapshotError
from extjs2react.framework import load_framework
from extjs2react.registry.extract import SourceUnit, load_unit
from extjs2react.registry.registry import Registry
from extjs2react.registry.snapshot import load_or_build
from extjs2react.workspace import Workspace

log = logging.getLogger(__name__)

SOURCE_SUFFIX = ".js"


@dataclass
class TranspileReport:
    written: list[str] = field(default_factory=list)
    copied: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    fallbacks: list[str] = field(default_factory=list)


class Codebase:
    """One Ext JS application plus the framework it is built on."""

    def __init__(self, settings: Settings, diagnostics: Optional[Diagnostics] = None) -> None:
        self.settings = settings
        self.diagnostics = diagnostics or Diagnostics()
        self._framework: Optional[Registry] = None
        self._framework_loaded = False

    # Loading

    def framework(self) -> Optional[Registry]:
        """Framework registry, from its snapshot when a snapshot directory is set."""
        if self._framework_loaded:
            return self._framework
        self._framework_loaded = True

        path = self.settings.framework_file
        if path is None:
            return None

        def build() -> Registry:
            return load_framework(
                path,
                define_callee=self.settings.define_callee,
                words=tuple(self.settings.words),
                component_base=self.settings.component_base,
                application_base=self.settings.application_base,
                diagnostics=self.diagnostics,
            )

        if self.settings.snapshot_dir is not None:
            self._framework = load_or_build(self.settings.snapshot_dir, f"framework:{path}", build)
        else:
            self._framework = build()
        return self._framework

    def source_files(self) -> list[Path]:
        source_dir = self.settings.source_dir
        if not source_dir.is_dir():
            raise ConfigError(f"Source directory not found: {source_dir}")
        return sorted(p for p in source_dir.rglob("*") if p.is_file())

    def relative(self, path: Path) -> str:
        return path.relative_to(self.settings.source_dir).as_posix()

    def build(self) -> Registry:
        """Parse every source unit and return the finalized registry."""
        registry = Registry(
            self.framework(),
            words=self.settings.words,
            component_base=self.settings.component_base,
            application_base=self.settings.application_base,
            diagnostics=self.diagnostics,
        )
        for path in self.source_files():
            if path.suffix != SOURCE_SUFFIX:
                continue
            unit = load_unit(self.relative(path), path.read_text(), self.settings.define_callee)
            registry.register(unit)
        registry.finalize()
        return registry

    def load(self, snapshot_id: Optional[str] = None) -> Registry:
        """Finalized project registry; with snapshot_id, from that cached snapshot."""
        if snapshot_id is None:
            return self.build()
        if self.settings.snapshot_dir is None:
            raise ConfigError("snapshot_dir is not configured")
        return load_or_build(self.settings.snapshot_dir, snapshot_id, self.build, self.framework())

    # Transpiling

    def capabilities(self) -> CapabilityTable:
        return CapabilityTable.load(self.settings.capabilities)

    def transpile(self, registry: Optional[Registry] = None) -> TranspileReport:
        """Compile every unit into the output root.

        Raises:
            TargetDirectoryError: Before anything is written, if the output
                root exists without the generator stamp.
            SnapshotError: If registry was rebuilt from a snapshot.
        """
        workspace = Workspace(self.settings.target_dir)
        workspace.check()

        registry = registry or self.build()
        if registry.from_snapshot:
            raise SnapshotError("Cannot transpile a registry loaded from a snapshot")
        compiler = UnitCompiler(
            registry,
            self.capabilities(),
            libraries=self.settings.libraries,
            diagnostics=self.diagnostics,
        )

        workspace.prepare()
        report = TranspileReport()
        units = {unit.path: unit for unit in registry.units}

        for path in self.source_files():
            relative = self.relative(path)
            unit = units.get(relative)
            if unit is None or not unit.parseable:
                workspace.copy(relative, path)
                report.copied.append(relative)
                continue

            output = self._compile_unit(compiler, unit)
            if output is None:
                workspace.remove(relative)
                report.removed.append(relative)
            else:
                workspace.write(relative, output)
                report.written.append(relative)

        report.fallbacks = list(self.diagnostics.fallbacks)
        log.info(
            f"Wrote {len(report.written)} units, copied {len(report.copied)}, "
            f"removed {len(report.removed)}"
        )
        return report

    def _compile_unit(self, compiler: UnitCompiler, unit: SourceUnit) -> Optional[str]:
        try:
            return compiler.compile(unit)
        except SnapshotError:
            raise
        except Exception as e:
            log.error(f"Failed to compile {unit.path}; copying it unmodified: {e}")
            log.debug("Unit compilation failure", exc_info=True)
            self.diagnostics.fallbacks.append(unit.path)
            return unit.source

    # Diagnostics

    @staticmethod
    def class_names(registry: Registry) -> list[tuple[str, int]]:
        """Distinct export names, most shared first."""
        return rank(Counter(record.export_name for record in registry.classes()))

    @staticmethod
    def calls(registry: Registry) -> list[tuple[str, int]]:
        return rank_calls(registry.method_calls())
