"""Compilation of one source unit into one output module."""

from __future__ import annotations

import logging
from typing import Optional

from tree_sitter import Node

from extjs2react.ast.nodes import children, node_text, unwrap
from extjs2react.ast.transform import Transformer
from extjs2react.compiler.emitter import ClassEmitter, EmittedClass
from extjs2react.compiler.imports import ImportPlan
from extjs2react.config import DEFAULT_LIBRARIES, LibraryConfig
from extjs2react.diagnostics import Diagnostics
from extjs2react.elements.capabilities import CapabilityTable
from extjs2react.elements.compiler import ElementCompiler
from extjs2react.errors import SnapshotError
from extjs2react.registry.extract import SourceUnit
from extjs2react.registry.model import ResolvedClass
from extjs2react.registry.registry import Registry
from extjs2react.rewrite.engine import RewriteEngine
from extjs2react.template.compiler import TemplateCompiler
from extjs2react.util import collapse_blank_lines

log = logging.getLogger(__name__)


class _DefineCalls(Transformer):
    """Removes the statements holding the given define calls."""

    def __init__(self, calls: set[int]) -> None:
        super().__init__()
        self.calls = calls

    def visit_expression_statement(self, node: Node) -> Optional[str]:
        expression = children(node)
        if expression and unwrap(expression[0]).id in self.calls:
            return ""
        return None


def emitted_records(registry: Registry, unit_path: str) -> list[ResolvedClass]:
    """Classes of a unit that are compiled, in declaration order."""
    return [
        r
        for r in registry.classes_in(unit_path)
        if not r.discard and not r.unparsed and r.model.body is not None
    ]


class UnitCompiler:
    """Compiles the units of a finalized registry.

    Args:
        registry: Finalized registry holding the project's classes.
        capabilities: Capability table for the element compiler.
        libraries: Helper library import table.
        engine: Rewrite engine run over every emitted class.
        diagnostics: Receives fallbacks and element tallies.
    """

    def __init__(
        self,
        registry: Registry,
        capabilities: CapabilityTable,
        libraries: Optional[list[LibraryConfig]] = None,
        engine: Optional[RewriteEngine] = None,
        templates: Optional[TemplateCompiler] = None,
        diagnostics: Optional[Diagnostics] = None,
    ) -> None:
        self.registry = registry
        self.capabilities = capabilities
        self.libraries = libraries if libraries is not None else list(DEFAULT_LIBRARIES)
        self.engine = engine or RewriteEngine()
        self.templates = templates or TemplateCompiler()
        self.diagnostics = diagnostics or registry.diagnostics

    def compile(self, unit: SourceUnit) -> Optional[str]:
        """Output source of unit, or None when all its classes were assimilated.

        Raises:
            SnapshotError: If the registry was rebuilt from a snapshot.
        """
        if self.registry.from_snapshot or unit.from_snapshot:
            raise SnapshotError(f"Cannot transpile {unit.path}: registry was loaded from a snapshot")
        if not unit.parseable or unit.tree is None:
            return unit.source

        records = self._records(unit)
        if records and all(r.discard for r in records):
            log.info(f"Removing {unit.path}: all classes assimilated")
            return None

        emitted = [r for r in records if not r.discard and not r.unparsed and r.model.body is not None]
        if not emitted:
            return unit.source

        names = self.import_names(emitted)
        plan = ImportPlan(unit_path=unit.path, libraries=self.libraries)
        self._plan_classes(plan, names, emitted)

        emitter = ClassEmitter(
            names=lambda name: names.get(name) or self._fallback_name(name),
            elements=lambda: self._element_compiler(names, plan),
            single=len(emitted) == 1,
        )
        accessors = self._accessors(names)
        class_names = self._class_names(names)

        blocks: list[str] = []
        exports: list[str] = []
        for record in records:
            if record.discard:
                continue
            if record.unparsed or record.model.body is None:
                if record.model.call is not None:
                    blocks.append(node_text(record.model.call))
                continue
            try:
                result = self._emit(emitter, record, accessors, class_names)
            except Exception as e:
                log.error(f"Failed to compile {record.name} ({unit.path}): {e}")
                log.debug("Compilation failure", exc_info=True)
                self.diagnostics.fallbacks.append(record.name)
                blocks.append(node_text(record.model.call))
                continue
            blocks.append(result.code)
            if result.export:
                exports.append(result.export)
            for tag in result.libraries:
                plan.use_tag(tag)
            for component in result.components:
                plan.use_framework(component)

        handled = {r.model.call.id for r in records if r.model.call is not None}
        leftovers = _DefineCalls(handled).transform(unit.tree).strip()

        sections = ["\n".join(plan.statements()), leftovers, *blocks, "\n".join(exports)]
        return collapse_blank_lines("\n\n".join(s for s in sections if s)).strip() + "\n"

    def _records(self, unit: SourceUnit) -> list[ResolvedClass]:
        """Registered classes of unit; duplicates registered elsewhere are left out."""
        records = []
        for model in unit.classes:
            record = self.registry.resolved(model.name)
            if record is not None and record.model is model:
                records.append(record)
        return records

    def _emit(
        self,
        emitter: ClassEmitter,
        record: ResolvedClass,
        accessors: frozenset[str],
        class_names: dict[str, str],
    ) -> EmittedClass:
        controller = self.registry.resolved(record.controller) if record.controller else None
        emitted = emitter.emit(record, controller)
        result = self.engine.rewrite(
            emitted.code,
            accessors=(record.all_configs | accessors) if record.is_component else accessors,
            class_names=class_names,
            members=emitted.members if record.is_component else None,
            props=emitted.props,
        )
        emitted.code = result.code
        emitted.libraries += [lib for lib in result.libraries if lib not in emitted.libraries]
        return emitted

    # Naming

    def import_names(self, emitted: list[ResolvedClass]) -> dict[str, str]:
        """Class name -> identifier in this unit.

        Local classes keep their export names; used classes sharing an export
        name with an earlier one get a numeric suffix (``Button``, ``Button2``).
        """
        names = {r.name: r.export_name for r in emitted}
        taken = set(names.values())
        controllers = {r.controller for r in emitted if r.controller}

        used: list[str] = []
        for record in emitted:
            sources = [record]
            if record.controller:
                controller = self.registry.resolved(record.controller)
                if controller is not None:
                    sources.append(controller)
            for source in sources:
                used += [n for n in source.classes_used if n not in used]

        for class_name in used:
            if class_name in names or class_name in controllers:
                continue
            record = self.registry.resolved(class_name)
            if record is None or record.discard:
                continue
            base = name = record.export_name
            suffix = 2
            while name in taken:
                name = f"{base}{suffix}"
                suffix += 1
            names[class_name] = name
            taken.add(name)
        return names

    def _fallback_name(self, class_name: str) -> str:
        record = self.registry.resolved(class_name)
        return record.export_name if record is not None else class_name

    def _class_names(self, names: dict[str, str]) -> dict[str, str]:
        """Every spelling of a class (name and alternate names) -> its import name."""
        mapping: dict[str, str] = {}
        for class_name, import_name in names.items():
            mapping[class_name] = import_name
            record = self.registry.resolved(class_name)
            if record is not None:
                for alternate in record.model.alternate_names:
                    mapping.setdefault(alternate, import_name)
        return mapping

    def _accessors(self, names: dict[str, str]) -> frozenset[str]:
        """Accessors of the unit's classes and of the classes they use."""
        accessors: frozenset[str] = frozenset()
        for class_name in names:
            record = self.registry.resolved(class_name)
            if record is not None:
                accessors |= record.all_accessors
        return accessors

    # Imports

    def _plan_classes(self, plan: ImportPlan, names: dict[str, str], emitted: list[ResolvedClass]) -> None:
        local = {r.name for r in emitted}
        for class_name, import_name in names.items():
            if class_name in local:
                continue
            record = self.registry.resolved(class_name)
            if record is None:
                continue
            if not self.registry.owns(class_name):
                plan.use_framework(record.export_name, import_name)
            else:
                plan.use_project(import_name, record.unit_path, self._export_of(record))

    def _export_of(self, record: ResolvedClass) -> Optional[str]:
        """Named export of record in its unit; None for a default export."""
        siblings = emitted_records(self.registry, record.unit_path)
        if len(siblings) <= 1:
            return None
        name = record.export_name
        if record.singleton:
            return name[:1].lower() + name[1:]
        return name

    def _element_compiler(self, names: dict[str, str], plan: ImportPlan) -> ElementCompiler:
        def resolve_widget(tag: str) -> Optional[str]:
            record = self.registry.resolved_for_alias(f"widget.{tag}")
            if record is None:
                return None
            if record.name not in names:
                names[record.name] = record.export_name
                self._plan_classes(plan, {record.name: record.export_name}, [])
            return names[record.name]

        return ElementCompiler(
            self.capabilities,
            resolve_widget=resolve_widget,
            naming=self.registry.naming,
            diagnostics=self.diagnostics,
            templates=self.templates,
        )
