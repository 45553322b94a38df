"""Class/alias registry and inheritance resolver.

Two phases:

1. ``register(unit)`` for every unit: collects raw class models and aliases.
2. ``finalize()`` once: resolves parents, mixins, plugins, config partitions,
   member classification, assimilation and export names into immutable
   ``ResolvedClass`` records.

Anything that needs resolved data raises ``RegistryNotFinalizedError`` when
called between the two phases. A registry may delegate lookups to a parent
(framework) registry, which must already be finalized.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Iterator, Optional

from extjs2react.ast.nodes import is_function
from extjs2react.diagnostics import Diagnostics
from extjs2react.errors import Extjs2ReactError, RegistryNotFinalizedError
from extjs2react.naming import NamingContext
from extjs2react.registry.extract import SourceUnit
from extjs2react.registry.model import (
    CONFIG_BLOCKS,
    RESERVED_MEMBER_NAMES,
    TRANSFORMED_COMPONENT_MEMBERS,
    TRANSFORMED_MEMBERS,
    TREAT_AS_CONFIGS,
    ClassMembers,
    ClassModel,
    MemberEntry,
    ResolvedClass,
)

log = logging.getLogger(__name__)

_EMPTY: tuple[frozenset[str], frozenset[str]] = (frozenset(), frozenset())


class Registry:
    """Global class-name and alias tables for one codebase."""

    def __init__(
        self,
        parent: Optional["Registry"] = None,
        *,
        words: Iterable[str] = (),
        component_base: str = "Ext.Widget",
        application_base: str = "Ext.app.Application",
        diagnostics: Optional[Diagnostics] = None,
    ) -> None:
        self.parent = parent
        self.custom_words = list(words)
        self.component_base = component_base
        self.application_base = application_base
        self.diagnostics = diagnostics or Diagnostics()
        self.units: list[SourceUnit] = []
        self.naming: Optional[NamingContext] = None
        self.from_snapshot = False

        self._classes: dict[str, ClassModel] = {}
        self._aliases: dict[str, str] = {}
        self._alternate: dict[str, str] = {}
        self._resolved: Optional[dict[str, ResolvedClass]] = None

    # Phase 1

    def register(self, unit: SourceUnit) -> list[ClassModel]:
        """Add the classes of one unit; duplicates are reported, first wins."""
        if self._resolved is not None:
            raise Extjs2ReactError(
                f"Cannot register {unit.path}: registry is already finalized"
            )

        self.units.append(unit)
        registered = []
        for cls in unit.classes:
            if cls.name in self._classes:
                log.warning(
                    f"Duplicate class: {cls.name} ({unit.path}); "
                    f"keeping the one from {self._classes[cls.name].unit_path}"
                )
                self.diagnostics.duplicate_classes.append(cls.name)
                continue

            self._classes[cls.name] = cls
            for alias in cls.aliases:
                if alias in self._aliases:
                    log.warning(
                        f"Duplicate alias: {alias} ({cls.name}); "
                        f"keeping {self._aliases[alias]}"
                    )
                    self.diagnostics.duplicate_aliases.append(alias)
                    continue
                self._aliases[alias] = cls.name
            for name in cls.alternate_names:
                self._alternate.setdefault(name, cls.name)
            registered.append(cls)

        return registered

    def resolve_alias(self, alias: str) -> Optional[str]:
        """Class name for alias: local table first, then the parent registry."""
        name = self._aliases.get(alias)
        if name is None and self.parent is not None:
            return self.parent.resolve_alias(alias)
        return name

    def resolve_class(self, name: str) -> Optional[ClassModel]:
        """Raw model for a class or alternate class name."""
        name = self._alternate.get(name, name)
        model = self._classes.get(name)
        if model is None and self.parent is not None:
            return self.parent.resolve_class(name)
        return model

    def canonical_name(self, name: str) -> Optional[str]:
        model = self.resolve_class(name)
        return model.name if model is not None else None

    def owns(self, name: str) -> bool:
        """True when name is declared by this registry, not by a parent."""
        return self._alternate.get(name, name) in self._classes

    def unit(self, path: str) -> Optional[SourceUnit]:
        for unit in self.units:
            if unit.path == path:
                return unit
        return None

    @property
    def class_names(self) -> list[str]:
        return list(self._classes)

    @property
    def aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    # Phase 2

    @property
    def finalized(self) -> bool:
        return self._resolved is not None

    def finalize(self, naming: Optional[NamingContext] = None) -> None:
        """Resolve every registered class. Call once, after all units."""
        if self._resolved is not None:
            raise Extjs2ReactError("Registry is already finalized")
        if self.parent is not None and not self.parent.finalized:
            raise RegistryNotFinalizedError("the parent registry")

        base = self.parent.naming if self.parent is not None else None
        self.naming = naming or NamingContext.build(
            self.custom_words, self._classes.keys(), base=base
        )

        links = {name: self._links(model) for name, model in self._classes.items()}
        totals: dict[str, tuple[frozenset[str], frozenset[str]]] = {}
        ancestors = {name: self._ancestors(name, links) for name in self._classes}
        components = {
            name: self.component_base == name or self.component_base in ancestors[name]
            for name in self._classes
        }

        def total(name: str, stack: tuple[str, ...]) -> tuple[frozenset[str], frozenset[str]]:
            if name in totals:
                return totals[name]
            if name not in self._classes:
                record = self.parent.resolved(name) if self.parent is not None else None
                return (record.all_configs, record.all_accessors) if record else _EMPTY
            if name in stack:
                log.error(f"Circular inheritance: {' -> '.join(stack + (name,))}")
                return _EMPTY

            inherited_configs, inherited_accessors = self._inherited(name, links, stack, total)
            model = self._classes[name]
            declared = {c for block in CONFIG_BLOCKS for c in model.declared_configs[block]}
            accessors = frozenset() if components[name] else frozenset(declared)
            totals[name] = (
                frozenset(declared) | inherited_configs,
                accessors | inherited_accessors,
            )
            return totals[name]

        resolved: dict[str, ResolvedClass] = {}
        owners: dict[str, str] = {}

        for name, model in self._classes.items():
            parent, mixins, plugins = links[name]
            inherited_configs, inherited_accessors = self._inherited(name, links, (), total)
            is_component = components[name]

            def local(block: str) -> tuple[str, ...]:
                return tuple(
                    sorted(set(model.declared_configs[block]) - inherited_configs)
                )

            configs, cached, evented = (local(block) for block in CONFIG_BLOCKS)
            declared = {c for block in CONFIG_BLOCKS for c in model.declared_configs[block]}
            all_configs = inherited_configs | set(configs) | set(cached) | set(evented)
            members = self._classify(model, all_configs, is_component)

            for entry in members.properties:
                self.diagnostics.properties[entry.name] += 1

            controller = self._controller(model, owners)
            classes_used, unknown_aliases, unknown_classes = self._classes_used(
                model, links[name]
            )

            resolved[name] = ResolvedClass(
                model=model,
                export_name=self.naming.export_name(name, model.aliases),
                parent=parent,
                ancestors=ancestors[name],
                mixins=mixins,
                plugins=plugins,
                configs=configs,
                cached_configs=cached,
                evented_configs=evented,
                inherited_configs=inherited_configs,
                accessors=() if is_component else tuple(sorted(declared)),
                inherited_accessors=inherited_accessors,
                members=members,
                is_component=is_component,
                singleton=model.singleton or self.application_base in ancestors[name],
                controller=controller,
                classes_used=classes_used,
                unknown_aliases=unknown_aliases,
                unknown_classes=unknown_classes,
            )

        for controller, owner in owners.items():
            record = resolved[controller]
            resolved[controller] = replace(record, assimilated_by=owner)

        self._resolved = resolved
        log.info(f"Resolved {len(resolved)} classes, {len(self._aliases)} aliases")

    def _links(self, model: ClassModel) -> tuple[Optional[str], tuple[str, ...], tuple[str, ...]]:
        """Resolved parent, mixins and plugins of a raw model."""
        parent = None
        if model.parent_ref:
            parent = self.canonical_name(model.parent_ref)
            if parent is None:
                log.warning(f"Unknown parent class {model.parent_ref} ({model.name})")
                self.diagnostics.unknown_classes[model.parent_ref] += 1

        mixins = tuple(
            dict.fromkeys(
                n for n in (self.canonical_name(ref) for ref in model.mixin_refs) if n
            )
        )

        plugins: list[str] = []
        for ref in model.plugin_refs:
            name = self.canonical_name(ref)
            if name is None:
                alias = self.resolve_alias(f"plugin.{ref}")
                name = self.canonical_name(alias) if alias else None
            if name is not None and name not in plugins:
                plugins.append(name)

        return parent, mixins, tuple(plugins)

    def _ancestors(self, name: str, links: dict) -> tuple[str, ...]:
        chain: list[str] = []
        current = links[name][0]
        while current is not None and current not in chain and current != name:
            chain.append(current)
            if current in links:
                current = links[current][0]
            else:
                record = self.parent.resolved(current) if self.parent is not None else None
                if record is not None:
                    chain.extend(a for a in record.ancestors if a not in chain)
                break
        return tuple(chain)

    def _inherited(self, name, links, stack, total) -> tuple[frozenset[str], frozenset[str]]:
        parent, mixins, plugins = links[name]
        configs: frozenset[str] = frozenset()
        accessors: frozenset[str] = frozenset()
        for source in ([parent] if parent else []) + list(mixins) + list(plugins):
            c, a = total(source, stack + (name,))
            configs |= c
            accessors |= a
        return configs, accessors

    def _classify(
        self, model: ClassModel, all_configs: frozenset[str], is_component: bool
    ) -> ClassMembers:
        transformed_names = TRANSFORMED_MEMBERS + (
            TRANSFORMED_COMPONENT_MEMBERS if is_component else ()
        )
        kinds: dict[str, list[MemberEntry]] = {
            "configs": [],
            "properties": [],
            "methods": [],
            "static_properties": [],
            "static_methods": [],
            "transformed": [],
        }
        by_name: dict[str, MemberEntry] = {}

        for entry in model.members:
            by_name.setdefault(entry.name, entry)
            if entry.block is not None or (
                entry.name in all_configs or entry.name in TREAT_AS_CONFIGS
            ):
                kinds["configs"].append(entry)
            elif entry.name in transformed_names:
                kinds["transformed"].append(entry)
            elif is_function(entry.value):
                kinds["methods"].append(entry)
            else:
                kinds["properties"].append(entry)

        for entry in model.statics:
            kind = "static_methods" if is_function(entry.value) else "static_properties"
            kinds[kind].append(entry)

        if set(by_name) & set(RESERVED_MEMBER_NAMES):
            log.error(f"Class definition includes reserved member names ({model.name})")

        return ClassMembers(
            configs=tuple(kinds["configs"]),
            properties=tuple(kinds["properties"]),
            methods=tuple(kinds["methods"]),
            static_properties=tuple(kinds["static_properties"]),
            static_methods=tuple(kinds["static_methods"]),
            transformed=tuple(kinds["transformed"]),
            by_name=by_name,
        )

    def _controller(self, model: ClassModel, owners: dict[str, str]) -> Optional[str]:
        """Project class assimilated into model through its controller alias."""
        if not model.controller_alias:
            return None
        alias_target = self.resolve_alias(model.controller_alias)
        name = self.canonical_name(alias_target) if alias_target else None
        if name is None or name == model.name or name not in self._classes:
            return None
        if name in owners:
            log.error(
                f"Assimilated {name} into more than one class: "
                f"{owners[name]} and {model.name}"
            )
            return None
        owners[name] = model.name
        return name

    def _classes_used(self, model: ClassModel, links) -> tuple[tuple[str, ...], tuple[str, ...], tuple[str, ...]]:
        used: list[str] = []
        unknown_aliases: list[str] = []
        unknown_classes: list[str] = []

        for alias in model.aliases_used:
            target = self.resolve_alias(alias)
            name = self.canonical_name(target) if target else None
            if name is None:
                unknown_aliases.append(alias)
                self.diagnostics.unknown_aliases[alias] += 1
                log.warning(f"Unknown alias {alias} ({model.name})")
                continue
            used.append(name)

        parent, mixins, plugins = links
        for name in ([parent] if parent else []) + list(mixins) + list(plugins):
            used.append(name)

        for ref in model.class_refs:
            name = self.canonical_name(ref)
            if name is not None:
                used.append(name)

        if model.parent_ref and parent is None:
            unknown_classes.append(model.parent_ref)

        return (
            tuple(n for n in dict.fromkeys(used) if n != model.name),
            tuple(unknown_aliases),
            tuple(unknown_classes),
        )

    # Resolved lookups

    def _require_finalized(self, what: str) -> dict[str, ResolvedClass]:
        if self._resolved is None:
            raise RegistryNotFinalizedError(what)
        return self._resolved

    def resolved(self, name: str) -> Optional[ResolvedClass]:
        """Resolved record for a class or alternate name, searching parents."""
        records = self._require_finalized(f"resolved class {name}")
        canonical = self._alternate.get(name, name)
        record = records.get(canonical)
        if record is None and self.parent is not None:
            return self.parent.resolved(canonical)
        return record

    def resolved_for_alias(self, alias: str) -> Optional[ResolvedClass]:
        name = self.resolve_alias(alias)
        return self.resolved(name) if name else None

    def classes(self) -> Iterator[ResolvedClass]:
        """Resolved records of this registry's own classes, in registration order."""
        return iter(self._require_finalized("the class list").values())

    def classes_in(self, unit_path: str) -> list[ResolvedClass]:
        records = self._require_finalized(f"classes of {unit_path}")
        return [r for r in records.values() if r.unit_path == unit_path]

    def method_calls(self) -> list[str]:
        return [call for model in self._classes.values() for call in model.method_calls]
