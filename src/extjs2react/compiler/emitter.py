"""Resolved class records -> ES6 class or function component source."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from extjs2react.ast.nodes import function_parts, is_dotted, is_function, quote
from extjs2react.compiler.accessors import (
    AccessorDescriptor,
    config_block,
    function_source,
    hook,
    override_field,
    synthesize_accessor,
    value_source,
)
from extjs2react.elements.compiler import ElementCompiler
from extjs2react.registry.model import MemberEntry, ResolvedClass
from extjs2react.util import code, dedent_fragment

log = logging.getLogger(__name__)

CONSTRUCTOR = "constructor"
CLASS_CONSTRUCTOR = "construct"
COMPONENT_CONSTRUCTOR = "REWRITE_constructor"
INITIALIZE = "initialize"


def member_key(name: str) -> str:
    """Identifier keys as is, anything else quoted."""
    return name if is_dotted(name) and "." not in name else quote(name)


def method_source(entry: MemberEntry, name: Optional[str] = None, static: bool = False) -> str:
    """Class method syntax for a function-valued member."""
    fn = entry.value
    params, body, is_async = function_parts(fn)
    generator = fn.type == "generator_function" or any(c.type == "*" for c in fn.children)
    prefix = ("static " if static else "") + ("async " if is_async else "") + ("*" if generator else "")
    return prefix + member_key(name or entry.name) + params + dedent_fragment(body)


@dataclass
class EmittedClass:
    """Source of one emitted class plus what it needs from the import plan."""

    record: ResolvedClass
    name: str
    code: str
    export: str = ""
    libraries: list[str] = field(default_factory=list)
    components: list[str] = field(default_factory=list)
    members: frozenset[str] = frozenset()
    props: frozenset[str] = frozenset()

    @property
    def is_component(self) -> bool:
        return self.record.is_component


class ClassEmitter:
    """Emits one resolved class.

    Args:
        names: Class name -> identifier usable in the unit being compiled.
        elements: Factory for the element compiler of a component.
        single: Whether the class is the only one emitted by its unit.
    """

    def __init__(
        self,
        names: Callable[[str], str],
        elements: Callable[[], ElementCompiler],
        single: bool = True,
    ) -> None:
        self.names = names
        self.elements = elements
        self.single = single

    def emit(self, record: ResolvedClass, controller: Optional[ResolvedClass] = None) -> EmittedClass:
        if record.is_component:
            emitted = self.component(record, controller)
        else:
            emitted = self.es6_class(record, controller)
        emitted.export = self.export(record, emitted.name)
        return emitted

    # Shared

    def _merged(
        self, record: ResolvedClass, controller: Optional[ResolvedClass], kind: str
    ) -> list[MemberEntry]:
        """Members of one kind, followed by those of the assimilated controller."""
        entries = list(getattr(record.members, kind))
        if controller is None:
            return entries
        taken = {e.name for e in entries}
        for entry in getattr(controller.members, kind):
            if entry.name in taken:
                log.warning(
                    f"Skipping {entry.name} of {controller.name}: already defined by {record.name}"
                )
                continue
            entries.append(entry)
        return entries

    def export(self, record: ResolvedClass, name: str) -> str:
        lines = [
            f"Object.assign({name}.prototype, {self.names(mixin)}.prototype)"
            for mixin in record.mixins
        ]
        if self.export_on_head(record):
            return "\n".join(lines)
        if record.singleton:
            if self.single:
                lines.append(f"export default (new {name}())")
            else:
                lines.append(f"export const {name[:1].lower()}{name[1:]} = new {name}()")
        else:
            lines.append(f"export default {name}" if self.single else f"export {{ {name} }}")
        return "\n".join(lines)

    @staticmethod
    def export_on_head(record: ResolvedClass) -> bool:
        return not record.mixins and not record.singleton and not record.is_component

    # ES6 classes

    def es6_class(self, record: ResolvedClass, controller: Optional[ResolvedClass]) -> EmittedClass:
        name = self.names(record.name)
        head = f"class {name}"
        if record.parent:
            head += f" extends {self.names(record.parent)}"
        if self.export_on_head(record):
            head = ("export default " if self.single else "export ") + head

        accessors = self.accessors(record)
        hooks = {h for a in accessors for h in a.hook_methods}

        sections: list[str] = []
        sections += [
            f"static {member_key(e.name)} = {value_source(e.value)}"
            for e in self._merged(record, controller, "static_properties")
        ]
        sections += [
            f"{member_key(e.name)} = {value_source(e.value)}"
            for e in self._merged(record, controller, "properties")
        ]
        sections += config_block(accessors)
        sections += [
            method_source(e, static=True)
            for e in self._merged(record, controller, "static_methods")
        ]
        sections += [
            method_source(e, CLASS_CONSTRUCTOR if e.name == CONSTRUCTOR else None)
            for e in self._merged(record, controller, "methods")
            if e.name not in hooks
        ]

        body = "\n\n".join(sections)
        source = code(head + " {", [body], "}") if body else head + " {}"
        return EmittedClass(record=record, name=name, code=source)

    def accessors(self, record: ResolvedClass) -> list[AccessorDescriptor]:
        """Accessor descriptors of the config members, in declaration order.

        Each config is emitted once; inherited configs a class re-declares
        become plain default overrides.
        """
        local = set(record.local_configs)
        evented = set(record.evented_configs)
        out: list[AccessorDescriptor] = []
        seen: set[str] = set()
        for entry in record.members.configs:
            if entry.name in seen:
                continue
            seen.add(entry.name)
            if entry.name in local:
                out.append(synthesize_accessor(entry, record.members, entry.name in evented))
            else:
                out.append(override_field(entry))
        return out

    # Function components

    def component(self, record: ResolvedClass, controller: Optional[ResolvedClass]) -> EmittedClass:
        name = self.names(record.name)
        local = set(record.local_configs)
        configs = record.all_configs
        libraries = ["React"]

        defaults: list[str] = []
        root_members = []
        seen: set[str] = set()
        for entry in record.members.configs:
            if entry.name in seen:
                continue
            seen.add(entry.name)
            if entry.name in local:
                defaults.append(f"{member_key(entry.name)}: {value_source(entry.value)},")
            else:
                root_members.append(entry.node)

        methods = self._merged(record, controller, "methods")
        hooks: list[str] = []
        consumed: set[str] = set()
        for config in sorted(configs):
            apply = hook(record.members, "apply", config)
            if apply is not None:
                hooks.append(
                    f"props.{config} = useMemo({function_source(apply.value)}, [props.{config}])"
                )
                consumed.add(apply.name)
                _use(libraries, "useMemo")
            update = hook(record.members, "update", config)
            if update is not None:
                hooks.append(f"useEffect({function_source(update.value)}, [props.{config}])")
                consumed.add(update.name)
                _use(libraries, "useEffect")
        for entry in methods:
            if entry.name == INITIALIZE:
                hooks.append(f"useEffect({function_source(entry.value)}, [])")
                consumed.add(entry.name)
                _use(libraries, "useEffect")

        body: list = []
        if defaults:
            body += ["props = {", defaults + ["...props"], "}", ""]
        for entry in self._merged(record, controller, "properties"):
            body += [f"let {entry.name} = {value_source(entry.value)}", ""]
        for line in hooks:
            body += [line, ""]
        for entry in methods:
            if entry.name in consumed:
                continue
            local_name = COMPONENT_CONSTRUCTOR if entry.name == CONSTRUCTOR else entry.name
            body += [f"const {local_name} = {function_source(entry.value)}", ""]

        elements = self.elements()
        if record.parent:
            items = record.members.get("items")
            root = elements.compile_root(
                self.names(record.parent),
                root_members,
                items.value if items is not None and items.block is None else None,
            )
            body.append(elements.render(root))
        for lib in elements.libraries:
            _use(libraries, lib)
        while body and body[-1] == "":
            body.pop()

        statics = [
            f"{name}.{e.name} = "
            + (function_source(e.value) if is_function(e.value) else value_source(e.value))
            for e in self._merged(record, controller, "static_properties")
            + self._merged(record, controller, "static_methods")
            if is_dotted(e.name) and "." not in e.name
        ]

        source = code(f"function {name}(props){{", body, "}")
        if statics:
            source += "\n\n" + "\n".join(statics)

        members = {e.name for e in methods if e.name not in consumed}
        members |= {e.name for e in self._merged(record, controller, "properties")}
        members |= set(elements.bindings)
        return EmittedClass(
            record=record,
            name=name,
            code=source,
            libraries=libraries,
            components=list(elements.components),
            members=frozenset(members),
            props=frozenset(configs),
        )


def _use(libraries: list[str], tag: str) -> None:
    if tag not in libraries:
        libraries.append(tag)
