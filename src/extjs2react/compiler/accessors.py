"""Config accessors: plain fields, or get/set pairs wrapping apply/update hooks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from tree_sitter import Node

from extjs2react.ast.nodes import function_parts, is_function, node_text
from extjs2react.naming import upper_first
from extjs2react.registry.model import ClassMembers, MemberEntry
from extjs2react.rendering import render
from extjs2react.util import dedent_fragment

log = logging.getLogger(__name__)

ACCESSOR_TEMPLATE = "accessor.js.j2"


def function_source(fn: Node) -> str:
    """A function-like node as a ``function(...){...}`` expression."""
    params, body, is_async = function_parts(fn)
    return ("async " if is_async else "") + f"function{params}" + dedent_fragment(body)


def value_source(value: Node) -> str:
    return dedent_fragment(node_text(value)).rstrip().rstrip(";")


@dataclass(frozen=True)
class AccessorDescriptor:
    """How one config is stored and exposed on the emitted class."""

    name: str
    default: str
    apply: Optional[str] = None
    update: Optional[str] = None
    evented: bool = False
    hook_methods: tuple[str, ...] = ()

    @property
    def plain(self) -> bool:
        return self.apply is None and self.update is None and not self.evented

    @property
    def internal_name(self) -> str:
        return self.name if self.plain else f"_{self.name}"

    @property
    def flag(self) -> str:
        return f"{self.internal_name}Initialized"

    @property
    def event_name(self) -> str:
        return f"{self.name.lower()}change"

    def field(self, width: int = 0) -> str:
        """Storage field declaration, ``=`` aligned at width."""
        return f"{self.internal_name.ljust(width)} = {self.default}"

    def methods(self) -> Optional[str]:
        """Getter and setter source; None for plain fields."""
        if self.plain:
            return None
        return render(
            ACCESSOR_TEMPLATE,
            name=self.name,
            internal=self.internal_name,
            flag=self.flag,
            event=self.event_name,
            hooked=self.apply is not None or self.update is not None,
            apply=self.apply,
            update=self.update,
            evented=self.evented,
        )


def hook(members: ClassMembers, prefix: str, config: str) -> Optional[MemberEntry]:
    """Locally declared ``apply<Name>`` / ``update<Name>`` method."""
    entry = members.get(prefix + upper_first(config))
    if entry is None or entry.block is not None or not is_function(entry.value):
        return None
    return entry


def synthesize_accessor(
    entry: MemberEntry, members: ClassMembers, evented: bool = False
) -> AccessorDescriptor:
    """Describe the accessor of one locally declared config.

    Args:
        entry: The config member (its value is the default).
        members: Members of the declaring class; only these are searched for hooks.
        evented: Whether setting the config dispatches a change event.
    """
    apply = hook(members, "apply", entry.name)
    update = hook(members, "update", entry.name)
    descriptor = AccessorDescriptor(
        name=entry.name,
        default=value_source(entry.value),
        apply=function_source(apply.value) if apply else None,
        update=function_source(update.value) if update else None,
        evented=evented or entry.evented,
        hook_methods=tuple(e.name for e in (apply, update) if e is not None),
    )
    log.debug(
        f"Config {entry.name}: {'plain field' if descriptor.plain else 'accessor'}"
    )
    return descriptor


def override_field(entry: MemberEntry) -> AccessorDescriptor:
    """Redeclared inherited config: a plain default override."""
    return AccessorDescriptor(name=entry.name, default=value_source(entry.value))


def config_block(accessors: list[AccessorDescriptor]) -> list[str]:
    """Fields (plain first, padded to the longest name) followed by accessor methods."""
    if not accessors:
        return []
    ordered = sorted(accessors, key=lambda a: a.internal_name.startswith("_"))
    width = max(len(a.internal_name) for a in ordered)
    sections = ["\n".join(a.field(width) for a in ordered)]
    sections += [m for m in (a.methods() for a in accessors) if m]
    return sections
