"""Class model: raw declarations and their resolved records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from tree_sitter import Node

CONFIG_BLOCKS = ("config", "cachedConfig", "eventedConfig")

TRANSFORMED_MEMBERS = (
    "extend",
    "xtype",
    "alias",
    "alternateClassName",
    "override",
    "singleton",
    "requires",
    "statics",
    "inheritableStatics",
    "mixins",
    *CONFIG_BLOCKS,
)
TRANSFORMED_COMPONENT_MEMBERS = ("controller", "items")
TREAT_AS_CONFIGS = ("listeners",)
RESERVED_MEMBER_NAMES = (
    "configs",
    "properties",
    "methods",
    "static",
    "transformed",
)


@dataclass(frozen=True)
class MemberEntry:
    """One member of a class body or of one of its config blocks."""

    name: str
    node: Node
    value: Node
    block: Optional[str] = None

    @property
    def evented(self) -> bool:
        return self.block == "eventedConfig"


@dataclass
class ClassModel:
    """Raw class declaration as read from one source unit.

    References (parent, mixins, plugins, aliases used) are kept as written;
    they are only resolved by ``Registry.finalize``.
    """

    name: str
    unit_path: str
    body: Optional[Node] = None
    call: Optional[Node] = None
    parent_ref: Optional[str] = None
    override: Optional[str] = None
    singleton: bool = False
    aliases: list[str] = field(default_factory=list)
    alternate_names: list[str] = field(default_factory=list)
    mixin_refs: list[str] = field(default_factory=list)
    plugin_refs: list[str] = field(default_factory=list)
    controller_alias: Optional[str] = None
    declared_configs: dict[str, list[str]] = field(
        default_factory=lambda: {block: [] for block in CONFIG_BLOCKS}
    )
    members: list[MemberEntry] = field(default_factory=list)
    statics: list[MemberEntry] = field(default_factory=list)
    aliases_used: list[str] = field(default_factory=list)
    class_refs: list[str] = field(default_factory=list)
    method_calls: list[str] = field(default_factory=list)
    from_snapshot: bool = False

    @property
    def member_names(self) -> list[str]:
        return [m.name for m in self.members]


@dataclass(frozen=True)
class ClassMembers:
    """Members partitioned by how they are emitted."""

    configs: tuple[MemberEntry, ...] = ()
    properties: tuple[MemberEntry, ...] = ()
    methods: tuple[MemberEntry, ...] = ()
    static_properties: tuple[MemberEntry, ...] = ()
    static_methods: tuple[MemberEntry, ...] = ()
    transformed: tuple[MemberEntry, ...] = ()
    by_name: Mapping[str, MemberEntry] = field(default_factory=dict)

    def get(self, name: str) -> Optional[MemberEntry]:
        return self.by_name.get(name)

    def has(self, name: str) -> bool:
        return name in self.by_name


@dataclass(frozen=True)
class ResolvedClass:
    """Immutable result of resolving one class against the whole registry."""

    model: ClassModel
    export_name: str
    parent: Optional[str] = None
    ancestors: tuple[str, ...] = ()
    mixins: tuple[str, ...] = ()
    plugins: tuple[str, ...] = ()
    configs: tuple[str, ...] = ()
    cached_configs: tuple[str, ...] = ()
    evented_configs: tuple[str, ...] = ()
    inherited_configs: frozenset[str] = frozenset()
    accessors: tuple[str, ...] = ()
    inherited_accessors: frozenset[str] = frozenset()
    members: ClassMembers = field(default_factory=ClassMembers)
    is_component: bool = False
    singleton: bool = False
    controller: Optional[str] = None
    assimilated_by: Optional[str] = None
    classes_used: tuple[str, ...] = ()
    unknown_aliases: tuple[str, ...] = ()
    unknown_classes: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.model.name

    @property
    def unit_path(self) -> str:
        return self.model.unit_path

    @property
    def aliases(self) -> list[str]:
        return self.model.aliases

    @property
    def override(self) -> Optional[str]:
        return self.model.override

    @property
    def unparsed(self) -> bool:
        """Overrides are reproduced verbatim instead of compiled."""
        return self.model.override is not None

    @property
    def discard(self) -> bool:
        return self.assimilated_by is not None

    @property
    def local_configs(self) -> tuple[str, ...]:
        return tuple(sorted(set(self.configs) | set(self.cached_configs) | set(self.evented_configs)))

    @property
    def all_configs(self) -> frozenset[str]:
        return frozenset(self.local_configs) | self.inherited_configs

    @property
    def all_accessors(self) -> frozenset[str]:
        return frozenset(self.accessors) | self.inherited_accessors
