"""Class/alias registry and inheritance resolver."""

from extjs2react.registry.extract import SourceUnit, aliases_from_node, load_unit
from extjs2react.registry.model import ClassMembers, ClassModel, MemberEntry, ResolvedClass
from extjs2react.registry.registry import Registry

__all__ = [
    "ClassMembers",
    "ClassModel",
    "MemberEntry",
    "Registry",
    "ResolvedClass",
    "SourceUnit",
    "aliases_from_node",
    "load_unit",
]
