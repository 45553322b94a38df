"""Element tree shared by the element and template compilers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class AttributeKind(str, Enum):
    PRESENCE = "presence"
    LITERAL = "literal"
    EXPRESSION = "expression"
    BINDING = "binding"
    SPREAD = "spread"


@dataclass
class Attribute:
    """One attribute; ``value`` is a literal string, source code or a binding name."""

    name: str
    value: Optional[str] = None
    kind: AttributeKind = AttributeKind.EXPRESSION


@dataclass
class Text:
    text: str


@dataclass
class Expression:
    code: str


@dataclass
class Fragment:
    children: list["Child"] = field(default_factory=list)


@dataclass
class Conditional:
    """``test ? consequent : alternate``; no alternate renders ``test && consequent``."""

    test: str
    consequent: "Child"
    alternate: Optional["Child"] = None


@dataclass
class ElementNode:
    tag: str
    attributes: list[Attribute] = field(default_factory=list)
    children: list["Child"] = field(default_factory=list)
    text_capable: bool = False

    def attribute(self, name: str) -> Optional[Attribute]:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None

    def set_attribute(self, attr: Attribute) -> None:
        """Add attr, replacing an existing attribute of the same name in place."""
        for i, existing in enumerate(self.attributes):
            if existing.name == attr.name and attr.kind != AttributeKind.SPREAD:
                self.attributes[i] = attr
                return
        self.attributes.append(attr)

    def remove_attribute(self, name: str) -> None:
        self.attributes = [a for a in self.attributes if a.name != name]


Child = Union[ElementNode, Text, Expression, Fragment, Conditional]
