"""Capability table: per-tag output type and property transforms.

Schema of a capability table (YAML):

    button:
      extends: component
      type: Button
      icon_type: IconButton
      props:
        text: content
        handler: suppress
        onTap: rename:onClick

Entries form single-inheritance chains through ``extends``. Transform names:

- ``suppress``: drop the property
- ``rename:<prop>``: emit the property under another name
- ``content``: the value becomes the element's text child
- ``icon``: keep the property; an element left without children switches to ``icon_type``
- ``class-name``: merge the value into ``className``
- ``listener:<prop>``: emit as an event handler, string values naming a function
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from extjs2react.errors import CapabilityError

log = logging.getLogger(__name__)

SIMPLE_TRANSFORMS = ("suppress", "content", "icon", "class-name")
ARGUMENT_TRANSFORMS = ("rename", "listener")
DEFAULT_TABLE = "capabilities.yaml"


class Transform(BaseModel):
    """A parsed transform name, e.g. ``rename:onClick``."""

    kind: str
    argument: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "Transform":
        kind, _, argument = text.partition(":")
        if kind in SIMPLE_TRANSFORMS and not argument:
            return cls(kind=kind)
        if kind in ARGUMENT_TRANSFORMS and argument:
            return cls(kind=kind, argument=argument)
        raise CapabilityError(f"Unknown property transform: {text}")


class Capability(BaseModel):
    """One tag of the capability table."""

    extends: Optional[str] = Field(default=None, description="Parent tag")
    type: Optional[str] = Field(default=None, description="Output component")
    icon_type: Optional[str] = Field(
        default=None, description="Output component for icon-only elements"
    )
    props: dict[str, str] = Field(default_factory=dict, description="Property transforms")

    def transforms(self) -> dict[str, Transform]:
        return {prop: Transform.parse(name) for prop, name in self.props.items()}


class ResolvedCapability(BaseModel):
    """Effective capability of a tag after walking its chain."""

    tag: str
    type: str
    icon_type: Optional[str] = None
    type_override: bool = False
    transforms: list[dict[str, Transform]] = Field(default_factory=list)

    @property
    def known_props(self) -> set[str]:
        return {prop for layer in self.transforms for prop in layer}

    @property
    def text_capable(self) -> bool:
        return any(t.kind == "content" for layer in self.transforms for t in layer.values())


class CapabilityTable:
    """Tag -> capability entries with ``extends`` chains."""

    def __init__(self, entries: dict[str, Capability]) -> None:
        self.entries = entries
        for tag, entry in entries.items():
            entry.transforms()
            if entry.extends is not None and entry.extends not in entries:
                raise CapabilityError(f"Capability {tag} extends unknown tag {entry.extends}")
            self.chain(tag)

    @classmethod
    def from_mapping(cls, data: dict) -> "CapabilityTable":
        try:
            entries = {tag: Capability(**(value or {})) for tag, value in data.items()}
        except (TypeError, ValidationError) as e:
            raise CapabilityError(f"Invalid capability table: {e}") from e
        return cls(entries)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "CapabilityTable":
        """Load a table from path, or the bundled default table."""
        if path is None:
            text = resources.files("extjs2react.elements").joinpath(DEFAULT_TABLE).read_text()
            source = DEFAULT_TABLE
        else:
            if not path.exists():
                raise CapabilityError(f"Capability table not found: {path}")
            text = path.read_text()
            source = str(path)

        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise CapabilityError(f"Invalid YAML in {source}: {e}") from e
        if not isinstance(data, dict):
            raise CapabilityError(f"Capability table must be a mapping: {source}")

        log.debug(f"Loaded {len(data)} capabilities from {source}")
        return cls.from_mapping(data)

    def __contains__(self, tag: str) -> bool:
        return tag in self.entries

    def chain(self, tag: str) -> list[str]:
        """Tags from the most general ancestor down to tag itself."""
        chain: list[str] = []
        current: Optional[str] = tag
        while current is not None:
            if current in chain:
                raise CapabilityError(f"Circular capability chain: {' -> '.join(chain + [current])}")
            chain.append(current)
            current = self.entries[current].extends if current in self.entries else None
        return list(reversed(chain))

    def resolve(self, tag: str, type_override: Optional[str] = None) -> Optional[ResolvedCapability]:
        """Effective type and ordered transform layers; None for unknown tags.

        type_override replaces the table's output type (registered widget classes).
        """
        if tag not in self.entries:
            return None

        output_type: Optional[str] = None
        icon_type: Optional[str] = None
        layers = []
        for link in self.chain(tag):
            entry = self.entries[link]
            output_type = entry.type or output_type
            icon_type = entry.icon_type or icon_type
            layers.append(entry.transforms())

        return ResolvedCapability(
            tag=tag,
            type=type_override or output_type or tag,
            icon_type=None if type_override else icon_type,
            type_override=type_override is not None,
            transforms=layers,
        )
