"""Framework build: the parent registry and its ``index.js`` manifest."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from extjs2react.diagnostics import Diagnostics
from extjs2react.errors import ConfigError
from extjs2react.registry.extract import load_unit
from extjs2react.registry.registry import Registry
from extjs2react.rendering import render

log = logging.getLogger(__name__)

FRAMEWORK_UNIT = "index.js"
MANIFEST_TEMPLATE = "manifest.js.j2"
REACTIFY_SOURCE = "@sencha/ext-react"
WIDGET_PREFIX = "widget."


def load_framework(
    path: Path,
    define_callee: str = "Ext.define",
    words: tuple[str, ...] = (),
    component_base: str = "Ext.Widget",
    application_base: str = "Ext.app.Application",
    diagnostics: Optional[Diagnostics] = None,
) -> Registry:
    """Parse the framework build into a finalized registry."""
    if not path.exists():
        raise ConfigError(f"Framework file not found: {path}")

    registry = Registry(
        words=words,
        component_base=component_base,
        application_base=application_base,
        diagnostics=diagnostics,
    )
    unit = load_unit(FRAMEWORK_UNIT, path.read_text(), define_callee)
    registry.register(unit)
    registry.finalize()
    log.info(f"Loaded {len(registry.class_names)} framework classes from {path}")
    return registry


@dataclass(frozen=True)
class ManifestEntry:
    name: str
    class_name: str
    xtype: Optional[str] = None


def manifest_entries(registry: Registry) -> list[ManifestEntry]:
    """Exports of the manifest, sorted by name; overrides are left out."""
    entries = []
    for record in registry.classes():
        if record.unparsed or record.discard:
            continue
        widget = next((a for a in record.aliases if a.startswith(WIDGET_PREFIX)), None)
        entries.append(
            ManifestEntry(
                name=record.export_name,
                class_name=record.name,
                xtype=widget[len(WIDGET_PREFIX):] if widget else None,
            )
        )
    return sorted(entries, key=lambda e: e.name.lower())


def render_manifest(registry: Registry, reactify_source: str = REACTIFY_SOURCE) -> str:
    """``index.js`` exporting widgets via ``reactify`` and other classes via ``window``."""
    entries = manifest_entries(registry)
    widgets = [e for e in entries if e.xtype]
    others = [e for e in entries if not e.xtype]
    return render(
        MANIFEST_TEMPLATE,
        reactify_source=reactify_source,
        widgets=widgets,
        others=others,
        widget_width=max((len(e.name) for e in widgets), default=0),
        global_width=max((len(e.name) for e in others), default=0),
    ) + "\n"
