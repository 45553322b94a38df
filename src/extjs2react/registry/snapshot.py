"""Registry snapshots: resolved per-class metadata as JSON.

A snapshot holds no syntax trees, only what resolution needs, so a registry
rebuilt from one answers lookups but cannot transpile.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

import msgspec
import xxhash

from extjs2react.registry.extract import SourceUnit
from extjs2react.registry.model import ClassModel
from extjs2react.registry.registry import Registry

log = logging.getLogger(__name__)


class ClassRecord(msgspec.Struct, omit_defaults=True):
    name: str
    export_name: str
    parent: Optional[str] = None
    override: Optional[str] = None
    singleton: bool = False
    controller: Optional[str] = None
    alternate_names: List[str] = []
    aliases: List[str] = []
    mixins: List[str] = []
    plugins: List[str] = []
    configs: List[str] = []
    cached_configs: List[str] = []
    evented_configs: List[str] = []
    aliases_used: List[str] = []
    method_calls: List[str] = []


class UnitRecord(msgspec.Struct):
    path: str
    parseable: bool
    classes: List[ClassRecord] = []


class RegistrySnapshot(msgspec.Struct):
    """Top-level snapshot document."""

    units: List[UnitRecord]
    words: List[str] = []
    component_base: str = "Ext.Widget"
    application_base: str = "Ext.app.Application"


def snapshot_path(snapshot_dir: Path, snapshot_id: str) -> Path:
    """Snapshot file for a logical id; the file name is the id's xxhash."""
    return snapshot_dir / f"{xxhash.xxh64_hexdigest(snapshot_id.encode('utf-8'))}.json"


def to_snapshot(registry: Registry) -> RegistrySnapshot:
    units = []
    for unit in registry.units:
        classes = []
        for model in unit.classes:
            record = registry.resolved(model.name)
            if record is None or record.model is not model:
                continue
            classes.append(
                ClassRecord(
                    name=record.name,
                    export_name=record.export_name,
                    parent=record.parent,
                    override=record.override,
                    singleton=model.singleton,
                    controller=model.controller_alias,
                    alternate_names=list(model.alternate_names),
                    aliases=list(model.aliases),
                    mixins=list(record.mixins),
                    plugins=list(record.plugins),
                    configs=list(record.configs),
                    cached_configs=list(record.cached_configs),
                    evented_configs=list(record.evented_configs),
                    aliases_used=list(model.aliases_used),
                    method_calls=list(model.method_calls),
                )
            )
        units.append(UnitRecord(path=unit.path, parseable=unit.parseable, classes=classes))

    return RegistrySnapshot(
        units=units,
        words=list(registry.custom_words),
        component_base=registry.component_base,
        application_base=registry.application_base,
    )


def _model_from_record(record: ClassRecord, unit_path: str) -> ClassModel:
    model = ClassModel(
        name=record.name,
        unit_path=unit_path,
        parent_ref=record.parent,
        override=record.override,
        singleton=record.singleton,
        controller_alias=record.controller,
        aliases=list(record.aliases),
        alternate_names=list(record.alternate_names),
        mixin_refs=list(record.mixins),
        plugin_refs=list(record.plugins),
        aliases_used=list(record.aliases_used),
        method_calls=list(record.method_calls),
        from_snapshot=True,
    )
    model.declared_configs["config"] = list(record.configs)
    model.declared_configs["cachedConfig"] = list(record.cached_configs)
    model.declared_configs["eventedConfig"] = list(record.evented_configs)
    return model


def from_snapshot(snapshot: RegistrySnapshot, parent: Optional[Registry] = None) -> Registry:
    """Rebuild and finalize a registry without parsing any source."""
    registry = Registry(
        parent,
        words=snapshot.words,
        component_base=snapshot.component_base,
        application_base=snapshot.application_base,
    )
    registry.from_snapshot = True

    for unit_record in snapshot.units:
        unit = SourceUnit(
            path=unit_record.path,
            parseable=unit_record.parseable,
            classes=[_model_from_record(r, unit_record.path) for r in unit_record.classes],
            from_snapshot=True,
        )
        registry.register(unit)

    registry.finalize()
    return registry


def save_snapshot(path: Path, snapshot: RegistrySnapshot) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(msgspec.json.encode(snapshot))
    log.info(f"Saved registry snapshot to {path}")


def read_snapshot(path: Path) -> Optional[RegistrySnapshot]:
    """Load a snapshot; a missing or unreadable file yields None."""
    if not path.exists():
        return None
    try:
        return msgspec.json.decode(path.read_bytes(), type=RegistrySnapshot)
    except (msgspec.DecodeError, msgspec.ValidationError) as e:
        log.warning(f"Ignoring unreadable snapshot {path}: {e}")
        return None


def load_or_build(
    snapshot_dir: Path,
    snapshot_id: str,
    build: Callable[[], Registry],
    parent: Optional[Registry] = None,
) -> Registry:
    """Registry from the cached snapshot for snapshot_id, building and saving it if missing."""
    path = snapshot_path(snapshot_dir, snapshot_id)
    snapshot = read_snapshot(path)
    if snapshot is None:
        log.info(f"No snapshot for {snapshot_id}; building registry")
        registry = build()
        snapshot = to_snapshot(registry)
        save_snapshot(path, snapshot)
    return from_snapshot(snapshot, parent)
