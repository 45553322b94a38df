"""Tests for registry snapshots."""

import xxhash

from extjs2react.registry.snapshot import (
    from_snapshot,
    load_or_build,
    read_snapshot,
    save_snapshot,
    snapshot_path,
    to_snapshot,
)

VIEW = """\
Ext.define('App.view.List', {
    extend: 'Ext.Panel',
    xtype: 'userlist',
    alternateClassName: 'App.List',
    config: {
        store: null
    },
    load: function(){
        Ext.Array.each(this.items, this.add);
    }
});
"""


def test_snapshot_path_hashes_the_id(tmp_path):
    path = snapshot_path(tmp_path, "framework:/x/ext.js")

    assert path.parent == tmp_path
    assert path.name == xxhash.xxh64_hexdigest(b"framework:/x/ext.js") + ".json"


def test_round_trip_keeps_names_and_aliases(framework, build, tmp_path):
    """A restored registry answers lookups without any source."""
    registry = build({"view/List.js": VIEW}, parent=framework)
    path = tmp_path / "snapshot.json"

    save_snapshot(path, to_snapshot(registry))
    restored = from_snapshot(read_snapshot(path), framework)

    assert restored.from_snapshot
    assert restored.resolve_alias("widget.userlist") == "App.view.List"
    record = restored.resolved("App.List")
    assert record.name == "App.view.List"
    assert record.parent == "Ext.Panel"
    assert record.is_component
    assert record.configs == ("store",)
    assert record.export_name == registry.resolved("App.view.List").export_name
    assert restored.method_calls() == registry.method_calls()
    assert restored.units[0].from_snapshot


def test_unreadable_snapshot_is_ignored(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    assert read_snapshot(path) is None
    assert read_snapshot(tmp_path / "missing.json") is None


def test_load_or_build_builds_once(build, tmp_path):
    calls = []

    def build_registry():
        calls.append(1)
        return build({"view/List.js": VIEW})

    first = load_or_build(tmp_path, "app", build_registry)
    second = load_or_build(tmp_path, "app", build_registry)

    assert len(calls) == 1
    assert snapshot_path(tmp_path, "app").exists()
    assert first.class_names == second.class_names == ["App.view.List"]
