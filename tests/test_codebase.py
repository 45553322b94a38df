"""Tests for the transpile pipeline over a source tree."""

import pytest

from extjs2react.codebase import Codebase
from extjs2react.config import Settings
from extjs2react.errors import ConfigError, SnapshotError, TargetDirectoryError
from extjs2react.registry.snapshot import from_snapshot, to_snapshot
from extjs2react.workspace import STAMP_FILE

SOURCES = {
    "model/Bar.js": "Ext.define('App.model.Bar', {\n    config: {\n        size: 1\n    }\n});\n",
    "view/Main.js": (
        "Ext.define('App.view.Main', {\n"
        "    extend: 'Ext.Panel',\n"
        "    controller: 'main',\n"
        "    items: [{ xtype: 'button', text: 'Save', handler: 'onSave' }]\n"
        "});\n"
    ),
    "view/MainController.js": (
        "Ext.define('App.view.MainController', {\n"
        "    alias: 'controller.main',\n"
        "    onSave: function(){\n"
        "        Ext.Array.each(this.getView().items, function(item){ item.save(); });\n"
        "    }\n"
        "});\n"
    ),
    "util.js": "var answer = 42;\n",
    "styles.css": ".main { color: red; }\n",
}


@pytest.fixture
def settings(tmp_path, framework_source):
    source_dir = tmp_path / "app"
    for path, text in SOURCES.items():
        target = source_dir / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text)
    framework_file = tmp_path / "ext.js"
    framework_file.write_text(framework_source)
    return Settings(
        source_dir=source_dir,
        target_dir=tmp_path / "out",
        framework_file=framework_file,
        snapshot_dir=tmp_path / "snapshots",
    )


def test_transpile_writes_copies_and_removes(settings):
    report = Codebase(settings).transpile()

    out = settings.target_dir
    assert report.written == ["model/Bar.js", "view/Main.js"]
    assert report.copied == ["styles.css", "util.js"]
    assert report.removed == ["view/MainController.js"]
    assert report.fallbacks == []
    assert (out / STAMP_FILE).exists()
    assert (out / "util.js").read_text() == SOURCES["util.js"]
    assert (out / "styles.css").read_text() == SOURCES["styles.css"]
    assert not (out / "view" / "MainController.js").exists()

    main = (out / "view" / "Main.js").read_text()
    assert "import { Button, Panel } from 'framework'" in main
    assert "this.items.forEach((item) => { item.save() })" in main
    assert "<Button onClick={onSave}>Save</Button>" in main


def test_transpile_again_replaces_output(settings):
    Codebase(settings).transpile()
    stale = settings.target_dir / "view" / "MainController.js"
    stale.write_text("stale")

    report = Codebase(settings).transpile()

    assert report.removed == ["view/MainController.js"]
    assert not stale.exists()


def test_transpile_refuses_foreign_target(settings):
    """An existing output root without the stamp is never written to."""
    settings.target_dir.mkdir()
    keep = settings.target_dir / "index.html"
    keep.write_text("<html></html>")

    with pytest.raises(TargetDirectoryError):
        Codebase(settings).transpile()

    assert list(settings.target_dir.iterdir()) == [keep]
    assert keep.read_text() == "<html></html>"


def test_transpile_refuses_snapshot_registry(settings):
    codebase = Codebase(settings)
    restored = from_snapshot(to_snapshot(codebase.build()), codebase.framework())

    with pytest.raises(SnapshotError):
        codebase.transpile(restored)
    assert not settings.target_dir.exists()


def test_framework_is_read_through_its_snapshot(settings):
    first = Codebase(settings).framework()
    second = Codebase(settings).framework()

    assert first.from_snapshot and second.from_snapshot
    assert len(list(settings.snapshot_dir.iterdir())) == 1
    assert second.resolve_alias("widget.panel") == "Ext.Panel"


def test_load_from_snapshot(settings):
    codebase = Codebase(settings)

    registry = codebase.load("app")

    assert registry.from_snapshot
    assert registry.resolved("App.view.Main").controller == "App.view.MainController"


def test_load_from_snapshot_requires_snapshot_dir(settings):
    settings.snapshot_dir = None

    with pytest.raises(ConfigError):
        Codebase(settings).load("app")


def test_missing_source_dir(settings, tmp_path):
    settings.source_dir = tmp_path / "nowhere"

    with pytest.raises(ConfigError):
        Codebase(settings).build()


def test_class_names_and_calls(settings):
    codebase = Codebase(settings)
    registry = codebase.build()

    names = dict(codebase.class_names(registry))
    calls = dict(codebase.calls(registry))

    assert names == {"BarModel": 1, "MainView": 1, "MainController": 1}
    assert calls["Ext.Array"] == 1
    assert calls[".save"] == 1
