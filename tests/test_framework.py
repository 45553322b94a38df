"""Tests for the framework registry and its manifest."""

import pytest

from extjs2react.errors import ConfigError
from extjs2react.framework import load_framework, manifest_entries, render_manifest


def test_load_framework(framework_source, tmp_path):
    path = tmp_path / "ext.js"
    path.write_text(framework_source)

    registry = load_framework(path)

    assert registry.finalized
    assert registry.resolve_alias("widget.button") == "Ext.Button"
    assert registry.resolved("Ext.Panel").is_component


def test_load_framework_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_framework(tmp_path / "ext.js")


def test_manifest_entries(framework):
    entries = manifest_entries(framework)

    assert [e.name for e in entries] == ["Button", "ObservableUtil", "Panel", "Widget"]
    assert entries[0].xtype == "button"
    assert entries[1].xtype is None


def test_render_manifest(framework):
    manifest = render_manifest(framework, reactify_source="@acme/reactify")

    assert manifest == (
        "import { reactify } from '@acme/reactify'\n"
        "\n"
        "const r = reactify\n"
        "const w = window\n"
        "\n"
        "export const Button = r('button')\n"
        "export const Panel  = r('panel')\n"
        "export const Widget = r('widget')\n"
        "\n"
        "export const ObservableUtil = w.Ext.util.Observable\n"
    )
