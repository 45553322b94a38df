"""Tests for the extjs2react CLI."""

import pytest
from typer.testing import CliRunner

from extjs2react._version import __version__
from extjs2react.main import typer_app
from extjs2react.registry.snapshot import snapshot_path

runner = CliRunner()

MAIN = (
    "Ext.define('App.view.Main', {\n"
    "    extend: 'Ext.Panel',\n"
    "    xtype: 'main',\n"
    "    items: [{ xtype: 'button', text: 'Go' }]\n"
    "});\n"
)


@pytest.fixture
def project(tmp_path, framework_source):
    """A project directory with its extjs2react.yaml."""
    (tmp_path / "app" / "view").mkdir(parents=True)
    (tmp_path / "app" / "view" / "Main.js").write_text(MAIN)
    (tmp_path / "ext.js").write_text(framework_source)
    config = tmp_path / "extjs2react.yaml"
    config.write_text("source_dir: app\ntarget_dir: out\nframework_file: ext.js\n")
    return tmp_path


def invoke(project, *args):
    return runner.invoke(typer_app, ["-c", str(project / "extjs2react.yaml"), *args])


def test_version():
    result = runner.invoke(typer_app, ["--version"])

    assert result.exit_code == 0
    assert f"extjs2react {__version__}" in result.stdout


def test_transpile(project):
    result = invoke(project, "transpile")

    assert result.exit_code == 0
    output = (project / "out" / "view" / "Main.js").read_text()
    assert output.startswith("import React from 'react'\n")
    assert "<Button>Go</Button>" in output


def test_transpile_with_report(project):
    result = invoke(project, "transpile", "--report")

    assert result.exit_code == 0
    assert "Top properties" in result.stdout


def test_transpile_refuses_unstamped_target(project):
    (project / "out").mkdir()

    result = invoke(project, "transpile")

    assert result.exit_code == 1
    assert list((project / "out").iterdir()) == []


def test_missing_config_file(tmp_path):
    result = runner.invoke(typer_app, ["-c", str(tmp_path / "nope.yaml"), "transpile"])

    assert result.exit_code == 1


def test_classnames(project):
    result = invoke(project, "classnames")

    assert result.exit_code == 0
    assert "Main" in result.stdout


def test_calls(project):
    (project / "app" / "view" / "List.js").write_text(
        "Ext.define('App.view.List', {\n"
        "    load: function(){ return Ext.isEmpty(this.items); }\n"
        "});\n"
    )

    result = invoke(project, "calls", "-n", "5")

    assert result.exit_code == 0
    assert "Ext.isEmpty" in result.stdout


def test_manifest_to_stdout(project):
    result = invoke(project, "manifest")

    assert result.exit_code == 0
    assert "export const Button = r('button')" in result.stdout


def test_manifest_to_file(project):
    target = project / "build" / "index.js"

    result = invoke(project, "manifest", "-o", str(target))

    assert result.exit_code == 0
    assert target.read_text().startswith("import { reactify } from '@sencha/ext-react'\n")


def test_snapshot_requires_snapshot_dir(project):
    result = invoke(project, "snapshot", "app")

    assert result.exit_code == 1


def test_snapshot(project):
    config = project / "extjs2react.yaml"
    config.write_text(config.read_text() + "snapshot_dir: snapshots\n")

    result = invoke(project, "snapshot", "app")

    assert result.exit_code == 0
    assert snapshot_path(project / "snapshots", "app").exists()
