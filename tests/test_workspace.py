"""Tests for the output root guard."""

import json

import pytest

from extjs2react.errors import TargetDirectoryError
from extjs2react.workspace import GENERATOR, STAMP_FILE, Workspace


def test_prepare_creates_and_stamps(tmp_path):
    workspace = Workspace(tmp_path / "out")

    workspace.prepare()

    stamp = json.loads((tmp_path / "out" / STAMP_FILE).read_text())
    assert stamp == {"generator": GENERATOR}
    assert workspace.generator() == GENERATOR


def test_stamped_root_can_be_reused(tmp_path):
    Workspace(tmp_path / "out").prepare()

    workspace = Workspace(tmp_path / "out")
    workspace.check()
    workspace.prepare()

    assert workspace.prepared


def test_unstamped_root_is_refused(tmp_path):
    """Even an empty directory without the stamp is left alone."""
    target = tmp_path / "out"
    target.mkdir()

    with pytest.raises(TargetDirectoryError):
        Workspace(target).prepare()
    assert list(target.iterdir()) == []


def test_foreign_stamp_is_refused(tmp_path):
    target = tmp_path / "out"
    target.mkdir()
    (target / STAMP_FILE).write_text('{"generator": "other"}')

    with pytest.raises(TargetDirectoryError):
        Workspace(target).check()


def test_file_in_place_of_root_is_refused(tmp_path):
    target = tmp_path / "out"
    target.write_text("x")

    with pytest.raises(TargetDirectoryError):
        Workspace(target).check()


def test_writes_require_prepare(tmp_path):
    workspace = Workspace(tmp_path / "out")

    with pytest.raises(TargetDirectoryError):
        workspace.write("a.js", "x")


def test_write_copy_remove(tmp_path):
    source = tmp_path / "style.css"
    source.write_text("a {}")
    workspace = Workspace(tmp_path / "out")
    workspace.prepare()

    written = workspace.write("view/Main.js", "export default 1\n")
    copied = workspace.copy("css/style.css", source)
    workspace.remove("view/Main.js")

    assert not written.exists()
    assert copied.read_text() == "a {}"
    workspace.remove("missing.js")
