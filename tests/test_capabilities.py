"""Tests for the capability table."""

import pytest

from extjs2react.elements.capabilities import CapabilityTable, Transform
from extjs2react.errors import CapabilityError


def test_bundled_table():
    table = CapabilityTable.load()

    button = table.resolve("button")
    assert button.type == "Button"
    assert button.icon_type == "IconButton"
    assert table.chain("button") == ["component", "button"]
    assert "onTap" in button.known_props
    assert button.text_capable


def test_resolve_inherits_type_from_chain():
    table = CapabilityTable.from_mapping(
        {
            "component": {"type": "Component"},
            "box": {"extends": "component"},
        }
    )

    assert table.resolve("box").type == "Component"
    assert table.resolve("missing") is None


def test_type_override_drops_icon_type():
    table = CapabilityTable.load()

    resolved = table.resolve("button", type_override="MyButton")

    assert resolved.type == "MyButton"
    assert resolved.icon_type is None
    assert resolved.type_override


def test_transform_parse():
    assert Transform.parse("rename:onClick") == Transform(kind="rename", argument="onClick")
    assert Transform.parse("suppress").argument is None

    with pytest.raises(CapabilityError):
        Transform.parse("rename")
    with pytest.raises(CapabilityError):
        Transform.parse("explode")


def test_unknown_parent_is_rejected():
    with pytest.raises(CapabilityError):
        CapabilityTable.from_mapping({"button": {"extends": "component"}})


def test_circular_chain_is_rejected():
    with pytest.raises(CapabilityError):
        CapabilityTable.from_mapping(
            {"a": {"extends": "b"}, "b": {"extends": "a"}}
        )


def test_unknown_transform_is_rejected():
    with pytest.raises(CapabilityError):
        CapabilityTable.from_mapping({"button": {"props": {"text": "explode"}}})


def test_load_from_file(tmp_path):
    path = tmp_path / "capabilities.yaml"
    path.write_text("panel:\n  type: MyPanel\n")

    table = CapabilityTable.load(path)

    assert table.resolve("panel").type == "MyPanel"
    with pytest.raises(CapabilityError):
        CapabilityTable.load(tmp_path / "missing.yaml")
