"""Tests for accessor synthesis of config members."""

from extjs2react.compiler.accessors import (
    AccessorDescriptor,
    config_block,
    override_field,
    synthesize_accessor,
)

THING = """\
Ext.define('App.Thing', {
    eventedConfig: {
        value: null
    },
    config: {
        label: 'x'
    },
    applyValue: function(value, old){
        return value;
    },
    updateValue: function(value, old){
        this.refresh();
    }
});
"""


def test_plain_config_is_a_field(build):
    record = build({"Thing.js": THING}).resolved("App.Thing")

    accessor = synthesize_accessor(record.members.get("label"), record.members)

    assert accessor.plain
    assert accessor.internal_name == "label"
    assert accessor.field() == "label = 'x'"
    assert accessor.methods() is None


def test_hooked_evented_setter_order(build):
    """apply, then the guarded update, then the event, then the stores."""
    record = build({"Thing.js": THING}).resolved("App.Thing")

    accessor = synthesize_accessor(record.members.get("value"), record.members, evented=True)
    source = accessor.methods()

    assert accessor.hook_methods == ("applyValue", "updateValue")
    assert accessor.internal_name == "_value"
    assert accessor.field() == "_value = null"
    assert "get value(){\n  if(!this._valueInitialized){\n    this.value = this._value\n  }" in source
    steps = [
        ".call(this, value, this._valueInitialized ? this._value : undefined)",
        "if(typeof value !== 'undefined' && value !== this._value){",
        "this.dispatchEvent('valuechange', this, value, this._value)",
        "this._valueInitialized = true",
        "this._value = value",
    ]
    positions = [source.index(step) for step in steps]
    assert positions == sorted(positions)


def test_update_without_apply_is_unguarded():
    accessor = AccessorDescriptor(name="size", default="0", update="function(v){}")

    source = accessor.methods()

    assert "typeof value" not in source
    assert "(function(v){}).call(this, value, this._size)" in source
    assert "dispatchEvent" not in source


def test_evented_without_hooks():
    accessor = AccessorDescriptor(name="mode", default="'a'", evented=True)

    source = accessor.methods()

    assert not accessor.plain
    assert "if(!this._modeInitialized)" not in source
    assert "this.dispatchEvent('modechange', this, value, this._mode)" in source


def test_hooks_must_be_local_methods(build):
    """An inherited apply method is not a hook."""
    registry = build(
        {
            "Base.js": (
                "Ext.define('App.Base', {\n"
                "    applySize: function(v){ return v; }\n"
                "});\n"
            ),
            "Sub.js": (
                "Ext.define('App.Sub', {\n"
                "    extend: 'App.Base',\n"
                "    config: { size: 1 }\n"
                "});\n"
            ),
        }
    )
    record = registry.resolved("App.Sub")

    assert synthesize_accessor(record.members.get("size"), record.members).plain


def test_override_field_is_plain(build):
    record = build({"Thing.js": THING}).resolved("App.Thing")

    assert override_field(record.members.get("label")).plain


def test_config_block_aligns_fields_plain_first():
    accessors = [
        AccessorDescriptor(name="value", default="null", evented=True),
        AccessorDescriptor(name="title", default="'x'"),
        AccessorDescriptor(name="id", default="0"),
    ]

    sections = config_block(accessors)

    assert sections[0] == "title  = 'x'\nid     = 0\n_value = null"
    assert len(sections) == 2
    assert sections[1].startswith("get value(){")
