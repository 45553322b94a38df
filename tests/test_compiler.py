"""Tests for unit compilation: emitted classes, components, imports and exports."""

import pytest

from extjs2react.compiler.emitter import ClassEmitter
from extjs2react.compiler.imports import ImportPlan
from extjs2react.compiler.unit import UnitCompiler
from extjs2react.config import DEFAULT_LIBRARIES
from extjs2react.elements.capabilities import CapabilityTable
from extjs2react.errors import SnapshotError
from extjs2react.registry.extract import load_unit
from extjs2react.registry.snapshot import from_snapshot, to_snapshot

BAR = """\
Ext.define('App.model.Bar', {
    config: {
        size: 1
    }
});
"""

FOO = """\
Ext.define('App.model.Foo', {
    extend: 'App.model.Bar',
    config: {
        title: 'x'
    },
    describe: function(){
        var me = this;
        return me.getTitle() + ' of ' + me.getSize();
    }
});
"""

MAIN = """\
Ext.define('App.view.Main', {
    extend: 'Ext.Panel',
    xtype: 'main',
    title: 'Hello',
    config: {
        count: 0
    },
    items: [{
        xtype: 'button',
        text: 'Go',
        handler: 'onGo'
    }],
    onGo: function(){
        this.setCount(this.getCount() + 1);
    }
});
"""


def compile_unit(registry, path):
    compiler = UnitCompiler(registry, CapabilityTable.load())
    return compiler.compile(registry.unit(path))


def test_es6_class_with_inherited_accessors(build):
    """Accessor calls become property access, me becomes this."""
    registry = build({"model/Bar.js": BAR, "model/Foo.js": FOO})

    output = compile_unit(registry, "model/Foo.js")

    assert output.startswith("import BarModel from './Bar'\n\n")
    assert "export default class FooModel extends BarModel {\n  title = 'x'\n\n  describe(){" in output
    assert "return `${this.title} of ${this.size}`" in output
    assert "me." not in output
    assert "let me" not in output
    assert "getTitle" not in output
    assert output.endswith("}\n")


def test_es6_class_redeclared_config_is_plain_override(build):
    registry = build(
        {
            "model/Bar.js": BAR,
            "model/Baz.js": (
                "Ext.define('App.model.Baz', {\n"
                "    extend: 'App.model.Bar',\n"
                "    config: {\n"
                "        size: 2\n"
                "    }\n"
                "});\n"
            ),
        }
    )

    output = compile_unit(registry, "model/Baz.js")

    assert "  size = 2\n" in output
    assert "get size" not in output


def test_several_classes_use_named_exports(build):
    registry = build(
        {
            "shapes.js": (
                "Ext.define('App.shape.Circle', {\n    radius: 1\n});\n"
                "Ext.define('App.shape.Square', {\n    side: 1\n});\n"
            ),
            "Ring.js": "Ext.define('App.shape.Ring', {\n    extend: 'App.shape.Circle'\n});\n",
        }
    )

    shapes = compile_unit(registry, "shapes.js")
    ring = compile_unit(registry, "Ring.js")

    assert "export class CircleShape {\n  radius = 1\n}" in shapes
    assert "export class SquareShape {\n  side = 1\n}" in shapes
    assert ring == (
        "import { CircleShape } from './shapes'\n"
        "\n"
        "export default class RingShape extends CircleShape {}\n"
    )


def test_mixins_are_assigned_after_the_class(build):
    registry = build(
        {
            "mixin.js": "Ext.define('App.mixin.Observable', {\n    fire: function(){ return 1; }\n});\n",
            "Thing.js": (
                "Ext.define('App.Thing', {\n"
                "    mixins: ['App.mixin.Observable'],\n"
                "    run: function(){ return 2; }\n"
                "});\n"
            ),
        }
    )

    output = compile_unit(registry, "Thing.js")

    assert "import ObservableMixin from './mixin'" in output
    assert "\nclass Thing {" in output
    assert output.endswith(
        "Object.assign(Thing.prototype, ObservableMixin.prototype)\nexport default Thing\n"
    )


def test_singleton_exports_an_instance(build):
    registry = build(
        {"Util.js": "Ext.define('App.Util', {\n    singleton: true,\n    pad: function(s){ return s; }\n});\n"}
    )

    output = compile_unit(registry, "Util.js")

    assert output.startswith("class Util {")
    assert output.endswith("export default (new Util())\n")


def test_constructor_is_renamed(build):
    registry = build(
        {"Box.js": "Ext.define('App.Box', {\n    constructor: function(config){ this.initConfig(config); }\n});\n"}
    )

    output = compile_unit(registry, "Box.js")

    assert "construct(config){" in output
    assert "initConfig" not in output


def test_component(framework, build):
    """Configs become props, items become markup, handlers local functions."""
    registry = build({"view/Main.js": MAIN}, parent=framework)

    output = compile_unit(registry, "view/Main.js")
    lines = output.splitlines()

    assert lines[0] == "import React from 'react'"
    assert lines[1] == "import { Button, Panel } from 'framework'"
    assert "function Main(props){\n  props = {\n    count: 0,\n    ...props\n  }" in output
    assert "const onGo = () => {" in output
    assert "props.count = props.count + 1" in output
    assert '<Panel title="Hello" {...props}>' in output
    assert "<Button onClick={onGo}>Go</Button>" in output
    assert output.endswith("export default Main\n")


def test_component_hooks(framework, build):
    registry = build(
        {
            "view/Counter.js": (
                "Ext.define('App.view.Counter', {\n"
                "    extend: 'Ext.Panel',\n"
                "    config: {\n"
                "        count: 0\n"
                "    },\n"
                "    applyCount: function(count){\n"
                "        return count || 0;\n"
                "    },\n"
                "    updateCount: function(count){\n"
                "        console.log(count);\n"
                "    },\n"
                "    initialize: function(){\n"
                "        console.log('ready');\n"
                "    }\n"
                "});\n"
            )
        },
        parent=framework,
    )

    output = compile_unit(registry, "view/Counter.js")

    assert output.splitlines()[0] == "import React, { useMemo, useEffect } from 'react'"
    assert "props.count = useMemo(" in output
    assert "[props.count])" in output
    assert "useEffect(" in output
    assert "}, [])" in output
    assert "const applyCount" not in output
    assert "const initialize" not in output


def test_controller_is_merged_and_its_unit_removed(framework, build):
    registry = build(
        {
            "view/Main.js": (
                "Ext.define('App.view.Main', {\n"
                "    extend: 'Ext.Panel',\n"
                "    controller: 'main'\n"
                "});\n"
            ),
            "view/MainController.js": (
                "Ext.define('App.view.MainController', {\n"
                "    alias: 'controller.main',\n"
                "    onSave: function(){\n"
                "        this.getView().close();\n"
                "    }\n"
                "});\n"
            ),
        },
        parent=framework,
    )

    view = compile_unit(registry, "view/Main.js")

    assert "const onSave = function(){" in view
    assert "this.close()" in view
    assert "getView" not in view
    assert "MainController" not in view
    assert compile_unit(registry, "view/MainController.js") is None


def test_overrides_are_kept_verbatim(framework, build):
    source = "Ext.define('App.override.Panel', {\n    override: 'Ext.Panel',\n    extra: 1\n});\n"
    registry = build({"override/Panel.js": source}, parent=framework)

    assert compile_unit(registry, "override/Panel.js") == source


def test_unparseable_units_are_returned_as_is(build):
    registry = build({"Util.js": "Ext.define('App.Util', {});\n"})
    compiler = UnitCompiler(registry, CapabilityTable.load())

    assert compiler.compile(load_unit("plain.js", "var a = 1;\n")) == "var a = 1;\n"


def test_leftover_statements_are_kept(build):
    registry = build(
        {"Box.js": "var SIZE = 3;\n\nExt.define('App.Box', {\n    size: SIZE\n});\n"}
    )

    output = compile_unit(registry, "Box.js")

    assert output.startswith("var SIZE = 3;\n\nexport default class Box {\n  size = SIZE\n}")


def test_failing_class_falls_back_to_its_source(build, monkeypatch):
    def fail(self, record, controller=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(ClassEmitter, "emit", fail)
    registry = build({"Box.js": "Ext.define('App.Box', {\n    size: 1\n});\n"})

    output = compile_unit(registry, "Box.js")

    assert output == "Ext.define('App.Box', {\n    size: 1\n})\n"
    assert registry.diagnostics.fallbacks == ["App.Box"]


def test_snapshot_registries_cannot_compile(build):
    registry = build({"model/Bar.js": BAR})
    restored = from_snapshot(to_snapshot(registry))

    with pytest.raises(SnapshotError):
        compile_unit(restored, "model/Bar.js")


def test_import_plan_orders_sources():
    plan = ImportPlan(unit_path="view/Main.js", libraries=list(DEFAULT_LIBRARIES))
    plan.use_tag("_")
    plan.use_tag("React")
    plan.use_tag("Template")
    plan.use_framework("Button", "Button2")
    plan.use_project("List", "view/List.js")
    plan.use_project("CircleShape", "shapes.js", "CircleShape")
    plan.use_project("Self", "view/Main.js")

    assert plan.statements() == [
        "import React from 'react'",
        "import _ from 'lodash'",
        "import { Template, Button as Button2 } from 'framework'",
        "import { CircleShape } from '../shapes'",
        "import List from './List'",
    ]
