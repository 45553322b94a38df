"""Tests for the rewrite passes and the rule engine."""

from extjs2react.rewrite.engine import RewriteEngine
from extjs2react.rewrite.passes import (
    ArrowFunctions,
    ArrowReturnShorthand,
    ClassNames,
    ConfigCalls,
    MeAlias,
    StringConcat,
    VarToLet,
    remove_semicolons,
)

METHOD = """\
class A extends B {
  init(){
    var me = this;
    Ext.Array.each(me.items, function(item){ console.log(item) });
    this.callParent(arguments);
    return Ext.isEmpty(me.name) ? 'a' + me.name : '';
  }
}
"""


def test_var_to_let_only_in_function_bodies():
    code = "var top = 1;\nfunction f(){\n  var x = 1;\n}\n"

    assert VarToLet().run(code) == "var top = 1;\nfunction f(){\n  let x = 1;\n}\n"


def test_arrow_functions_keep_this_bound_functions():
    code = "a(function(x){ return x; });\nb(function(){ return this; });\n"

    result = ArrowFunctions().run(code)

    assert "a((x) => { return x; });" in result
    assert "b(function(){ return this; });" in result


def test_arrow_return_shorthand():
    assert ArrowReturnShorthand().run("f((x) => { return x + 1 });") == "f((x) => x + 1);"


def test_arrow_return_shorthand_wraps_objects():
    assert ArrowReturnShorthand().run("f(() => { return {a: 1} });") == "f(() => ({a: 1}));"


def test_me_alias_removed_when_unused_by_functions():
    code = "class A {\n  f(){\n    let me = this;\n    return me.x;\n  }\n}\n"

    result = MeAlias().run(code)

    assert "let me" not in result
    assert "return this.x;" in result


def test_me_alias_kept_for_plain_functions():
    """A nested non-arrow function still needs the alias."""
    code = "class A {\n  f(){\n    let me = this;\n    g(function(){ return me.x; });\n  }\n}\n"

    assert MeAlias().run(code) == code


def test_string_concat():
    assert StringConcat().run("x = 'a' + b + 'c';") == "x = `a${b}c`;"


def test_string_concat_keeps_numeric_prefix():
    assert StringConcat().run("x = 1 + 2;") == "x = 1 + 2;"


def test_config_calls():
    code = "this.setTitle(this.getTitle() + 1);\nx = a.getTitle();\ny = a.getOther();\n"

    result = ConfigCalls(frozenset({"title"})).run(code)

    assert "this.title = this.title + 1;" in result
    assert "x = a.title;" in result
    assert "y = a.getOther();" in result


def test_class_names_rename_values_not_keys():
    code = "x = Ext.create('App.view.Main');\ny = { 'App.view.Main': App.view.Main };\n"

    result = ClassNames({"App.view.Main": "Main"}).run(code)

    assert "Ext.create(Main)" in result
    assert "{ 'App.view.Main': Main }" in result


def test_remove_semicolons():
    assert remove_semicolons("a();\nb();  \nfor(;;){}") == "a()\nb()\nfor(;;){}"


def test_remove_semicolons_before_closing_brace():
    code = "function f(){ a(); }\ns = 'x; }';\n"

    assert remove_semicolons(code) == "function f(){ a() }\ns = 'x; }'\n"


def test_engine_applies_rules_and_collects_libraries():
    result = RewriteEngine().rewrite(METHOD)

    assert "let me" not in result.code
    assert "this.items.forEach((item) => { console.log(item) })" in result.code
    assert "super.init(...arguments)" in result.code
    assert "_.isEmpty(this.name) ? `a${this.name}` : ''" in result.code
    assert result.libraries == ("_",)


def test_engine_is_idempotent():
    engine = RewriteEngine()
    first = engine.rewrite(METHOD)

    assert engine.rewrite(first.code).code == first.code


def test_call_aliases_reach_rules():
    """Ext.encode is an alias of Ext.JSON.encode."""
    result = RewriteEngine().rewrite("x = Ext.encode(data);\n")

    assert result.code == "x = JSON.stringify(data)\n"


def test_init_config_calls_are_removed():
    code = "class A {\n  constructor(config){\n    this.initConfig(config);\n    this.x = 1;\n  }\n}\n"

    result = RewriteEngine().rewrite(code)

    assert result.code == "class A {\n  constructor(config){\n    this.x = 1\n  }\n}\n"


def test_removed_statement_leaves_no_gap_on_one_line():
    code = "class A {\n  construct(){ this.initConfig(); this.a = 1; }\n}\n"

    result = RewriteEngine().rewrite(code)

    assert result.code == "class A {\n  construct(){ this.a = 1 }\n}\n"


def test_call_parent_without_parent_is_removed():
    code = "class A {\n  init(){\n    this.callParent();\n    this.x = 1;\n  }\n}\n"

    result = RewriteEngine().rewrite(code)

    assert "callParent" not in result.code
    assert "super" not in result.code


def test_component_passes_read_props_and_members():
    """this.<config> reads props and this.<member> the local binding."""
    code = (
        "function View(props){\n"
        "  const save = function(){\n"
        "    this.getView().close();\n"
        "    return this.title;\n"
        "  }\n"
        "  const reset = function(){\n"
        "    this.save();\n"
        "  }\n"
        "}\n"
    )

    result = RewriteEngine().rewrite(
        code,
        members=frozenset({"save", "reset"}),
        props=frozenset({"title"}),
    )

    assert "this.close()" in result.code
    assert "return this.title" not in result.code
    assert "const reset = () => {\n    save()\n  }" in result.code


def test_unparseable_code_is_returned_unchanged():
    assert RewriteEngine().rewrite("function (").code == "function ("
