"""Tests for the template micro-language compiler."""

import pytest

from extjs2react.ast.parser import parse_expression
from extjs2react.elements.printer import print_jsx
from extjs2react.elements.tree import Expression
from extjs2react.errors import TemplateSyntaxError
from extjs2react.template.compiler import TemplateCompiler, scope_variables
from extjs2react.template.interpolation import convert_interpolations
from extjs2react.template.parser import normalize_else


def test_interpolations():
    assert convert_interpolations("Hi {name}") == "Hi {data.name}"
    assert convert_interpolations("{.}") == "{data}"
    assert convert_interpolations("{price:currency('$')}") == (
        "{Ext.util.Format.currency(data.price, &apos;$&apos;)}"
    )
    assert convert_interpolations("{name:this.shout}", helper="helper") == (
        "{helper.shout(data.name)}"
    )


def test_inline_expressions_read_data():
    assert convert_interpolations("{[values.a + 1]}") == "{data.a + 1}"


def test_nested_else_is_closed_into_a_sibling():
    assert normalize_else('<tpl if="a">A<tpl else>B</tpl>') == (
        '<tpl if="a">A</tpl><tpl else>B</tpl>'
    )


def test_sibling_else_is_left_alone():
    markup = '<tpl if="a">A</tpl><tpl else>B</tpl>'

    assert normalize_else(markup) == markup


def test_if_else_becomes_a_ternary():
    compiler = TemplateCompiler()

    sibling = compiler.to_tree('<tpl if="active">On</tpl><tpl else>Off</tpl>')
    nested = compiler.to_tree('<tpl if="active">On<tpl else>Off</tpl>')

    assert print_jsx(sibling) == "data.active ? <>On</> : <>Off</>"
    assert print_jsx(nested) == print_jsx(sibling)


def test_if_without_else_short_circuits():
    tree = TemplateCompiler().to_tree('<tpl if="a &amp;&amp; !b">x</tpl>')

    assert print_jsx(tree) == "(data.a && !data.b) && <>x</>"


def test_elements_and_attributes():
    tree = TemplateCompiler().to_tree('<div class="{cls}">Hello {name}</div>')

    assert print_jsx(tree) == "<div className={`${data.cls}`}>Hello {data.name}</div>"


def test_single_expression_template():
    assert TemplateCompiler().to_tree("{[values.a + 1]}") == Expression("data.a + 1")


def test_compile_wraps_in_template():
    compiled = TemplateCompiler().compile('<tpl if="active">On</tpl><tpl else>Off</tpl>')

    assert compiled == "new Template(data => (\n  data.active ? <>On</> : <>Off</>\n))"


def test_compile_value_with_helper_object():
    value = parse_expression(
        "['<b>{name:this.shout}</b>', { shout: function(v){ return v.toUpperCase(); } }]"
    )

    compiled = TemplateCompiler().compile_value(value)

    assert compiled == (
        "new Template(data => {\n"
        "  const helper = { shout: function(v){ return v.toUpperCase(); } }\n"
        "\n"
        "  return <b>{helper.shout(data.name)}</b>\n"
        "})"
    )


def test_compile_value_keeps_other_values():
    assert TemplateCompiler().compile_value(parse_expression("makeTpl()")) == "makeTpl()"


def test_scope_variables_skips_globals_and_helper():
    assert scope_variables("active && !Ext.isEmpty(items)") == "data.active && !Ext.isEmpty(data.items)"
    assert scope_variables("helper.ok(a)", helper="helper") == "helper.ok(data.a)"


def test_mismatched_tags_raise():
    with pytest.raises(TemplateSyntaxError):
        TemplateCompiler().to_tree("<b>x</i>")


def test_unclosed_tags_raise():
    with pytest.raises(TemplateSyntaxError):
        TemplateCompiler().to_tree("<b>x")


def test_compile_value_with_helper_reference():
    """A trailing identifier is the object the formatters are called on."""
    value = parse_expression("['<b>{name:this.shout}</b>', '{a:this.x}', Formatters]")

    compiled = TemplateCompiler().compile_value(value)

    assert compiled == (
        "new Template(data => (\n"
        "  <><b>{Formatters.shout(data.name)}</b>{Formatters.x(data.a)}</>\n"
        "))"
    )
