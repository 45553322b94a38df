"""Template values -> ``new Template(data => ...)`` expressions."""

from __future__ import annotations

import logging
import re
from typing import Optional

from tree_sitter import Node

from extjs2react.ast.nodes import (
    elements,
    is_array,
    is_identifier,
    is_member,
    is_object,
    is_string,
    node_text,
    string_value,
    unwrap,
)
from extjs2react.ast.parser import parse_source
from extjs2react.ast.transform import Transformer
from extjs2react.elements.printer import print_jsx
from extjs2react.elements.tree import (
    Attribute,
    AttributeKind,
    Child,
    Conditional,
    ElementNode,
    Expression,
    Fragment,
    Text,
)
from extjs2react.template.interpolation import (
    THIS_RE,
    VALUES_RE,
    convert_interpolations,
    unencode,
)
from extjs2react.template.parser import (
    ConditionalNode,
    GroupNode,
    TagNode,
    TemplateNode,
    TextNode,
    parse_template,
)
from extjs2react.util import code

log = logging.getLogger(__name__)

HELPER_NAME = "helper"
DATA_NAME = "data"
ATTRIBUTE_NAMES = {"class": "className"}
_INTERPOLATION_RE = re.compile(r"\{([^}]+)\}")


class _DataScope(Transformer):
    """Bare lower-case identifiers read from the data object."""

    def __init__(self, exclude: frozenset[str]) -> None:
        super().__init__()
        self.exclude = exclude

    def _scoped(self, name: str) -> bool:
        return name not in self.exclude and name[:1].islower()

    def visit_identifier(self, node: Node) -> Optional[str]:
        name = self.text(node)
        parent = node.parent
        if parent is not None and parent.type in ("formal_parameters", "arrow_function"):
            return None
        return f"{DATA_NAME}.{name}" if self._scoped(name) else None

    def visit_shorthand_property_identifier(self, node: Node) -> Optional[str]:
        name = self.text(node)
        return f"{name}: {DATA_NAME}.{name}" if self._scoped(name) else None


def scope_variables(expression: str, helper: Optional[str] = None) -> str:
    """``active && !locked`` -> ``data.active && !data.locked``."""
    exclude = {DATA_NAME, "undefined", "arguments"}
    if helper:
        exclude.add(helper.split(".")[0])
    tree = parse_source(expression)
    if tree.has_error:
        log.warning(f"Cannot scope template expression: {expression}")
        return expression
    return _DataScope(frozenset(exclude)).transform(tree).strip()


def split_interpolations(text: str) -> list[Child]:
    """Text with ``{expression}`` groups -> Text and Expression children."""
    children: list[Child] = []
    cursor = 0
    depth = 0
    start = 0
    for i, char in enumerate(text):
        if char == "{":
            if depth == 0:
                if i > cursor:
                    children.append(Text(text[cursor:i]))
                start = i
            depth += 1
        elif char == "}" and depth:
            depth -= 1
            if depth == 0:
                children.append(Expression(unencode(text[start + 1 : i]).strip()))
                cursor = i + 1
    if cursor < len(text):
        children.append(Text(text[cursor:]))
    return children


def _template_literal(value: str) -> str:
    parts = []
    cursor = 0
    for match in _INTERPOLATION_RE.finditer(value):
        parts.append(value[cursor : match.start()].replace("`", "\\`"))
        parts.append("${" + unencode(match.group(1)).strip() + "}")
        cursor = match.end()
    parts.append(value[cursor:].replace("`", "\\`"))
    return "`" + "".join(parts) + "`"


def _significant(children: list[Child]) -> list[Child]:
    """Drop whitespace-only text spanning lines, which markup ignores anyway."""
    return [c for c in children if not (isinstance(c, Text) and not c.text.strip() and "\n" in c.text)]


def as_branch(children: list[Child]) -> Child:
    """One child as is; anything else in a fragment."""
    children = _significant(children)
    if len(children) == 1 and isinstance(children[0], (ElementNode, Conditional)):
        return children[0]
    if len(children) == 1 and isinstance(children[0], Expression):
        expression = children[0].code
        return Expression(f"({expression})" if " " in expression else expression)
    return Fragment(children)


class TemplateCompiler:
    """Compiles template markup into element trees and Template expressions."""

    def __init__(self, template_class: str = "Template") -> None:
        self.template_class = template_class

    def to_tree(self, markup: str, helper: Optional[str] = None) -> Child:
        """Template markup -> element tree.

        Raises:
            TemplateSyntaxError: If the markup is malformed.
        """
        nodes = parse_template(convert_interpolations(markup, helper))
        children = _significant(self._children(nodes, helper))
        if len(children) == 1 and isinstance(children[0], (ElementNode, Conditional, Expression)):
            return children[0]
        return Fragment(children)

    def compile(self, markup: str, helper: Optional[str] = None, helper_code: Optional[str] = None) -> str:
        """Template markup -> ``new Template(data => ...)`` source.

        Args:
            markup: Template text.
            helper: Name through which ``this.fn`` formatters are called.
            helper_code: Object literal bound to ``helper`` inside the function.
        """
        jsx = print_jsx(self.to_tree(markup, helper))
        if helper_code is not None:
            body = ["return (", [jsx], ")"] if "\n" in jsx else [f"return {jsx}"]
            return code(
                f"new {self.template_class}({DATA_NAME} => {{",
                [f"const {HELPER_NAME} = {helper_code}", "", *body],
                "})",
            )
        return code(f"new {self.template_class}({DATA_NAME} => (", [jsx], "))")

    def compile_value(self, value: Node) -> str:
        """Compile a ``tpl`` config value: a string or an array of strings plus a helper.

        Other values are returned as their source text.
        """
        value = unwrap(value)
        if not is_array(value) and not is_string(value):
            return node_text(value)

        helper = helper_code = None
        if is_array(value):
            items = elements(value)
            last = items[-1] if items else None
            if is_identifier(last) or is_member(last):
                helper = node_text(last)
            elif is_object(last):
                helper, helper_code = HELPER_NAME, node_text(last)
            markup = "".join(string_value(item) for item in items if is_string(item))
        else:
            markup = string_value(value)

        return self.compile(markup, helper, helper_code)

    def _children(self, nodes: list[TemplateNode], helper: Optional[str]) -> list[Child]:
        children: list[Child] = []
        for node in nodes:
            if isinstance(node, TextNode):
                children += split_interpolations(node.text)
            elif isinstance(node, GroupNode):
                children += self._children(node.children, helper)
            elif isinstance(node, ConditionalNode):
                children.append(self._conditional(node, helper))
            else:
                children.append(self._element(node, helper))
        return children

    def _test(self, test: str, helper: Optional[str]) -> str:
        test = VALUES_RE.sub(DATA_NAME, unencode(test or "false"))
        test = THIS_RE.sub(f"{helper}." if helper else "this.", test)
        test = scope_variables(test, helper)
        if any(op in test for op in ("&&", "||", "?")):
            test = f"({test})"
        return test

    def _conditional(self, node: ConditionalNode, helper: Optional[str]) -> Conditional:
        alternate: Optional[Child] = None
        if isinstance(node.orelse, ConditionalNode):
            alternate = self._conditional(node.orelse, helper)
        elif node.orelse is not None:
            alternate = as_branch(self._children(node.orelse, helper))
        return Conditional(
            test=self._test(node.test, helper),
            consequent=as_branch(self._children(node.children, helper)),
            alternate=alternate,
        )

    def _element(self, node: TagNode, helper: Optional[str]) -> ElementNode:
        attributes = []
        for name, value in node.attributes:
            name = ATTRIBUTE_NAMES.get(name, name)
            if value is None:
                attributes.append(Attribute(name, kind=AttributeKind.PRESENCE))
            elif _INTERPOLATION_RE.search(value):
                attributes.append(Attribute(name, _template_literal(value)))
            else:
                attributes.append(Attribute(name, unencode(value), AttributeKind.LITERAL))
        return ElementNode(
            tag=node.name,
            attributes=attributes,
            children=self._children(node.children, helper),
            text_capable=True,
        )
