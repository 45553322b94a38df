"""Element tree -> JSX source."""

from __future__ import annotations

import logging

from extjs2react.ast.nodes import quote
from extjs2react.ast.parser import is_valid
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

log = logging.getLogger(__name__)

INDENT = "  "


def print_attribute(attr: Attribute) -> str:
    if attr.kind == AttributeKind.PRESENCE:
        return attr.name
    if attr.kind == AttributeKind.SPREAD:
        return "{..." + (attr.value or "") + "}"
    if attr.kind == AttributeKind.LITERAL:
        value = attr.value or ""
        if '"' in value or "\n" in value or "\\" in value:
            return f"{attr.name}={{{quote(value)}}}"
        return f'{attr.name}="{value}"'
    return f"{attr.name}={{{attr.value}}}"


def _escape_text(text: str) -> str:
    out = []
    for char in text:
        if char == "{":
            out.append("{'{'}")
        elif char == "}":
            out.append("{'}'}")
        else:
            out.append(char)
    return "".join(out)


def _block(children: list[Child]) -> bool:
    """Children can go one per line without changing rendered whitespace."""
    return bool(children) and all(
        isinstance(c, (ElementNode, Fragment, Conditional)) for c in children
    )


def print_expression(node: Child, compact: bool = False) -> str:
    """Node as a JavaScript expression (conditionals bare, text as a fragment)."""
    if isinstance(node, Conditional):
        consequent = print_expression(node.consequent, compact=True)
        if node.alternate is None:
            if isinstance(node.consequent, Conditional):
                consequent = f"({consequent})"
            return f"{node.test} && {consequent}"
        alternate = print_expression(node.alternate, compact=True)
        return f"{node.test} ? {consequent} : {alternate}"
    if isinstance(node, Expression):
        return node.code
    if isinstance(node, Text):
        return f"<>{_escape_text(node.text)}</>"
    return print_node(node, compact=compact)


def print_child(node: Child, depth: int = 0, compact: bool = False) -> str:
    """Node as element content."""
    if isinstance(node, Text):
        return _escape_text(node.text)
    if isinstance(node, (Expression, Conditional)):
        return "{" + print_expression(node, compact=True) + "}"
    return print_node(node, depth, compact)


def print_node(node: Child, depth: int = 0, compact: bool = False) -> str:
    if not isinstance(node, (ElementNode, Fragment)):
        return print_expression(node, compact)

    if isinstance(node, ElementNode):
        attrs = "".join(" " + print_attribute(a) for a in node.attributes)
        if not node.children:
            return f"<{node.tag}{attrs} />"
        opening, closing = f"<{node.tag}{attrs}>", f"</{node.tag}>"
    else:
        opening, closing = "<>", "</>"

    if compact or not _block(node.children):
        inner = "".join(print_child(c, compact=True) for c in node.children)
        return f"{opening}{inner}{closing}"

    pad = INDENT * (depth + 1)
    lines = [opening]
    lines += [pad + print_child(c, depth + 1) for c in node.children]
    lines.append(INDENT * depth + closing)
    return "\n".join(lines)


def print_jsx(node: Child) -> str:
    """Pretty JSX, or the compact rendering when the pretty one does not parse."""
    pretty = print_expression(node) if not isinstance(node, (ElementNode, Fragment)) else print_node(node)
    if is_valid(f"({pretty})"):
        return pretty
    compact = print_expression(node, compact=True)
    if not is_valid(f"({compact})"):
        log.warning(f"Generated markup does not parse: {compact[:80]}")
    return compact
