"""Predicates and lookups over tree-sitter JavaScript nodes."""

from __future__ import annotations

import re
from typing import Iterator, Optional

from tree_sitter import Node

FUNCTION_TYPES = frozenset(
    {"function_expression", "function", "arrow_function", "generator_function"}
)
STATEMENT_BLOCK = "statement_block"

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}
_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])")
_DOTTED_RE = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")


def node_text(node: Node) -> str:
    return node.text.decode("utf-8")


def children(node: Node) -> list[Node]:
    """Named children without comments."""
    return [c for c in node.named_children if c.type != "comment"]


def unwrap(node: Node) -> Node:
    """Strip redundant parentheses."""
    while node.type == "parenthesized_expression":
        inner = children(node)
        if len(inner) != 1:
            break
        node = inner[0]
    return node


def is_string(node: Optional[Node]) -> bool:
    return node is not None and node.type == "string"


def is_template_string(node: Optional[Node]) -> bool:
    return node is not None and node.type == "template_string"


def is_boolean(node: Optional[Node]) -> bool:
    return node is not None and node.type in ("true", "false")


def is_null(node: Optional[Node]) -> bool:
    return node is not None and node.type == "null"


def is_identifier(node: Optional[Node]) -> bool:
    return node is not None and node.type == "identifier"


def is_member(node: Optional[Node]) -> bool:
    return node is not None and node.type == "member_expression"


def is_object(node: Optional[Node]) -> bool:
    return node is not None and node.type == "object"


def is_array(node: Optional[Node]) -> bool:
    return node is not None and node.type == "array"


def is_ternary(node: Optional[Node]) -> bool:
    return node is not None and node.type == "ternary_expression"


def is_function(node: Optional[Node]) -> bool:
    """Function expressions, arrows and shorthand methods."""
    return node is not None and (
        node.type in FUNCTION_TYPES or node.type == "method_definition"
    )


def is_call(node: Optional[Node]) -> bool:
    return node is not None and node.type == "call_expression"


def boolean_value(node: Node) -> bool:
    return node.type == "true"


def _unescape(match: re.Match) -> str:
    seq = match.group(1)
    if seq.startswith("u{"):
        return chr(int(seq[2:-1], 16))
    if seq.startswith("u") and len(seq) == 5:
        return chr(int(seq[1:], 16))
    if seq.startswith("x") and len(seq) == 3:
        return chr(int(seq[1:], 16))
    if seq in ("\n", "\r\n", "\r", "\u2028", "\u2029"):
        return ""
    return _ESCAPES.get(seq, seq)


def string_value(node: Node) -> str:
    """Decoded value of a string literal."""
    raw = node_text(node)[1:-1]
    return _ESCAPE_RE.sub(_unescape, raw)


def quote(value: str) -> str:
    """Render value as a single-quoted JavaScript string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f"'{escaped}'"


def property_key(member: Node) -> Optional[Node]:
    if member.type in ("pair", "method_definition"):
        return member.child_by_field_name("key") or member.child_by_field_name("name")
    if member.type == "shorthand_property_identifier":
        return member
    return None


def property_name(member: Node) -> Optional[str]:
    """Name of an object member (pair, shorthand method or shorthand property)."""
    key = property_key(member)
    if key is None:
        return None
    if key.type == "string":
        return string_value(key)
    if key.type == "computed_property_name":
        return None
    return node_text(key)


def property_value(member: Node) -> Optional[Node]:
    """Value expression of a member; a shorthand method is its own value."""
    if member.type == "pair":
        return member.child_by_field_name("value")
    if member.type in ("method_definition", "shorthand_property_identifier"):
        return member
    return None


def properties(
    obj: Optional[Node],
    include: Optional[list[str]] = None,
    exclude: Optional[list[str]] = None,
) -> list[Node]:
    """Members of an object literal, optionally filtered by name."""
    if obj is None or obj.type != "object":
        return []
    members = []
    for member in children(obj):
        name = property_name(member)
        if name is None:
            continue
        if include is not None and name not in include:
            continue
        if exclude is not None and name in exclude:
            continue
        members.append(member)
    return members


def get_property_node(obj: Optional[Node], name: str) -> Optional[Node]:
    for member in properties(obj, include=[name]):
        return member
    return None


def get_property(obj: Optional[Node], name: str) -> Optional[Node]:
    """Value node of the first member called name."""
    member = get_property_node(obj, name)
    return property_value(member) if member is not None else None


def elements(array: Optional[Node]) -> list[Node]:
    if array is None or array.type != "array":
        return []
    return children(array)


def arguments(call: Node) -> list[Node]:
    args = call.child_by_field_name("arguments")
    if args is None or args.type != "arguments":
        return []
    return children(args)


def callee(call: Node) -> Optional[Node]:
    return call.child_by_field_name("function")


def call_name(call: Node) -> str:
    fn = callee(call)
    return node_text(fn) if fn is not None else ""


def dotted_name(node: Optional[Node]) -> Optional[str]:
    """``Ext.Array.clean`` for plain member chains, None for anything computed."""
    if node is None:
        return None
    if node.type in ("identifier", "this", "property_identifier"):
        return node_text(node)
    if node.type == "member_expression":
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        if obj is None or prop is None or prop.type != "property_identifier":
            return None
        base = dotted_name(obj)
        return f"{base}.{node_text(prop)}" if base else None
    return None


def is_dotted(text: str) -> bool:
    return bool(_DOTTED_RE.match(text))


def function_parts(fn: Node) -> tuple[str, str, bool]:
    """Return (parameters, body, is_async) source text of a function-like node.

    Parameters always include parentheses; an expression-bodied arrow gets a
    block body returning the expression.
    """
    params = fn.child_by_field_name("parameters")
    if params is not None:
        params_text = node_text(params)
    else:
        single = fn.child_by_field_name("parameter")
        params_text = f"({node_text(single)})" if single is not None else "()"

    body = fn.child_by_field_name("body")
    if body is None:
        body_text = "{}"
    elif body.type == STATEMENT_BLOCK:
        body_text = node_text(body)
    else:
        body_text = "{\n  return " + node_text(body) + "\n}"

    is_async = any(c.type == "async" for c in fn.children)
    return params_text, body_text, is_async


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal, iterative to stay clear of the recursion limit."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def find_all(node: Node, *types: str) -> Iterator[Node]:
    for current in walk(node):
        if current.type in types:
            yield current


def ancestor(node: Node, *types: str) -> Optional[Node]:
    current = node.parent
    while current is not None:
        if current.type in types:
            return current
        current = current.parent
    return None


def same_tree(a: Optional[Node], b: Optional[Node]) -> bool:
    """Structural equality ignoring whitespace and comments."""
    if a is None or b is None:
        return a is b
    if a.type != b.type:
        return False
    ca = [c for c in a.children if c.type != "comment"]
    cb = [c for c in b.children if c.type != "comment"]
    if not ca and not cb:
        return a.text == b.text
    return len(ca) == len(cb) and all(same_tree(x, y) for x, y in zip(ca, cb))
