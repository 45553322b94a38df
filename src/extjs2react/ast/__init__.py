"""AST utility layer over tree-sitter JavaScript trees."""

from extjs2react.ast.nodes import (
    arguments,
    call_name,
    children,
    dotted_name,
    elements,
    find_all,
    get_property,
    get_property_node,
    is_array,
    is_boolean,
    is_call,
    is_function,
    is_identifier,
    is_member,
    is_null,
    is_object,
    is_string,
    is_ternary,
    node_text,
    properties,
    property_name,
    property_value,
    same_tree,
    string_value,
    unwrap,
    walk,
)
from extjs2react.ast.parser import SourceTree, parse_expression, parse_source
from extjs2react.ast.transform import Pass, Transformer

__all__ = [
    "SourceTree",
    "parse_source",
    "parse_expression",
    "Transformer",
    "Pass",
    "arguments",
    "call_name",
    "children",
    "dotted_name",
    "elements",
    "find_all",
    "get_property",
    "get_property_node",
    "is_array",
    "is_boolean",
    "is_call",
    "is_function",
    "is_identifier",
    "is_member",
    "is_null",
    "is_object",
    "is_string",
    "is_ternary",
    "node_text",
    "properties",
    "property_name",
    "property_value",
    "same_tree",
    "string_value",
    "unwrap",
    "walk",
]
