"""Tests for the tree-sitter node helpers."""

from extjs2react.ast.nodes import same_tree
from extjs2react.ast.parser import parse_expression


def test_same_tree_ignores_whitespace_and_comments():
    a = parse_expression("{ a: 1, /* note */ b: [x, y] }")
    b = parse_expression("{a:1,\n  b:[x,y]}")

    assert same_tree(a, b)


def test_same_tree_compares_leaves():
    a = parse_expression("{ a: 1, b: [x, y] }")

    assert not same_tree(a, parse_expression("{ a: 1, b: [x, z] }"))
    assert not same_tree(a, parse_expression("[a, b]"))
    assert not same_tree(a, None)
    assert same_tree(None, None)
