"""Tree-sitter parsing of JavaScript source units."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import get_language

log = logging.getLogger(__name__)

LANGUAGE = "javascript"


@lru_cache(maxsize=1)
def get_parser() -> Parser:
    """Return the shared JavaScript parser (the grammar includes JSX)."""
    log.debug(f"Loading {LANGUAGE} parser")
    return Parser(get_language(LANGUAGE))


@dataclass(frozen=True)
class SourceTree:
    """A parsed unit: source text plus its syntax tree."""

    source: str
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def has_error(self) -> bool:
        return self.root.has_error

    @property
    def source_bytes(self) -> bytes:
        return self.source.encode("utf-8")


def parse_source(source: str) -> SourceTree:
    """Parse JavaScript source text.

    Tree-sitter never raises on malformed input; check ``has_error`` on the
    result instead.
    """
    tree = get_parser().parse(source.encode("utf-8"))
    return SourceTree(source=source, tree=tree)


def parse_expression(code: str) -> Node:
    """Parse a single expression and return its node.

    Raises:
        ValueError: If code is not one well-formed expression.
    """
    tree = parse_source(f"({code}\n)")
    statements = [c for c in tree.root.named_children if c.type != "comment"]
    if tree.has_error or len(statements) != 1 or statements[0].type != "expression_statement":
        raise ValueError(f"Not an expression: {code}")

    wrapper = statements[0].named_children[0]
    inner = [c for c in wrapper.named_children if c.type != "comment"]
    if wrapper.type != "parenthesized_expression" or len(inner) != 1:
        raise ValueError(f"Not an expression: {code}")
    return inner[0]


def is_valid(code: str) -> bool:
    """Return True when code parses without syntax errors."""
    return not parse_source(code).has_error
