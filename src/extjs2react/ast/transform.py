"""Pure, bottom-up source transforms over tree-sitter trees.

A ``Transformer`` works like ``ast.NodeTransformer`` but produces text: each
``visit_<node type>`` method returns the replacement source for that node (or
None to keep the default), and the default splices the visited children back
into the node's own text. Trees are never mutated; passes chain by re-parsing
the previous pass' output.
"""

from __future__ import annotations

from typing import Optional

from tree_sitter import Node

from extjs2react.ast.parser import SourceTree, parse_source


class Transformer:
    """Bottom-up text transformer."""

    def __init__(self) -> None:
        self._source = b""

    def transform(self, tree: SourceTree) -> str:
        self._source = tree.source_bytes
        root = tree.root
        head = self._source[: root.start_byte].decode("utf-8")
        tail = self._source[root.end_byte :].decode("utf-8")
        return head + self.visit(root) + tail

    def transform_source(self, source: str) -> str:
        return self.transform(parse_source(source))

    def text(self, node: Node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8")

    def visit(self, node: Node) -> str:
        method = getattr(self, f"visit_{node.type}", None)
        if method is not None:
            result: Optional[str] = method(node)
            if result is not None:
                return result
        return self.generic_visit(node)

    def generic_visit(self, node: Node) -> str:
        if not node.children:
            return self.text(node)
        return self.splice(node, {})

    def splice(self, node: Node, replacements: dict[int, str]) -> str:
        """Rebuild node's text from its visited children.

        ``replacements`` maps a child's ``id`` to text used instead of visiting
        it; an empty string removes the child together with the whitespace
        in front of it.
        """
        parts: list[str] = []
        cursor = node.start_byte
        for child in node.children:
            gap = self._source[cursor : child.start_byte].decode("utf-8")
            if child.id in replacements:
                text = replacements[child.id]
            else:
                text = self.visit(child)
            if not text and child.end_byte > child.start_byte and not gap.strip():
                gap = ""
            parts.append(gap)
            parts.append(text)
            cursor = child.end_byte
        parts.append(self._source[cursor : node.end_byte].decode("utf-8"))
        return "".join(parts)


class Pass(Transformer):
    """A named transform; ``run`` parses, transforms and returns new source."""

    name = "pass"

    def run(self, source: str) -> str:
        return self.transform_source(source)
