"""Template markup -> template AST.

Markup is normalised before parsing: comments are dropped, void HTML
elements self-close, ``<`` / ``>`` inside interpolations are escaped and the
framework's nested ``<tpl else>`` form is closed into a sibling.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from extjs2react.errors import TemplateSyntaxError

log = logging.getLogger(__name__)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    start="start",
    maybe_placeholders=False,
)

VOID_ELEMENTS = ("area", "br", "embed", "frame", "hr", "img", "input")

_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_VOID_RE = re.compile(r"<(%s)\b([^>]*?)\s*/?>" % "|".join(VOID_ELEMENTS), re.IGNORECASE)
_VOID_END_RE = re.compile(r"</(%s)\s*>" % "|".join(VOID_ELEMENTS), re.IGNORECASE)
_TPL_TAG_RE = re.compile(r"<(/?)tpl\b([^>]*)>")
_TAG_NAME_RE = re.compile(r"</?\s*([A-Za-z][A-Za-z0-9_:.-]*)")
_ATTRIBUTE_RE = re.compile(
    r"""([^\s=/>"']+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>"'/]+)))?"""
)


@dataclass
class TextNode:
    text: str


@dataclass
class TagNode:
    name: str
    attributes: list[tuple[str, Optional[str]]] = field(default_factory=list)
    children: list["TemplateNode"] = field(default_factory=list)

    def get(self, name: str) -> Optional[str]:
        for key, value in self.attributes:
            if key == name:
                return value if value is not None else ""
        return None

    def has(self, name: str) -> bool:
        return self.get(name) is not None


@dataclass
class ConditionalNode:
    """``<tpl if>`` block; ``orelse`` continues with an elseif block or a plain else group."""

    test: str
    children: list["TemplateNode"] = field(default_factory=list)
    orelse: Optional[Union["ConditionalNode", list["TemplateNode"]]] = None


@dataclass
class GroupNode:
    children: list["TemplateNode"] = field(default_factory=list)


TemplateNode = Union[TextNode, TagNode, ConditionalNode, GroupNode]


def _escape_interpolations(markup: str) -> str:
    out = []
    depth = 0
    for char in markup:
        if char == "{":
            depth += 1
        elif char == "}" and depth:
            depth -= 1
        elif depth and char == "<":
            char = "&lt;"
        elif depth and char == ">":
            char = "&gt;"
        out.append(char)
    return "".join(out)


def _tpl_kind(attributes: str) -> str:
    if re.search(r"\belseif\s*=", attributes):
        return "elseif"
    if re.search(r"\belse\b(?!if)", attributes):
        return "else"
    if re.search(r"\bif\s*=", attributes):
        return "if"
    return "group"


def normalize_else(markup: str) -> str:
    """``<tpl if="a">A<tpl else>B</tpl>`` -> ``<tpl if="a">A</tpl><tpl else>B</tpl>``.

    An else that already follows a closed if block is left alone.
    """
    out: list[str] = []
    stack: list[str] = []
    cursor = 0
    last_chain_close: Optional[int] = None

    for match in _TPL_TAG_RE.finditer(markup):
        out.append(markup[cursor : match.start()])
        cursor = match.end()

        if match.group(1):
            kind = stack.pop() if stack else None
            if kind in ("if", "elseif", "else"):
                last_chain_close = match.end()
            out.append(match.group(0))
            continue

        kind = _tpl_kind(match.group(2))
        if kind in ("elseif", "else"):
            sibling = (
                last_chain_close is not None
                and not markup[last_chain_close : match.start()].strip()
            )
            if not sibling and stack and stack[-1] in ("if", "elseif"):
                stack.pop()
                out.append("</tpl>")
        if not match.group(2).rstrip().endswith("/"):
            stack.append(kind)
        out.append(match.group(0))

    out.append(markup[cursor:])
    return "".join(out)


def preprocess(markup: str) -> str:
    markup = _COMMENT_RE.sub("", markup)
    markup = _escape_interpolations(markup)
    markup = _VOID_END_RE.sub("", markup)
    markup = _VOID_RE.sub(lambda m: f"<{m.group(1)}{m.group(2)} />", markup)
    return normalize_else(markup)


def _tag_name(token: str) -> str:
    return _TAG_NAME_RE.match(token).group(1)


def _attributes(token: str) -> list[tuple[str, Optional[str]]]:
    body = token[_TAG_NAME_RE.match(token).end() :].rstrip(">").rstrip("/")
    attributes = []
    for match in _ATTRIBUTE_RE.finditer(body):
        name = match.group(1)
        values = [v for v in match.group(2, 3, 4) if v is not None]
        attributes.append((name, values[0] if values else None))
    return attributes


def _build(node: Union[Tree, Token]) -> TemplateNode:
    if node.data == "text":
        return TextNode(str(node.children[0]))

    start = str(node.children[0])
    name = _tag_name(start)
    tag = TagNode(name=name, attributes=_attributes(start))
    if node.data == "empty_element":
        return tag

    end = str(node.children[-1])
    if _tag_name(end) != name:
        raise TemplateSyntaxError(f"expected </{name}> but found {end}")
    tag.children = chain_conditionals([_build(child) for child in node.children[1:-1]])
    return tag


def _is_blank(node: TemplateNode) -> bool:
    return isinstance(node, TextNode) and not node.text.strip()


def _is_tpl(node: TemplateNode, *kinds: str) -> bool:
    if not isinstance(node, TagNode) or node.name != "tpl":
        return False
    return not kinds or any(node.has(kind) for kind in kinds)


def chain_conditionals(nodes: list[TemplateNode]) -> list[TemplateNode]:
    """Fold ``<tpl>`` tags into conditional chains and transparent groups."""
    out: list[TemplateNode] = []
    tail: Optional[ConditionalNode] = None
    pending_blank: list[TemplateNode] = []

    for node in nodes:
        if tail is not None and _is_blank(node):
            pending_blank.append(node)
            continue

        if tail is not None and _is_tpl(node, "elseif"):
            link = ConditionalNode(test=node.get("elseif"), children=node.children)
            tail.orelse = link
            tail = link
            pending_blank = []
            continue

        if tail is not None and _is_tpl(node, "else"):
            tail.orelse = node.children
            tail = None
            pending_blank = []
            continue

        out.extend(pending_blank)
        pending_blank = []
        tail = None

        if _is_tpl(node, "if"):
            tail = ConditionalNode(test=node.get("if"), children=node.children)
            out.append(tail)
        elif _is_tpl(node):
            if node.has("for"):
                log.warning(f"Unsupported <tpl for=\"{node.get('for')}\">; content is rendered once")
            elif node.has("else") or node.has("elseif"):
                log.warning("<tpl else> without a preceding <tpl if>")
            out.append(GroupNode(children=node.children))
        else:
            out.append(node)

    out.extend(pending_blank)
    return out


def parse_template(markup: str) -> list[TemplateNode]:
    """Parse template markup into a list of top-level nodes.

    Raises:
        TemplateSyntaxError: If the markup is not well formed.
    """
    source = preprocess(markup)
    try:
        tree = _PARSER.parse(source)
    except UnexpectedInput as e:
        raise TemplateSyntaxError(str(e).strip().splitlines()[0], markup) from e
    return chain_conditionals([_build(child) for child in tree.children])
