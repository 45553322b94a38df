"""Extraction of raw class declarations from source units.

Only the unit itself is consulted here; every reference to another class is
recorded as written and resolved later by ``Registry.finalize``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from tree_sitter import Node

from extjs2react.ast.nodes import (
    arguments,
    boolean_value,
    call_name,
    children,
    dotted_name,
    elements,
    get_property,
    is_array,
    is_boolean,
    is_dotted,
    is_function,
    is_member,
    is_null,
    is_object,
    is_string,
    is_ternary,
    node_text,
    properties,
    property_name,
    property_value,
    string_value,
    unwrap,
    walk,
)
from extjs2react.ast.parser import SourceTree, parse_source
from extjs2react.registry.model import CONFIG_BLOCKS, ClassModel, MemberEntry

log = logging.getLogger(__name__)

ALIAS_PREFIXES = {
    "xtype": "widget.",
    "viewModel": "viewmodel.",
    "controller": "controller.",
}
ALIAS_CONFIGS = ("xtype", "alias", "controller", "viewModel")
STATIC_BLOCKS = ("statics", "inheritableStatics")

_CALL_NAME_RE = re.compile(r"^[A-Za-z0-9_$.\[\]()]+$")


@dataclass
class SourceUnit:
    """One source file and the classes it declares."""

    path: str
    source: str = ""
    tree: Optional[SourceTree] = None
    parseable: bool = False
    classes: list[ClassModel] = field(default_factory=list)
    from_snapshot: bool = False


def has_define_call(source: str, define_callee: str = "Ext.define") -> bool:
    pattern = re.escape(define_callee) + r"\(\s*['\"][^'\"]+['\"]"
    return re.search(pattern, source) is not None


def load_unit(path: str, source: str, define_callee: str = "Ext.define") -> SourceUnit:
    """Parse one unit and extract its class declarations.

    Units without a literal define call, or that do not parse cleanly, are
    returned unparseable and are copied through unmodified.
    """
    unit = SourceUnit(path=path, source=source)
    if not has_define_call(source, define_callee):
        return unit

    tree = parse_source(source)
    if tree.has_error:
        log.warning(f"Syntax errors in {path}; copying it unmodified")
        return unit

    unit.tree = tree
    unit.parseable = True
    unit.classes = extract_classes(tree, path, define_callee)
    return unit


def extract_classes(
    tree: SourceTree, unit_path: str, define_callee: str = "Ext.define"
) -> list[ClassModel]:
    classes: list[ClassModel] = []
    for node in walk(tree.root):
        if node.type == "call_expression" and call_name(node) == define_callee:
            cls = _class_from_define(node, unit_path, define_callee)
            if cls is not None:
                classes.append(cls)
        elif node.type == "comment":
            classes.extend(_classes_from_comment(node, unit_path))
    return classes


def _class_from_define(
    call: Node, unit_path: str, define_callee: str
) -> Optional[ClassModel]:
    args = arguments(call)
    if not args or is_null(args[0]):
        return None

    if not is_string(args[0]):
        log.error(
            f"Error parsing {define_callee} call ({unit_path}): "
            "Expected first argument to be a string"
        )
        return None

    name = string_value(args[0])
    body = unwrap(args[1]) if len(args) > 1 else None

    if body is not None and is_function(body):
        block = body.child_by_field_name("body")
        returns = (
            [c for c in children(block) if c.type == "return_statement"]
            if block is not None and block.type == "statement_block"
            else []
        )
        if len(returns) == 1 and children(returns[0]):
            body = unwrap(children(returns[0])[0])
        elif block is not None and block.type != "statement_block":
            body = unwrap(block)

    if not is_object(body):
        log.error(
            f"Error parsing {define_callee} call ({name}): "
            "Expected second argument to be a function or object"
        )
        return None

    return extract_class(name, body, unit_path, call=call)


def _classes_from_comment(comment: Node, unit_path: str) -> list[ClassModel]:
    """Placeholder classes declared by a ``/** Classes: ... */`` comment."""
    text = node_text(comment)
    if not text.startswith("/*"):
        return []
    lines = [
        re.sub(r"^\*\s*", "", line.strip()).strip()
        for line in text[2:].removesuffix("*/").split("\n")
    ]
    lines = [line for line in lines if line]
    if not lines or lines[0].lower() != "classes:":
        return []
    return [
        ClassModel(name=line, unit_path=unit_path)
        for line in lines[1:]
        if is_dotted(line)
    ]


def reference_candidates(node: Node) -> list[str]:
    """Every string that might name a class in a reference expression.

    Objects contribute keys and values (``mixins: { observable: 'X' }``),
    arrays their elements; anything else its source text.
    """
    node = unwrap(node)
    if is_object(node):
        out: list[str] = []
        for member in properties(node):
            out.append(property_name(member) or "")
            value = property_value(member)
            if value is not None and value is not member:
                out.extend(reference_candidates(value))
        return [c for c in out if c]
    if is_array(node):
        return [c for el in elements(node) for c in reference_candidates(el)]
    if is_string(node):
        return [string_value(node)]
    return [node_text(node)]


def aliases_from_node(
    config_name: str,
    node: Node,
    on_error: Optional[Callable[[str], None]] = None,
) -> list[str]:
    """Aliases declared by an ``xtype``/``alias``/``controller``/``viewModel`` value.

    Args:
        config_name: Which member the value belongs to; selects the prefix.
        node: The value expression.
        on_error: Receives a message for shapes that cannot name an alias.

    Returns:
        Prefixed aliases in declaration order; both arms of a ternary count.
    """
    prefix = ALIAS_PREFIXES.get(config_name, "")
    aliases: list[str] = []

    def handle(node: Node) -> None:
        node = unwrap(node)
        if is_string(node):
            aliases.append(prefix + string_value(node))
        elif is_null(node):
            return
        elif is_array(node) and config_name in ("xtype", "alias"):
            for el in elements(node):
                handle(el)
        elif is_object(node) and config_name in ("controller", "viewModel"):
            type_node = get_property(node, "type")
            if type_node is not None:
                handle(type_node)
        elif is_ternary(node):
            for arm in ("consequence", "alternative"):
                child = node.child_by_field_name(arm)
                if child is not None:
                    handle(child)
        elif on_error is not None:
            on_error(f"Error parsing {config_name}: {node_text(node)}")

    handle(node)
    return aliases


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def extract_class(
    name: str, body: Node, unit_path: str, call: Optional[Node] = None
) -> ClassModel:
    """Read the raw fields of one class body."""
    errors: list[str] = []

    def report(message: str) -> None:
        if message not in errors:
            errors.append(message)

    model = ClassModel(name=name, unit_path=unit_path, body=body, call=call)

    extend = get_property(body, "extend")
    if extend is not None:
        refs = reference_candidates(extend)
        model.parent_ref = refs[0] if refs else None

    override = get_property(body, "override")
    if override is not None:
        refs = reference_candidates(override)
        model.override = refs[0] if refs else node_text(override)

    alternate = get_property(body, "alternateClassName")
    if alternate is not None:
        model.alternate_names = _unique(reference_candidates(alternate))

    singleton = get_property(body, "singleton")
    model.singleton = is_boolean(singleton) and boolean_value(singleton)

    for key in ("xtype", "alias"):
        value = get_property(body, key)
        if value is not None:
            model.aliases.extend(aliases_from_node(key, value, report))
    model.aliases = _unique(model.aliases)

    mixins = get_property(body, "mixins")
    if mixins is not None:
        model.mixin_refs = _unique(reference_candidates(mixins))

    plugins = get_property(body, "plugins")
    if plugins is not None:
        model.plugin_refs = _unique(reference_candidates(plugins))

    controller = get_property(body, "controller")
    if controller is not None:
        found = aliases_from_node("controller", controller, report)
        model.controller_alias = found[0] if found else None

    for block in CONFIG_BLOCKS:
        obj = get_property(body, block)
        for member in properties(obj):
            config_name = property_name(member)
            model.declared_configs[block].append(config_name)
            model.members.append(
                MemberEntry(config_name, member, property_value(member), block)
            )

    for member in properties(body, exclude=["config"]):
        model.members.append(
            MemberEntry(property_name(member), member, property_value(member))
        )

    for block in STATIC_BLOCKS:
        for member in properties(get_property(body, block)):
            model.statics.append(
                MemberEntry(property_name(member), member, property_value(member), block)
            )

    used: list[str] = []
    refs: list[str] = []
    if mixins is not None:
        refs.extend(model.mixin_refs)
    requires = get_property(body, "requires")
    if requires is not None:
        refs.extend(reference_candidates(requires))

    for node in walk(body):
        if node.type == "object":
            for member in properties(node):
                key = property_name(member)
                if key in ALIAS_CONFIGS:
                    used.extend(aliases_from_node(key, property_value(member), report))
        elif node.type == "string":
            value = string_value(node)
            if is_dotted(value):
                refs.append(value)
        elif is_member(node) and not is_member(node.parent):
            refs.extend(_member_prefixes(node))
        elif node.type == "call_expression":
            call_text = call_name(node)
            if _CALL_NAME_RE.match(call_text):
                model.method_calls.append(call_text)

    model.aliases_used = [a for a in _unique(used) if a not in model.aliases]
    model.class_refs = [r for r in _unique(refs) if r != name]

    for message in errors:
        log.error(f"{message} ({name})")

    return model


def _member_prefixes(node: Node) -> list[str]:
    """``A.b.C.d`` -> ``A.b.C.d``, ``A.b.C``, ``A.b``, ``A``."""
    dotted = dotted_name(node)
    if not dotted:
        return []
    parts = dotted.split(".")
    if parts[0] in ("this", "me"):
        return []
    return [".".join(parts[:i]) for i in range(len(parts), 0, -1)]
