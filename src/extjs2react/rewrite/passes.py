"""Normalization passes applied to every compiled class.

Each pass is a pure ``Pass``: it parses its input, rewrites bottom-up and
returns new source text.
"""

from __future__ import annotations

import logging
import re
from typing import Mapping, Optional

from tree_sitter import Node

from extjs2react.ast.nodes import (
    ancestor,
    arguments,
    callee,
    children,
    dotted_name,
    find_all,
    is_string,
    is_template_string,
    node_text,
    string_value,
    unwrap,
)
from extjs2react.ast.transform import Pass, Transformer
from extjs2react.rewrite.rules import (
    CALL_PARENT,
    DELETE_CALLS,
    Arg,
    TransformRule,
    callee_text,
    find_rule,
    with_alias,
)

log = logging.getLogger(__name__)

FUNCTION_SCOPES = frozenset(
    {
        "function_expression",
        "function",
        "function_declaration",
        "generator_function",
        "generator_function_declaration",
        "arrow_function",
        "method_definition",
    }
)
NON_ARROW_FUNCTIONS = frozenset({"function_expression", "function"})


def _removed_statement(node: Node) -> bool:
    return node.parent is not None and node.parent.type == "expression_statement"


class VarToLet(Pass):
    """``var`` -> ``let`` for declarations directly inside a function body."""

    name = "var-to-let"

    def visit_variable_declaration(self, node: Node) -> Optional[str]:
        parent = node.parent
        if (
            parent is not None
            and parent.type == "statement_block"
            and parent.parent is not None
            and parent.parent.type in FUNCTION_SCOPES
        ):
            return re.sub(r"^var\b", "let", self.generic_visit(node))
        return None


class ArrowFunctions(Pass):
    """Anonymous-safe function expressions -> arrow functions.

    Functions that use ``this``, ``arguments``, their own name or ``yield``
    keep their binding semantics and are left alone.
    """

    name = "arrow-functions"

    def visit_function_expression(self, node: Node) -> Optional[str]:
        if not self._convertible(node):
            return None
        params = node.child_by_field_name("parameters")
        body = node.child_by_field_name("body")
        if params is None or body is None:
            return None
        prefix = "async " if any(c.type == "async" for c in node.children) else ""
        return f"{prefix}{self.visit(params)} => {self.visit(body)}"

    visit_function = visit_function_expression

    def _convertible(self, node: Node) -> bool:
        own_name = node.child_by_field_name("name")
        own = node_text(own_name) if own_name is not None else None
        for inner in find_all(node, "this", "identifier", "super", "yield_expression"):
            if inner.type in ("this", "super", "yield_expression"):
                return False
            text = node_text(inner)
            if text == "arguments" or (own is not None and text == own and inner != own_name):
                return False
        return True


class _MeRenamer(Transformer):
    """Drops ``var me = this`` declarations and reads ``me`` as ``this``."""

    def visit_identifier(self, node: Node) -> Optional[str]:
        return "this" if self.text(node) == "me" else None

    def visit_shorthand_property_identifier(self, node: Node) -> Optional[str]:
        return "me: this" if self.text(node) == "me" else None

    def visit_variable_declaration(self, node: Node) -> Optional[str]:
        return self._declaration(node)

    def visit_lexical_declaration(self, node: Node) -> Optional[str]:
        return self._declaration(node)

    def _declaration(self, node: Node) -> Optional[str]:
        declarators = [c for c in children(node) if c.type == "variable_declarator"]
        keep = [d for d in declarators if not _is_me_declarator(d)]
        if len(keep) == len(declarators):
            return None
        if not keep:
            return ""
        kind = self.text(node.children[0])
        return f"{kind} " + ", ".join(self.visit(d) for d in keep)


def _is_me_declarator(node: Node) -> bool:
    name = node.child_by_field_name("name")
    value = node.child_by_field_name("value")
    return (
        name is not None
        and node_text(name) == "me"
        and value is not None
        and unwrap(value).type == "this"
    )


class MeAlias(Pass):
    """Remove ``var me = this`` when no plain function expression still needs ``me``."""

    name = "me-alias"

    def _scope(self, node: Node) -> Optional[str]:
        body = node.child_by_field_name("body")
        if body is None or body.type != "statement_block":
            return None
        declares = any(
            _is_me_declarator(d)
            for stmt in children(body)
            if stmt.type in ("variable_declaration", "lexical_declaration")
            for d in children(stmt)
            if d.type == "variable_declarator"
        )
        if not declares:
            return None
        for inner in find_all(node, *NON_ARROW_FUNCTIONS):
            if inner == node:
                continue
            if any(node_text(i) == "me" for i in find_all(inner, "identifier")):
                return None

        renamer = _MeRenamer()
        renamer._source = self._source
        return renamer.visit(node)

    visit_method_definition = _scope
    visit_arrow_function = _scope
    visit_function_expression = _scope
    visit_function = _scope
    visit_function_declaration = _scope


class ArrowReturnShorthand(Pass):
    """``(a) => { return a + 1 }`` -> ``(a) => a + 1``."""

    name = "arrow-return-shorthand"

    def visit_arrow_function(self, node: Node) -> Optional[str]:
        body = node.child_by_field_name("body")
        if body is None or body.type != "statement_block":
            return None
        if any(c.type == "comment" for c in body.named_children):
            return None
        statements = children(body)
        if len(statements) != 1 or statements[0].type != "return_statement":
            return None
        returned = children(statements[0])
        if not returned:
            return None

        expression = self.visit(returned[0])
        if unwrap(returned[0]).type == "object" and returned[0].type != "parenthesized_expression":
            expression = f"({expression})"
        if unwrap(returned[0]).type == "sequence_expression":
            expression = f"({expression})"

        params = node.child_by_field_name("parameters") or node.child_by_field_name("parameter")
        params_text = self.visit(params) if params is not None else "()"
        prefix = "async " if any(c.type == "async" for c in node.children) else ""
        return f"{prefix}{params_text} => {expression}"


def _template_escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace("`", "\\`")
        .replace("${", "\\${")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


class StringConcat(Pass):
    """``'a' + b + 'c'`` -> ``\\`a${b}c\\```.

    Only chains that start as string concatenation (a string among the first
    two operands) are coalesced, so numeric prefixes keep their arithmetic.
    """

    name = "string-concat"

    def visit_binary_expression(self, node: Node) -> Optional[str]:
        operands = self._operands(node)
        if operands is None or len(operands) < 2:
            return None
        if not any(is_string(o) or is_template_string(o) for o in operands[:2]):
            return None

        parts = []
        for operand in operands:
            if is_string(operand):
                parts.append(_template_escape(string_value(operand)))
            elif is_template_string(operand):
                parts.append(self.visit(operand)[1:-1])
            else:
                parts.append("${" + self.visit(unwrap(operand)) + "}")
        return "`" + "".join(parts) + "`"

    def _operands(self, node: Node) -> Optional[list[Node]]:
        operator = node.child_by_field_name("operator")
        if operator is None or node_text(operator) != "+":
            return None
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if left is None or right is None:
            return None
        if left.type == "binary_expression":
            head = self._operands(left)
            if head is None:
                return [left, right]
            return head + [right]
        return [left, right]


class ConfigCalls(Pass):
    """Accessor calls -> property access: ``getFoo()`` -> ``foo``, ``setFoo(v)`` -> ``foo = v``."""

    name = "config-calls"

    def __init__(self, accessors: frozenset[str]) -> None:
        super().__init__()
        self.accessors = accessors

    def visit_call_expression(self, node: Node) -> Optional[str]:
        fn = callee(node)
        if fn is None or fn.type != "member_expression":
            return None
        prop = fn.child_by_field_name("property")
        obj = fn.child_by_field_name("object")
        if prop is None or obj is None or prop.type != "property_identifier":
            return None

        method = node_text(prop)
        if len(method) <= 3 or method[:3] not in ("get", "set"):
            return None
        config = method[3].lower() + method[4:]
        if config not in self.accessors:
            return None

        args = arguments(node)
        target = f"{self.visit(obj)}.{config}"
        if method.startswith("get") and not args:
            return target
        if method.startswith("set") and len(args) == 1:
            assignment = f"{target} = {self.visit(args[0])}"
            if node.parent is not None and node.parent.type == "expression_statement":
                return assignment
            return f"({assignment})"
        return None


class ClassNames(Pass):
    """Replace class-name references with the unit's import names.

    Dotted member paths and string literals that name a known class are
    renamed structurally; identifiers and property keys are left alone.
    """

    name = "class-names"

    def __init__(self, names: Mapping[str, str]) -> None:
        super().__init__()
        self.names = names

    def visit_member_expression(self, node: Node) -> Optional[str]:
        dotted = dotted_name(node)
        if dotted is not None and dotted in self.names:
            return self.names[dotted]
        return None

    def visit_string(self, node: Node) -> Optional[str]:
        parent = node.parent
        if parent is not None and parent.type == "pair" and parent.child_by_field_name("key") == node:
            return None
        value = string_value(node)
        return self.names.get(value)


class RuleRewriter(Pass):
    """Apply the member and call rule tables plus the call removals."""

    name = "rules"

    def __init__(
        self,
        member_rules: list[TransformRule],
        call_rules: list[TransformRule],
        aliases: Mapping[str, str],
        delete_calls: tuple[str, ...] = DELETE_CALLS,
    ) -> None:
        super().__init__()
        self.member_rules = member_rules
        self.call_rules = call_rules
        self.aliases = dict(aliases)
        self.delete_calls = delete_calls
        self.libraries: list[str] = []

    def _use(self, rule: TransformRule) -> None:
        if rule.library and rule.library not in self.libraries:
            self.libraries.append(rule.library)

    def visit_expression_statement(self, node: Node) -> Optional[str]:
        inner = children(node)
        if len(inner) == 1 and inner[0].type == "call_expression":
            name = with_alias(callee_text(callee(inner[0])), self.aliases)
            if name in self.delete_calls:
                return ""
            if name == CALL_PARENT and self._super_call(inner[0]) == "":
                return ""
        return None

    def visit_call_expression(self, node: Node) -> Optional[str]:
        fn = callee(node)
        if fn is None:
            return None
        name = with_alias(callee_text(fn), self.aliases)

        if name in self.delete_calls:
            return "undefined"

        if name == CALL_PARENT:
            replacement = self._super_call(node)
            if replacement is not None:
                return replacement or "undefined"
            return None

        rule = find_rule(self.call_rules, name)
        args = arguments(node)
        if rule is not None and rule.accepts(len(args)):
            produced = rule.production(*[Arg(self.visit(a), a) for a in args])
            if produced is not None:
                self._use(rule)
                return produced
        return None

    def visit_member_expression(self, node: Node) -> Optional[str]:
        dotted = dotted_name(node)
        if dotted is None:
            return None
        name = with_alias(dotted, self.aliases)
        rule = find_rule(self.member_rules, name)
        if rule is None:
            return None
        groups = rule.match(name) or ()
        self._use(rule)
        return rule.production(*groups)

    def _super_call(self, node: Node) -> Optional[str]:
        """``super.method(...)`` for a class with a parent, "" when it has none.

        None when the call is not inside a class method.
        """
        method = ancestor(node, "method_definition")
        cls = ancestor(node, "class_declaration", "class")
        if method is None or cls is None:
            return None
        if not any(c.type == "class_heritage" for c in cls.children):
            return ""

        method_name = node_text(method.child_by_field_name("name"))
        args = arguments(node)
        if not args:
            call_args = ""
        elif len(args) == 1 and node_text(args[0]) == "arguments":
            call_args = "...arguments"
        elif len(args) == 1:
            arg = Arg(self.visit(args[0]), args[0])
            call_args = arg.exploded
        else:
            call_args = ", ".join(self.visit(a) for a in args)
        return f"super.{method_name}({call_args})"


class ViewReferences(Pass):
    """Component bodies: ``this.getView()`` / ``this.view`` -> ``this``."""

    name = "view-references"

    def __init__(self, drop_call_parent: bool = False) -> None:
        super().__init__()
        self.drop_call_parent = drop_call_parent

    def visit_expression_statement(self, node: Node) -> Optional[str]:
        inner = children(node)
        if (
            self.drop_call_parent
            and len(inner) == 1
            and inner[0].type == "call_expression"
            and callee_text(callee(inner[0])) == CALL_PARENT
        ):
            return ""
        return None

    def visit_call_expression(self, node: Node) -> Optional[str]:
        name = callee_text(callee(node))
        if name == "this.getView" and not arguments(node):
            return "this"
        if name == CALL_PARENT and self.drop_call_parent:
            return "undefined"
        return None

    def visit_member_expression(self, node: Node) -> Optional[str]:
        return "this" if dotted_name(node) == "this.view" else None


class MemberReferences(Pass):
    """Component bodies: ``this.foo`` / ``me.foo`` -> ``foo`` for the class' own members.

    Config names read from ``props`` instead: ``this.title`` -> ``props.title``.
    """

    name = "member-references"

    def __init__(self, members: frozenset[str], props: frozenset[str] = frozenset()) -> None:
        super().__init__()
        self.members = members
        self.props = props

    def _owner(self, node: Node) -> bool:
        obj = node.child_by_field_name("object")
        return obj is not None and (obj.type == "this" or node_text(obj) == "me")

    def visit_member_expression(self, node: Node) -> Optional[str]:
        prop = node.child_by_field_name("property")
        if not self._owner(node) or prop is None:
            return None
        name = node_text(prop)
        if name in self.props:
            return f"props.{name}"
        if name in self.members:
            return name
        return None

    def visit_subscript_expression(self, node: Node) -> Optional[str]:
        index = node.child_by_field_name("index")
        if not self._owner(node) or index is None or unwrap(index).type != "ternary_expression":
            return None
        ternary = unwrap(index)
        test = ternary.child_by_field_name("condition")
        arms = [ternary.child_by_field_name(f) for f in ("consequence", "alternative")]
        names = [string_value(a) if is_string(a) else node_text(a) for a in arms if a is not None]
        if test is None or len(names) != 2 or not all(n in self.members for n in names):
            return None
        return f"({self.visit(test)} ? {names[0]} : {names[1]})"


class BraceSemicolons(Transformer):
    """Drop a statement's ``;`` when only a closing brace follows it on its line."""

    def generic_visit(self, node: Node) -> str:
        if not node.children:
            return self.text(node)
        dropped = {
            child.id: ""
            for child in node.children
            if child.type == ";"
            and node.type not in ("for_statement", "empty_statement")
            and self._source[child.end_byte :].lstrip(b" \t")[:1] == b"}"
        }
        return self.splice(node, dropped)


def remove_semicolons(code: str) -> str:
    """Strip statement-terminating semicolons at line ends and before ``}``."""
    code = BraceSemicolons().transform_source(code)
    return re.sub(r";[ \t]*$", "", code, flags=re.MULTILINE)
