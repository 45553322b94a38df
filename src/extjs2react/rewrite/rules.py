"""Rewrite rule tables.

Member rules replace a whole qualified member path (``Ext.isEmpty`` ->
``_.isEmpty``); call rules replace a whole call and receive its arguments.
Both are keyed by a qualified-name pattern where ``*`` matches exactly one
namespace segment, and may tag a helper library the output needs.

Possibly breaking changes are noted next to each rule.
"""

from __future__ import annotations

import inspect
import re
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from tree_sitter import Node

from extjs2react.ast.nodes import children, is_array, is_function, node_text, unwrap
from extjs2react.ast.parser import parse_expression

WRAP_TYPES = frozenset(
    {
        "ternary_expression",
        "binary_expression",
        "assignment_expression",
        "augmented_assignment_expression",
        "arrow_function",
        "sequence_expression",
        "unary_expression",
        "await_expression",
        "yield_expression",
        "update_expression",
        "new_expression",
        "function_expression",
        "function",
    }
)


def compile_pattern(pattern: str) -> re.Pattern:
    """``*.app.*`` -> regex with one capture group per wildcard segment."""
    body = re.escape(pattern).replace(r"\*", r"([A-Z0-9_$]+)")
    return re.compile(f"^{body}$", re.IGNORECASE)


@dataclass(frozen=True)
class Arg:
    """One call argument: rewritten text plus the original node's shape."""

    text: str
    node: Node

    @property
    def wrapped(self) -> str:
        """Text safe to use as the object of a member access."""
        return f"({self.text})" if unwrap(self.node).type in WRAP_TYPES else self.text

    @property
    def exploded(self) -> str:
        """Array literal elements inline, anything else spread."""
        if is_array(unwrap(self.node)):
            return self.text.strip()[1:-1].strip()
        return f"...{self.wrapped}"


@dataclass(frozen=True)
class TransformRule:
    """Qualified-name pattern, production and optional helper library tag."""

    pattern: str
    production: Callable[..., Optional[str]]
    library: Optional[str] = None
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", compile_pattern(self.pattern))

    def match(self, name: str) -> Optional[tuple[str, ...]]:
        m = self.regex.match(name)
        return m.groups() if m else None

    def accepts(self, count: int) -> bool:
        """Whether the production can be called with count positional arguments."""
        try:
            inspect.signature(self.production).bind(*range(count))
        except TypeError:
            return False
        return True


def find_rule(rules: Sequence[TransformRule], name: str) -> Optional[TransformRule]:
    for rule in rules:
        if rule.match(name) is not None:
            return rule
    return None


def _join(*args: Optional[Arg]) -> str:
    return ", ".join(a.text for a in args if a is not None)


def swap_params(fn_text: str, first: int = 0, second: int = 1) -> Optional[str]:
    """Swap two parameters of a function expression, or None if it has fewer."""
    try:
        fn = unwrap(parse_expression(fn_text))
    except ValueError:
        return None
    if not is_function(fn):
        return None
    params_node = fn.child_by_field_name("parameters")
    if params_node is None:
        return None
    params = children(params_node)
    if len(params) <= max(first, second):
        return None

    a, b = params[first], params[second]
    if a.start_byte > b.start_byte:
        a, b = b, a
    source = fn.text
    base = fn.start_byte
    swapped = (
        source[: a.start_byte - base]
        + b.text
        + source[a.end_byte - base : b.start_byte - base]
        + a.text
        + source[b.end_byte - base :]
    )
    return swapped.decode("utf-8")


# Member rules


def _lodash(name: str) -> Callable[..., str]:
    return lambda *_: f"_.{name}"


def _literal(text: str) -> Callable[..., str]:
    return lambda *_: text


MEMBER_RULES: list[TransformRule] = [
    TransformRule("*.app.*", lambda app, method: f"App.{method}", "App"),
    TransformRule("Ext.Array.clean", _lodash("compact"), "_"),
    TransformRule("Ext.Array.difference", _lodash("difference"), "_"),
    TransformRule("Ext.Array.flatten", _lodash("flattenDeep"), "_"),
    TransformRule("Ext.Array.intersect", _lodash("intersection"), "_"),
    TransformRule("Ext.Array.pluck", _lodash("map"), "_"),
    TransformRule("Ext.Array.remove", _lodash("pull"), "_"),
    TransformRule("Ext.Array.unique", _lodash("uniq"), "_"),
    TransformRule("Ext.JSON.decode", _literal("JSON.parse")),
    TransformRule("Ext.JSON.encode", _literal("JSON.stringify")),
    TransformRule("Ext.Number.constrain", _lodash("clamp"), "_"),
    TransformRule("Ext.String.capitalize", _lodash("upperFirst"), "_"),
    TransformRule("Ext.baseCSSPrefix", _literal("'x-'")),
    TransformRule("Ext.clone", _lodash("cloneDeep"), "_"),
    TransformRule("Ext.emptyFn", _literal("() => {}")),
    TransformRule("Ext.isArray", _lodash("isArray"), "_"),
    TransformRule("Ext.isDate", _lodash("isDate"), "_"),
    # a call site keeps its arguments: Ext.isDefined(x) -> !_.isUndefined(x)
    TransformRule("Ext.isDefined", _literal("!_.isUndefined"), "_"),
    TransformRule("Ext.isEmpty", _lodash("isEmpty"), "_"),
    TransformRule("Ext.isFunction", _lodash("isFunction"), "_"),
    # finite numbers only
    TransformRule("Ext.isNumber", _lodash("isFinite"), "_"),
    TransformRule("Ext.isString", _lodash("isString"), "_"),
]


# Call rules


def _array_contains(array: Arg, item: Arg) -> str:
    return f"{array.wrapped}.includes({item.text})"


def _array_each(array: Arg, fn: Arg, scope: Arg = None, reverse: Arg = None) -> Optional[str]:
    if scope is not None or reverse is not None:
        return None
    return f"{array.wrapped}.forEach({fn.text})"


def _array_index_of(array: Arg, item: Arg, start: Arg = None) -> str:
    return f"{array.wrapped}.indexOf({_join(item, start)})"


def _array_map(array: Arg, fn: Arg, scope: Arg = None) -> str:
    return f"{array.wrapped}.map({_join(fn, scope)})"


def _function_bind(fn: Arg, scope: Arg = None, args: Arg = None, append: Arg = None) -> Optional[str]:
    # only prepended arguments map onto Function.prototype.bind
    if args is not None and (append is None or append.text.strip() != "0"):
        return None
    scope_text = "window" if scope is None else scope.text
    args_text = "" if args is None else f", {args.exploded}"
    return f"{fn.wrapped}.bind({scope_text}{args_text})"


def _number_to_fixed(value: Arg, precision: Arg) -> str:
    return f"{value.wrapped}.toFixed({precision.text})"


def _object_each(obj: Arg, fn: Arg, scope: Arg = None) -> Optional[str]:
    if scope is not None:
        return None
    swapped = swap_params(fn.text)
    if swapped is None:
        return None
    return f"_.forEach({obj.text}, {swapped})"


def _object_get_size(obj: Arg) -> str:
    return f"Object.keys({obj.text}).length"


def _string_left_pad(string: Arg, size: Arg, character: Arg = None) -> str:
    return f"{string.wrapped}.padStart({_join(size, character)})"


def _string_trim(string: Arg) -> str:
    # trims whitespace only, not the framework's trimRegex set
    return f"{string.wrapped}.trim()"


def _defer(
    fn: Arg, millis: Arg = None, scope: Arg = None, args: Arg = None, append: Arg = None
) -> Optional[str]:
    if scope is not None or args is not None:
        bound = _function_bind(fn, scope, args, append)
        if bound is None:
            return None
    else:
        bound = fn.text
    return f"setTimeout({_join(Arg(bound, fn.node), millis)})"


def _apply(obj: Arg, config: Arg, defaults: Arg = None) -> str:
    defaults_text = "" if defaults is None else f", {defaults.text}"
    return f"Object.assign({obj.text}{defaults_text}, {config.text})"


def _apply_if(obj: Arg, config: Arg) -> str:
    return (
        f"_.assignWith({obj.text}, {config.text}, "
        "(objValue, srcValue) => _.isUndefined(objValue) ? srcValue : objValue)"
    )


def _is_numeric(value: Arg) -> str:
    return f"_.isFinite(+{value.wrapped})"


CALL_RULES: list[TransformRule] = [
    TransformRule("Ext.Array.contains", _array_contains),
    TransformRule("Ext.Array.each", _array_each),
    TransformRule("Ext.Array.indexOf", _array_index_of),
    TransformRule("Ext.Array.map", _array_map),
    TransformRule("Ext.Function.bind", _function_bind),
    TransformRule("Ext.Number.toFixed", _number_to_fixed),
    TransformRule("Ext.Object.each", _object_each, "_"),
    TransformRule("Ext.Object.getSize", _object_get_size),
    TransformRule("Ext.String.leftPad", _string_left_pad),
    TransformRule("Ext.String.trim", _string_trim),
    TransformRule("Ext.defer", _defer),
    TransformRule("Ext.apply", _apply),
    TransformRule("Ext.applyIf", _apply_if, "_"),
    TransformRule("Ext.isNumeric", _is_numeric, "_"),
]

CALL_ALIASES: dict[str, str] = {
    "Ext.bind": "Ext.Function.bind",
    "Ext.encode": "Ext.JSON.encode",
    "Ext.decode": "Ext.JSON.decode",
}

DELETE_CALLS = ("this.initConfig",)

CALL_PARENT = "this.callParent"


def with_alias(name: str, aliases: dict[str, str] = CALL_ALIASES) -> str:
    return aliases.get(name, name)


def callee_text(node: Node) -> str:
    """Callee source with whitespace removed, as matched against rules."""
    return re.sub(r"\s+", "", node_text(node))
