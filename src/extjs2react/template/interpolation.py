"""Lexical rewriting of template interpolations into JavaScript expressions.

Inline expressions ``{[ ... ]}`` are rewritten first; they may hold quotes and
braces that would confuse the field scan, so the ranges they occupy in the
output are recorded and skipped by the second pass.

``{name}`` reads ``data.name``, ``{.}`` reads ``data`` and
``{name:fn(args)}`` calls ``Ext.util.Format.fn(data.name, args)``, or
``helper.fn(...)`` for ``this.fn`` when the template has a helper.
"""

from __future__ import annotations

import re
from typing import Optional

INLINE_RE = re.compile(r"\{\[(.+?)\]\}", re.DOTALL)
FIELD_RE = re.compile(r"\{([^}]+)\}")
FORMATTER_RE = re.compile(r"([^(]+)(\((.+)\))?", re.DOTALL)
VALUES_RE = re.compile(r"\bvalues\b")
THIS_RE = re.compile(r"\bthis\.")

DEFAULT_FORMATTER = "Ext.util.Format"

ENCODINGS = (
    ("&quot;", '"'),
    ("&apos;", "'"),
    ("&gt;", ">"),
    ("&lt;", "<"),
    ("&amp;", "&"),
)


def escape_quotes(code: str) -> str:
    return code.replace('"', "&quot;").replace("'", "&apos;")


def unencode(text: str) -> str:
    for encoded, plain in ENCODINGS:
        text = text.replace(encoded, plain)
    return text


def _helper_prefix(helper: Optional[str]) -> str:
    return f"{helper}." if helper else ""


def convert_inline(tpl: str, helper: Optional[str]) -> tuple[str, list[tuple[int, int]]]:
    """``{[ values.a ]}`` -> ``{data.a}``; returns the text and the rewritten ranges."""
    out: list[str] = []
    ranges: list[tuple[int, int]] = []
    cursor = 0
    length = 0
    for match in INLINE_RE.finditer(tpl):
        out.append(tpl[cursor : match.start()])
        length += match.start() - cursor

        expression = escape_quotes(match.group(1).strip())
        expression = VALUES_RE.sub("data", expression)
        expression = THIS_RE.sub(_helper_prefix(helper), expression)
        replacement = "{" + expression + "}"

        ranges.append((length, length + len(replacement)))
        out.append(replacement)
        length += len(replacement)
        cursor = match.end()
    out.append(tpl[cursor:])
    return "".join(out), ranges


def convert_field(expression: str, helper: Optional[str]) -> str:
    """Body of one ``{field}`` / ``{field:fn(args)}`` interpolation, without braces."""
    expression = escape_quotes(expression.strip())
    field, _, call = expression.partition(":")
    field = field.strip()
    value = "data" if field == "." else f"data.{field}"
    if not call:
        return value

    match = FORMATTER_RE.match(call.strip())
    fn_name, extra = match.group(1).strip(), match.group(3)
    if fn_name.startswith("this."):
        target = helper or "this"
        fn = f"{target}.{fn_name[len('this.'):]}"
    else:
        fn = f"{DEFAULT_FORMATTER}.{fn_name}"
    args = ", ".join(a for a in (value, extra.strip() if extra else None) if a)
    return f"{fn}({args})"


def convert_interpolations(tpl: str, helper: Optional[str] = None) -> str:
    """Rewrite both interpolation forms into ``{expression}`` groups."""
    tpl, ranges = convert_inline(tpl, helper)

    def inside_inline(offset: int) -> bool:
        return any(start <= offset < end for start, end in ranges)

    out: list[str] = []
    cursor = 0
    for match in FIELD_RE.finditer(tpl):
        if inside_inline(match.start()):
            continue
        out.append(tpl[cursor : match.start()])
        out.append("{" + convert_field(match.group(1), helper) + "}")
        cursor = match.end()
    out.append(tpl[cursor:])
    return "".join(out)
