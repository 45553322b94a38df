"""Code layout helpers shared by the emitters."""

from __future__ import annotations

import posixpath
import re
from typing import Union

Lines = Union[str, list]

INDENT = "  "


def indent(text: str, level: int = 1) -> str:
    """Indent every non-blank line of text."""
    prefix = INDENT * level
    return "\n".join(prefix + line if line.strip() else "" for line in text.split("\n"))


def code(*lines: Lines) -> str:
    """Join lines; each nested list is one indentation level deeper.

    >>> code("if(a){", ["b()"], "}")
    'if(a){\\n  b()\\n}'
    """
    out: list[str] = []
    for line in lines:
        if isinstance(line, (list, tuple)):
            out.append(indent(code(*line)))
        else:
            out.append(line)
    return "\n".join(out)


def dedent_fragment(text: str) -> str:
    """Normalize indentation of a fragment cut out of a larger file.

    The first line has lost its leading whitespace; the continuation lines keep
    the original file's indentation, which is removed down to the least
    indented continuation line.
    """
    lines = text.split("\n")
    if len(lines) == 1:
        return text
    rest = [line for line in lines[1:] if line.strip()]
    if not rest:
        return text
    width = min(len(line) - len(line.lstrip()) for line in rest)
    return "\n".join([lines[0]] + [line[width:] if line.strip() else "" for line in lines[1:]])


def collapse_blank_lines(text: str) -> str:
    return re.sub(r"\n[ \t]*\n(?:[ \t]*\n)+", "\n\n", text)


def relative_import_path(from_file: str, to_file: str) -> str:
    """Relative module specifier from one unit to another.

    ``relative_import_path('/1/2/3/4/foo.js', '/1/2/a/b/c/bar.js')`` is
    ``'../../a/b/c/bar.js'``.
    """
    from_dir = posixpath.dirname(from_file) or "."
    path = posixpath.relpath(to_file, from_dir)
    if not path.startswith(".."):
        path = "./" + path
    return path


def module_specifier(from_file: str, to_file: str) -> str:
    """Import specifier: relative path without ``.js`` and ``/index``."""
    path = relative_import_path(from_file, to_file)
    path = re.sub(r"\.js$", "", path)
    path = re.sub(r"/index$", "", path)
    return path
