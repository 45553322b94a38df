"""Capitalization heuristics for export and listener names.

Ext JS aliases are lower case (``widget.userlist``) while the generated code
wants ``UserList``. Known words, harvested from class names, are restored to
their capitalized form. The word list is an immutable value passed to whoever
needs it instead of growing global state.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

DEFAULT_WORDS = (
    "Change",
    "Tap",
    "HeaderPin",
    "KeyUp",
    "Initialize",
    "Disclose",
    "Record",
    "Validated",
    "Cmp",
    "Icon",
    "Mode",
    "Width",
)

_CAMEL_SPLIT = re.compile(r"(?=[A-Z])")


def capitalize_word(word: str) -> str:
    """Upper-case the first letter and lower-case the rest."""
    return word[:1].upper() + word[1:].lower()


def upper_first(word: str) -> str:
    return word[:1].upper() + word[1:]


def words_from_class_names(class_names: Iterable[str]) -> list[str]:
    """Split dotted camel-case class names into capitalized words longer than 3 chars."""
    words: list[str] = []
    for class_name in class_names:
        for part in class_name.split("."):
            for word in _CAMEL_SPLIT.split(part):
                if len(word) > 3:
                    words.append(capitalize_word(word))
    return words


@dataclass(frozen=True)
class NamingContext:
    """Ordered word list used to restore capitalization.

    Shorter words are applied first so longer words get the final say; on equal
    length, custom words are applied last.
    """

    words: tuple[str, ...] = DEFAULT_WORDS
    custom_words: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        custom_words: Iterable[str] = (),
        class_names: Iterable[str] = (),
        base: "NamingContext | None" = None,
    ) -> "NamingContext":
        custom = list(custom_words)
        prior = list(base.words if base is not None else DEFAULT_WORDS)
        custom_set = frozenset(custom) | (base.custom_words if base else frozenset())

        unique: list[str] = []
        for word in prior + custom + words_from_class_names(class_names):
            if word and word not in unique:
                unique.append(word)

        unique.sort(key=lambda w: (len(w), w in custom_set))
        return cls(words=tuple(unique), custom_words=custom_set)

    def extend(self, class_names: Iterable[str]) -> "NamingContext":
        return NamingContext.build(class_names=class_names, base=self)

    def capitalize(self, text: str) -> str:
        """Restore known words inside text and upper-case its first letter."""
        if not text:
            return text
        for word in self.words:
            text = re.sub(re.escape(word), word, text, flags=re.IGNORECASE)
        return upper_first(text)

    def export_name(self, class_name: str, aliases: Iterable[str] = ()) -> str:
        """Derive the exported identifier of a class.

        Args:
            class_name: Dotted class name, e.g. ``MyApp.view.user.List``.
            aliases: Class aliases; the first one wins when present.

        Returns:
            ``UserList`` for ``widget.userlist``, ``UserListController`` for
            ``controller.userlist``, ``ListUserView`` for an alias-less
            ``MyApp.view.user.List``.
        """
        aliases = list(aliases)
        if not aliases:
            parts = class_name.split(".")
            name = "".join(upper_first(p) for p in reversed(parts[1:]) if p)
            return name or upper_first(class_name)

        parts = aliases[0].split(".")
        namespace = "".join(capitalize_word(p) for p in parts[:-1])
        alias = capitalize_word(re.sub(r".*-", "", parts[-1]))
        suffix = {"Viewmodel": "Model"}.get(namespace, namespace)
        return self.capitalize(alias) + ("" if suffix == "Widget" else suffix)
