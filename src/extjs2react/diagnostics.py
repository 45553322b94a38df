"""Append-only diagnostic tallies collected during a run."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

CALL_OBJECTS = ("Ext", "Math")


@dataclass
class Diagnostics:
    """Counters for data-integrity reports and capability-table tuning.

    Accumulation order never affects results, only report ordering.
    """

    duplicate_classes: list[str] = field(default_factory=list)
    duplicate_aliases: list[str] = field(default_factory=list)
    unknown_aliases: Counter = field(default_factory=Counter)
    unknown_classes: Counter = field(default_factory=Counter)
    unrecognized_tags: Counter = field(default_factory=Counter)
    unrecognized_props: Counter = field(default_factory=Counter)
    properties: Counter = field(default_factory=Counter)
    fallbacks: list[str] = field(default_factory=list)

    def tag_unrecognized(self, tag: str) -> None:
        self.unrecognized_tags[tag] += 1

    def prop_unrecognized(self, tag: str, prop: str) -> None:
        self.unrecognized_props[f"{tag}.{prop}"] += 1


def normalize_call(call: str) -> str:
    """``Ext.Array.each`` -> ``Ext.Array``, ``me.foo`` -> ``.foo``."""
    object_name, _, rest = call.partition(".")
    if not rest:
        return call
    method = rest.split(".")[0]
    if object_name == "me":
        object_name = "this"
    return (object_name if object_name in CALL_OBJECTS else "") + "." + method


def rank_calls(calls: list[str]) -> list[tuple[str, int]]:
    """Normalized call frequencies, most frequent first."""
    counts = Counter(normalize_call(call) for call in calls)
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def rank(counter: Counter) -> list[tuple[str, int]]:
    return sorted(counter.items(), key=lambda item: (-item[1], item[0]))
