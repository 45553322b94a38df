"""Rewrite engine: runs the normalization passes and rule tables over one class."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from extjs2react.ast.parser import is_valid
from extjs2react.ast.transform import Pass
from extjs2react.rewrite.passes import (
    ArrowFunctions,
    ArrowReturnShorthand,
    ClassNames,
    ConfigCalls,
    MeAlias,
    MemberReferences,
    RuleRewriter,
    StringConcat,
    VarToLet,
    ViewReferences,
    remove_semicolons,
)
from extjs2react.rewrite.rules import CALL_ALIASES, CALL_RULES, MEMBER_RULES, TransformRule

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewriteResult:
    code: str
    libraries: tuple[str, ...] = ()


class RewriteEngine:
    """Table-driven rewriting of a class or component body.

    Args:
        member_rules: Qualified member path rules, first match wins.
        call_rules: Qualified callee rules, first accepting match wins.
        aliases: Callee names normalised before rule lookup.
    """

    def __init__(
        self,
        member_rules: Optional[list[TransformRule]] = None,
        call_rules: Optional[list[TransformRule]] = None,
        aliases: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.member_rules = MEMBER_RULES if member_rules is None else member_rules
        self.call_rules = CALL_RULES if call_rules is None else call_rules
        self.aliases = CALL_ALIASES if aliases is None else aliases

    def passes(
        self,
        accessors: frozenset[str],
        class_names: Mapping[str, str],
        members: Optional[frozenset[str]],
        props: frozenset[str] = frozenset(),
    ) -> list[Pass]:
        passes: list[Pass] = []
        if class_names:
            passes.append(ClassNames(class_names))
        if accessors:
            passes.append(ConfigCalls(accessors))
        passes += [VarToLet(), ArrowFunctions(), MeAlias()]
        if members is not None:
            passes += [ViewReferences(drop_call_parent=True), MemberReferences(members, props)]
        passes += [
            ArrowFunctions(),
            ArrowReturnShorthand(),
            RuleRewriter(self.member_rules, self.call_rules, self.aliases),
            StringConcat(),
        ]
        return passes

    def rewrite(
        self,
        code: str,
        accessors: frozenset[str] = frozenset(),
        class_names: Optional[Mapping[str, str]] = None,
        members: Optional[frozenset[str]] = None,
        props: frozenset[str] = frozenset(),
    ) -> RewriteResult:
        """Rewrite code and collect the helper library tags it now needs.

        Args:
            code: A parseable program, usually one class or function declaration.
            accessors: Config names whose get/set calls become property access.
            class_names: Class name -> import name for structural renaming.
            members: Own member names of a component; enables component passes.
            props: Config names a component reads from ``props``.

        Returns:
            The rewritten code. Unparseable input is returned unchanged.
        """
        if not is_valid(code):
            log.debug("Skipping rewrite of unparseable code")
            return RewriteResult(code)

        libraries: list[str] = []
        for rewrite_pass in self.passes(accessors, class_names or {}, members, props):
            result = rewrite_pass.run(code)
            if result != code and not is_valid(result):
                log.warning(f"Rewrite pass {rewrite_pass.name} produced invalid code; skipped")
                continue
            code = result
            if isinstance(rewrite_pass, RuleRewriter):
                libraries += [lib for lib in rewrite_pass.libraries if lib not in libraries]

        return RewriteResult(remove_semicolons(code), tuple(libraries))
