"""AST rewrite rule engine."""

from extjs2react.rewrite.engine import RewriteEngine, RewriteResult
from extjs2react.rewrite.rules import (
    CALL_ALIASES,
    CALL_RULES,
    MEMBER_RULES,
    Arg,
    TransformRule,
    find_rule,
)

__all__ = [
    "Arg",
    "CALL_ALIASES",
    "CALL_RULES",
    "MEMBER_RULES",
    "RewriteEngine",
    "RewriteResult",
    "TransformRule",
    "find_rule",
]
