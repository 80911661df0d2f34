"""Bounded, side-effect-free condition language."""

from bedrock.domain.conditions.evaluator import evaluate, resolve_path
from bedrock.domain.conditions.nodes import (
    All,
    AnyOf,
    Compare,
    Exists,
    Expr,
    ListOf,
    Literal,
    Not,
    Var,
)
from bedrock.domain.conditions.parser import DEFAULT_MAX_DEPTH, parse_condition

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "All",
    "AnyOf",
    "Compare",
    "Exists",
    "Expr",
    "ListOf",
    "Literal",
    "Not",
    "Var",
    "evaluate",
    "parse_condition",
    "resolve_path",
]
