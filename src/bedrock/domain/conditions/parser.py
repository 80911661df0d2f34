"""Compile condition documents (JSON) into expression trees."""

from typing import Any

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
from bedrock.domain.exceptions import ConditionError

DEFAULT_MAX_DEPTH = 64

COMPARISON_OPERATORS = frozenset(
    {
        "==",
        "!=",
        ">",
        ">=",
        "<",
        "<=",
        "in",
        "not_in",
        "contains",
        "starts_with",
        "ends_with",
        "matches",
    }
)

_SCALARS = (str, int, float, bool, type(None))


def parse_condition(document: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Expr:
    """Compile a condition document into an expression tree.

    A document is a scalar, a list, or a single-key object naming the
    operator: ``{"==": [{"var": "resource.status"}, "draft"]}``.

    Raises:
        ConditionError: unknown operator, wrong arity or nesting deeper than max_depth.
    """
    return _parse(document, 0, max_depth)


def _parse(document: Any, depth: int, max_depth: int) -> Expr:
    if depth > max_depth:
        raise ConditionError(f"Condition nested deeper than {max_depth}")

    if isinstance(document, _SCALARS):
        return Literal(document)

    if isinstance(document, (list, tuple)):
        if all(isinstance(item, _SCALARS) for item in document):
            return Literal(tuple(document))
        return ListOf(tuple(_parse(item, depth + 1, max_depth) for item in document))

    if not isinstance(document, dict):
        raise ConditionError(f"Unsupported condition value: {type(document).__name__}")
    if len(document) != 1:
        raise ConditionError("Condition object must have exactly one operator key")

    op, args = next(iter(document.items()))

    if op == "var":
        return _parse_var(args)
    if op == "exists":
        path = args[0] if isinstance(args, list) and len(args) == 1 else args
        if not isinstance(path, str) or not path:
            raise ConditionError("exists expects a path string")
        return Exists(path)
    if op in ("and", "or"):
        if not isinstance(args, list) or not args:
            raise ConditionError(f"{op} expects a non-empty list")
        items = tuple(_parse(item, depth + 1, max_depth) for item in args)
        return All(items) if op == "and" else AnyOf(items)
    if op in ("not", "!"):
        if isinstance(args, list):
            if len(args) != 1:
                raise ConditionError("not expects exactly one operand")
            args = args[0]
        return Not(_parse(args, depth + 1, max_depth))
    if op in COMPARISON_OPERATORS:
        if not isinstance(args, list) or len(args) != 2:
            raise ConditionError(f"{op} expects exactly two operands")
        return Compare(
            op,
            _parse(args[0], depth + 1, max_depth),
            _parse(args[1], depth + 1, max_depth),
        )

    raise ConditionError(f"Unknown operator: {op!r}")


def _parse_var(args: Any) -> Var:
    if isinstance(args, str):
        path, rest = args, []
    elif isinstance(args, list) and args and isinstance(args[0], str):
        path, rest = args[0], args[1:]
    else:
        raise ConditionError("var expects a path string")
    if not path:
        raise ConditionError("var path must not be empty")
    if len(rest) > 1:
        raise ConditionError("var accepts at most one default")
    if rest:
        default = rest[0]
        if not isinstance(default, _SCALARS):
            raise ConditionError("var default must be a scalar")
        return Var(path, default=default, has_default=True)
    return Var(path)
