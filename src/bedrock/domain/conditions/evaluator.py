"""Pure evaluator for condition expression trees.

The evaluator is the fail-closed boundary of the condition language: any
malformed document or evaluation error (unknown operator, type mismatch,
missing variable) yields ``False`` and is never raised to the caller.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

from bedrock.domain.conditions.nodes import (
    NODE_TYPES,
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
from bedrock.domain.exceptions import ConditionError

logger = logging.getLogger(__name__)

_MISSING = object()


def evaluate(
    expr: Any,
    context: Mapping[str, Any],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> bool:
    """Evaluate a condition against a read-only context.

    ``expr`` may be a compiled tree or a raw condition document. ``None``
    (absent condition) is always true. Only a strict boolean ``True``
    result counts as passing.
    """
    if expr is None:
        return True
    try:
        node = expr if isinstance(expr, NODE_TYPES) else parse_condition(expr, max_depth=max_depth)
        result = _eval(node, context, 0, max_depth)
    except ConditionError as exc:
        logger.debug("Condition failed closed: %s", exc)
        return False
    except Exception as exc:
        logger.debug("Condition failed closed: %s: %s", type(exc).__name__, exc)
        return False
    return result is True


def resolve_path(context: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted path in nested mappings/lists. Returns a sentinel when missing."""
    current: Any = context
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return _MISSING
            current = current[part]
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return _MISSING
            current = current[index]
        else:
            return _MISSING
    return current


def is_missing(value: Any) -> bool:
    return value is _MISSING


def _eval(node: Expr, context: Mapping[str, Any], depth: int, max_depth: int) -> Any:
    if depth > max_depth:
        raise ConditionError(f"Condition nested deeper than {max_depth}")

    if isinstance(node, Literal):
        return node.value
    if isinstance(node, ListOf):
        return tuple(_eval(item, context, depth + 1, max_depth) for item in node.items)
    if isinstance(node, Var):
        value = resolve_path(context, node.path)
        if value is _MISSING:
            if node.has_default:
                return node.default
            raise ConditionError(f"Unknown variable: {node.path}")
        return value
    if isinstance(node, Exists):
        value = resolve_path(context, node.path)
        return value is not _MISSING and value is not None
    if isinstance(node, All):
        for item in node.items:
            if not _as_bool(_eval(item, context, depth + 1, max_depth)):
                return False
        return True
    if isinstance(node, AnyOf):
        for item in node.items:
            if _as_bool(_eval(item, context, depth + 1, max_depth)):
                return True
        return False
    if isinstance(node, Not):
        return not _as_bool(_eval(node.item, context, depth + 1, max_depth))
    if isinstance(node, Compare):
        left = _eval(node.left, context, depth + 1, max_depth)
        right = _eval(node.right, context, depth + 1, max_depth)
        return _compare(node.op, left, right)

    raise ConditionError(f"Unknown node: {type(node).__name__}")


def _as_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConditionError(f"Expected boolean operand, got {type(value).__name__}")
    return value


def _compare(op: str, left: Any, right: Any) -> bool:
    if op == "==":
        return _normalized(left) == _normalized(right)
    if op == "!=":
        return _normalized(left) != _normalized(right)
    if op in (">", ">=", "<", "<="):
        if left is None or right is None or isinstance(left, bool) != isinstance(right, bool):
            raise ConditionError(f"Cannot order {type(left).__name__} and {type(right).__name__}")
        if op == ">":
            return left > right
        if op == ">=":
            return left >= right
        if op == "<":
            return left < right
        return left <= right
    if op in ("in", "not_in"):
        if not isinstance(right, (tuple, list, str, Mapping)):
            raise ConditionError(f"{op} expects a collection on the right")
        if isinstance(right, str) and not isinstance(left, str):
            raise ConditionError(f"{op} on a string expects a string needle")
        found = left in right
        return found if op == "in" else not found
    if op == "contains":
        if not isinstance(left, (tuple, list, str)):
            raise ConditionError("contains expects a list or string on the left")
        if isinstance(left, str) and not isinstance(right, str):
            raise ConditionError("contains on a string expects a string needle")
        return right in left
    if op in ("starts_with", "ends_with"):
        if not isinstance(left, str) or not isinstance(right, str):
            raise ConditionError(f"{op} expects strings")
        return left.startswith(right) if op == "starts_with" else left.endswith(right)
    if op == "matches":
        if not isinstance(left, str) or not isinstance(right, str):
            raise ConditionError("matches expects strings")
        try:
            return re.search(right, left) is not None
        except re.error as exc:
            raise ConditionError(f"Invalid pattern: {exc}") from exc

    raise ConditionError(f"Unknown operator: {op!r}")


def _normalized(value: Any) -> Any:
    """List literals parse to tuples; context values arrive as lists."""
    if isinstance(value, (list, tuple)):
        return tuple(_normalized(item) for item in value)
    if isinstance(value, Mapping):
        return {key: _normalized(item) for key, item in value.items()}
    return value
