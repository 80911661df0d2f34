"""Condition expression tree.

Conditions are data: an immutable tree of nodes, one class per operator
family. Trees hold no references to host code and can be shared between
concurrent evaluations.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Literal:
    """Constant value (scalar or tuple of scalars)."""

    value: Any


@dataclass(frozen=True)
class ListOf:
    """List whose items are themselves expressions."""

    items: tuple["Expr", ...]


@dataclass(frozen=True)
class Var:
    """Dotted path lookup into the evaluation context."""

    path: str
    default: Any = None
    has_default: bool = False


@dataclass(frozen=True)
class Exists:
    """True when the path resolves to a non-null value."""

    path: str


@dataclass(frozen=True)
class Compare:
    """Binary comparison, membership or string test."""

    op: str
    left: "Expr"
    right: "Expr"


@dataclass(frozen=True)
class All:
    """Logical AND over boolean operands."""

    items: tuple["Expr", ...]


@dataclass(frozen=True)
class AnyOf:
    """Logical OR over boolean operands."""

    items: tuple["Expr", ...]


@dataclass(frozen=True)
class Not:
    """Logical negation of a boolean operand."""

    item: "Expr"


Expr = Union[Literal, ListOf, Var, Exists, Compare, All, AnyOf, Not]

NODE_TYPES = (Literal, ListOf, Var, Exists, Compare, All, AnyOf, Not)
