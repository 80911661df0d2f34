"""Unit tests for domain exceptions."""

import pytest

from bedrock.domain.exceptions import (
    BedrockError,
    ConditionError,
    DecisionError,
    EvaluationCancelled,
    HierarchyCycleError,
    HierarchyDepthExceeded,
    IntegrityError,
    NotFound,
    ScopeCycleError,
    StoreUnavailable,
    ValidationError,
)


@pytest.mark.parametrize(
    "exc_type",
    [
        NotFound,
        ValidationError,
        ConditionError,
        IntegrityError,
        StoreUnavailable,
        EvaluationCancelled,
        DecisionError,
    ],
)
def test_exceptions_inherit_bedrock_error(exc_type) -> None:
    """Every domain exception is a BedrockError."""
    assert issubclass(exc_type, BedrockError)


def test_integrity_errors_share_base() -> None:
    """Hierarchy and scope structure errors are IntegrityErrors."""
    assert issubclass(HierarchyCycleError, IntegrityError)
    assert issubclass(HierarchyDepthExceeded, IntegrityError)
    assert issubclass(ScopeCycleError, IntegrityError)


def test_not_found_message() -> None:
    """NotFound renders kind and identifier."""
    exc = NotFound("Resource", "doc-1")
    assert str(exc) == "Resource not found: doc-1"
    assert exc.kind == "Resource"
    assert exc.identifier == "doc-1"


def test_hierarchy_cycle_error_keeps_edge() -> None:
    """HierarchyCycleError names the closing edge."""
    exc = HierarchyCycleError("child", "parent")
    assert exc.resource_id == "child"
    assert exc.parent_id == "parent"
    assert "parent -> child" in str(exc)


def test_raise_not_found_catchable_as_bedrock_error() -> None:
    """NotFound can be caught as BedrockError."""
    with pytest.raises(BedrockError):
        raise NotFound("Scope", "123")
