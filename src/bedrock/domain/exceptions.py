"""Domain exceptions."""


class BedrockError(Exception):
    """Base exception for Bedrock."""

    pass


class NotFound(BedrockError):
    """Referenced subject, scope or resource does not exist."""

    def __init__(self, kind: str, identifier: object) -> None:
        super().__init__(kind, identifier)
        self.kind = kind
        self.identifier = identifier

    def __str__(self) -> str:
        return f"{self.kind} not found: {self.identifier}"


class ValidationError(BedrockError):
    """Validation failed for input data."""

    pass


class ConditionError(BedrockError):
    """Condition document is malformed or cannot be evaluated.

    Never escapes the condition evaluator; callers see ``False``.
    """

    pass


class IntegrityError(BedrockError):
    """Stored graph data violates a structural invariant."""

    pass


class HierarchyCycleError(IntegrityError):
    """Resource hierarchy contains a cycle reachable from the evaluated resource."""

    def __init__(self, resource_id: object, parent_id: object) -> None:
        super().__init__(
            f"Cycle in resource hierarchy at edge {parent_id} -> {resource_id}"
        )
        self.resource_id = resource_id
        self.parent_id = parent_id


class HierarchyDepthExceeded(IntegrityError):
    """Resource hierarchy is deeper than the configured bound."""

    pass


class ScopeCycleError(IntegrityError):
    """Scope tree contains a cycle or exceeds the configured depth."""

    pass


class StoreUnavailable(BedrockError):
    """Store could not be reached or timed out. Transient; not retried."""

    pass


class EvaluationCancelled(BedrockError):
    """Caller cancelled the evaluation before a decision was reached."""

    pass


class DecisionError(BedrockError):
    """Unexpected failure while producing a decision."""

    pass
