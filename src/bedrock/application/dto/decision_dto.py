"""Decision DTOs - engine input and output."""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID


@dataclass
class ResourceRef:
    """Reference to a resource by internal id or by (type, external id)."""

    resource_type_id: str
    external_id: str | None = None
    id: UUID | None = None


@dataclass
class EvaluationInput:
    """Input for a single authorization decision."""

    actor: str
    action: str
    scope_id: UUID
    resource: ResourceRef | None = None
    context: dict[str, Any] = field(default_factory=dict)
    on_behalf_of: str | None = None


@dataclass
class DecisionMatch:
    """One contributing step of a decision's explanation trail."""

    phase: str  # policy | hierarchy | role | scope
    reference: str
    effect: str
    detail: str = ""


@dataclass
class Decision:
    """Engine output: allow/deny with provenance."""

    allowed: bool
    explanation: str
    matches: list[DecisionMatch] = field(default_factory=list)
    evaluated_policy: UUID | None = None
    inherited_from: UUID | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "explanation": self.explanation,
            "matches": [
                {
                    "phase": m.phase,
                    "reference": m.reference,
                    "effect": m.effect,
                    "detail": m.detail,
                }
                for m in self.matches
            ],
            "evaluated_policy": str(self.evaluated_policy) if self.evaluated_policy else None,
            "inherited_from": str(self.inherited_from) if self.inherited_from else None,
        }
