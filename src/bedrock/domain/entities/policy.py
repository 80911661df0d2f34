"""Resource policy entity - explicit allow/deny rule."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from bedrock.domain.value_objects import PolicyEffect


@dataclass
class ResourcePolicy:
    """Policy attached to a resource or to a collection. Higher priority is evaluated first."""

    id: UUID
    effect: PolicyEffect
    created_at: datetime
    actions: list[str] = field(default_factory=list)
    resource_id: UUID | None = None
    collection_id: UUID | None = None
    subject_condition: dict[str, Any] | None = None
    context_condition: dict[str, Any] | None = None
    priority: int = 0
    name: str | None = None

    def covers(self, action: str) -> bool:
        """True when the policy lists the action or the ``*`` wildcard."""
        return "*" in self.actions or action in self.actions
