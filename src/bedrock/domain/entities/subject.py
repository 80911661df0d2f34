"""Subject entity and its role memberships."""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from bedrock.domain.value_objects import SubjectType


@dataclass
class Subject:
    """Subject - acting user, service, agent or system."""

    id: str
    subject_type: SubjectType
    attributes: dict[str, Any] = field(default_factory=dict)
    display_name: str | None = None

    def context_view(self) -> dict[str, Any]:
        """Subject attributes as seen by conditions; identity keys win over attributes."""
        return {
            **self.attributes,
            "id": self.id,
            "type": str(self.subject_type),
            "display_name": self.display_name,
        }


@dataclass
class Membership:
    """Membership - subject holds role at scope."""

    subject_id: str
    scope_id: UUID
    role_id: UUID
