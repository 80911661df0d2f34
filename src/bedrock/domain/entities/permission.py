"""Permission entity - (action, resource type, resource pattern)."""

from dataclasses import dataclass
from uuid import UUID


@dataclass
class Permission:
    """Permission - action on resources of a type whose identifier matches a pattern.

    Empty ``resource_type`` / ``resource_pattern`` mean the permission is not
    bound to a resource.
    """

    id: UUID
    action: str
    resource_type: str | None = None
    resource_pattern: str | None = None

    @property
    def key(self) -> str:
        """Human readable ``type:action:pattern`` form."""
        return f"{self.resource_type or ''}:{self.action}:{self.resource_pattern or ''}"
