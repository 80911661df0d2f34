"""Resource entity, tags, scope links and hierarchy edges."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from bedrock.domain.value_objects import CascadeMode, LinkType


@dataclass
class Resource:
    """Resource - typed object owned by exactly one scope."""

    id: UUID
    resource_type_id: str
    owner_scope_id: UUID
    external_id: str | None = None
    name: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def identifier(self) -> str:
        """Identifier matched against permission resource patterns."""
        return self.external_id or str(self.id)

    def context_view(self) -> dict[str, Any]:
        """Field data overlaid with identity attributes, as seen by conditions."""
        identity = {
            "id": str(self.id),
            "external_id": self.external_id,
            "name": self.name,
            "resource_type_id": self.resource_type_id,
            "owner_scope_id": str(self.owner_scope_id),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        return {**self.data, **{k: v for k, v in identity.items() if v is not None}}


@dataclass
class ResourceTag:
    """Tag key with optional label attached to a resource."""

    resource_id: UUID
    key: str
    label: str | None = None


@dataclass
class ResourceScopeLink:
    """Association of a resource with a non-owning scope. Never transfers ownership."""

    resource_id: UUID
    scope_id: UUID
    link_type: LinkType


@dataclass
class ResourceHierarchyEdge:
    """Directed parent -> child relation between resources."""

    parent_id: UUID
    child_id: UUID
    cascade: CascadeMode = CascadeMode.UNSET
