"""Resource repository port."""

from typing import Protocol
from uuid import UUID

from bedrock.domain.entities import (
    Resource,
    ResourceHierarchyEdge,
    ResourceScopeLink,
    ResourceTag,
)


class ResourceRepository(Protocol):
    """Port for resources, their tags, scope links and hierarchy edges."""

    async def get_by_id(self, resource_id: UUID) -> Resource | None: ...

    async def get_by_external_id(
        self, resource_type_id: str, external_id: str
    ) -> Resource | None: ...

    async def list_tags(self, resource_id: UUID) -> list[ResourceTag]: ...

    async def list_scope_links(self, resource_id: UUID) -> list[ResourceScopeLink]: ...

    async def list_parent_edges(self, child_id: UUID) -> list[ResourceHierarchyEdge]: ...
