"""Resource collection repository port."""

from typing import Protocol
from uuid import UUID

from bedrock.domain.entities import ResourceCollection


class CollectionRepository(Protocol):
    """Port for resource collection lookups."""

    async def list_for_type(
        self, resource_type_id: str, scope_id: UUID
    ) -> list[ResourceCollection]: ...
