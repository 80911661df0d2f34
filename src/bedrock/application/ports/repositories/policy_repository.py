"""Resource policy repository port."""

from typing import Protocol
from uuid import UUID

from bedrock.domain.entities import ResourcePolicy


class PolicyRepository(Protocol):
    """Port for resource policy lookups."""

    async def list_for_resource(self, resource_id: UUID) -> list[ResourcePolicy]: ...

    async def list_for_collection(self, collection_id: UUID) -> list[ResourcePolicy]: ...
