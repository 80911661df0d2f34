"""PostgreSQL resource policy repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from bedrock.domain.entities import ResourcePolicy
from bedrock.domain.value_objects import PolicyEffect

_POLICY_COLUMNS = (
    "id, effect, created_at, actions, resource_id, collection_id, "
    "subject_condition, context_condition, priority, name"
)


def _row_to_policy(r: tuple) -> ResourcePolicy:
    return ResourcePolicy(
        id=r[0],
        effect=PolicyEffect(r[1]),
        created_at=r[2],
        actions=list(r[3] or []),
        resource_id=r[4],
        collection_id=r[5],
        subject_condition=r[6],
        context_condition=r[7],
        priority=r[8],
        name=r[9],
    )


class PostgresPolicyRepository:
    """Resource policy repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def list_for_resource(self, resource_id: UUID) -> list[ResourcePolicy]:
        """List policies attached directly to a resource."""
        cur = await self._conn.execute(
            f"SELECT {_POLICY_COLUMNS} FROM resource_policy WHERE resource_id = %s",
            (resource_id,),
        )
        return [_row_to_policy(r) for r in await cur.fetchall()]

    async def list_for_collection(self, collection_id: UUID) -> list[ResourcePolicy]:
        """List policies attached to a collection."""
        cur = await self._conn.execute(
            f"SELECT {_POLICY_COLUMNS} FROM resource_policy WHERE collection_id = %s",
            (collection_id,),
        )
        return [_row_to_policy(r) for r in await cur.fetchall()]
