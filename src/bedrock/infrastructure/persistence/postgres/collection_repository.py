"""PostgreSQL resource collection repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from bedrock.domain.entities import ResourceCollection


class PostgresCollectionRepository:
    """Resource collection repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def list_for_type(
        self, resource_type_id: str, scope_id: UUID
    ) -> list[ResourceCollection]:
        """List collections of a resource type defined at a scope."""
        cur = await self._conn.execute(
            "SELECT id, name, scope_id, resource_type_id, match FROM resource_collection "
            "WHERE resource_type_id = %s AND scope_id = %s",
            (resource_type_id, scope_id),
        )
        rows = await cur.fetchall()
        return [
            ResourceCollection(
                id=r[0], name=r[1], scope_id=r[2], resource_type_id=r[3], match=r[4]
            )
            for r in rows
        ]
