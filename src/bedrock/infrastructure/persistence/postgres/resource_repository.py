"""PostgreSQL resource repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from bedrock.domain.entities import (
    Resource,
    ResourceHierarchyEdge,
    ResourceScopeLink,
    ResourceTag,
)
from bedrock.domain.value_objects import CascadeMode, LinkType

_RESOURCE_COLUMNS = (
    "id, resource_type_id, owner_scope_id, external_id, name, data, created_at, updated_at"
)


def _row_to_resource(r: tuple) -> Resource:
    return Resource(
        id=r[0],
        resource_type_id=r[1],
        owner_scope_id=r[2],
        external_id=r[3],
        name=r[4],
        data=r[5] or {},
        created_at=r[6],
        updated_at=r[7],
    )


class PostgresResourceRepository:
    """Resource repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, resource_id: UUID) -> Resource | None:
        """Get resource by id."""
        cur = await self._conn.execute(
            f"SELECT {_RESOURCE_COLUMNS} FROM resource WHERE id = %s",
            (resource_id,),
        )
        r = await cur.fetchone()
        return _row_to_resource(r) if r else None

    async def get_by_external_id(
        self, resource_type_id: str, external_id: str
    ) -> Resource | None:
        """Get resource by (type, external id)."""
        cur = await self._conn.execute(
            f"SELECT {_RESOURCE_COLUMNS} FROM resource "
            "WHERE resource_type_id = %s AND external_id = %s",
            (resource_type_id, external_id),
        )
        r = await cur.fetchone()
        return _row_to_resource(r) if r else None

    async def list_tags(self, resource_id: UUID) -> list[ResourceTag]:
        """List tags of a resource."""
        cur = await self._conn.execute(
            "SELECT resource_id, key, label FROM resource_tag WHERE resource_id = %s "
            "ORDER BY key",
            (resource_id,),
        )
        rows = await cur.fetchall()
        return [ResourceTag(resource_id=r[0], key=r[1], label=r[2]) for r in rows]

    async def list_scope_links(self, resource_id: UUID) -> list[ResourceScopeLink]:
        """List non-owning scope associations of a resource."""
        cur = await self._conn.execute(
            "SELECT resource_id, scope_id, link_type FROM resource_scope_link "
            "WHERE resource_id = %s",
            (resource_id,),
        )
        rows = await cur.fetchall()
        return [
            ResourceScopeLink(resource_id=r[0], scope_id=r[1], link_type=LinkType(r[2]))
            for r in rows
        ]

    async def list_parent_edges(self, child_id: UUID) -> list[ResourceHierarchyEdge]:
        """List hierarchy edges pointing at child_id."""
        cur = await self._conn.execute(
            "SELECT parent_id, child_id, cascade FROM resource_hierarchy WHERE child_id = %s",
            (child_id,),
        )
        rows = await cur.fetchall()
        return [
            ResourceHierarchyEdge(parent_id=r[0], child_id=r[1], cascade=CascadeMode(r[2]))
            for r in rows
        ]
