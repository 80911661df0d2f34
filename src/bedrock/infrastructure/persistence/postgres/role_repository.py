"""PostgreSQL role repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from bedrock.domain.entities import Permission, Role, RolePermission


class PostgresRoleRepository:
    """Role, permission and grant edge repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_ids(self, role_ids: list[UUID]) -> list[Role]:
        """Get roles by ids."""
        if not role_ids:
            return []
        cur = await self._conn.execute(
            "SELECT id, name, scope_id, description FROM role WHERE id = ANY(%s)",
            (role_ids,),
        )
        rows = await cur.fetchall()
        return [Role(id=r[0], name=r[1], scope_id=r[2], description=r[3] or "") for r in rows]

    async def list_role_permissions(self, role_ids: list[UUID]) -> list[RolePermission]:
        """List grant edges of the given roles."""
        if not role_ids:
            return []
        cur = await self._conn.execute(
            "SELECT role_id, permission_id, condition, created_at FROM role_permission "
            "WHERE role_id = ANY(%s)",
            (role_ids,),
        )
        rows = await cur.fetchall()
        return [
            RolePermission(role_id=r[0], permission_id=r[1], condition=r[2], created_at=r[3])
            for r in rows
        ]

    async def get_permissions(self, permission_ids: list[UUID]) -> list[Permission]:
        """Get permissions by ids."""
        if not permission_ids:
            return []
        cur = await self._conn.execute(
            "SELECT id, action, resource_type, resource_pattern FROM permission "
            "WHERE id = ANY(%s)",
            (permission_ids,),
        )
        rows = await cur.fetchall()
        return [
            Permission(id=r[0], action=r[1], resource_type=r[2], resource_pattern=r[3])
            for r in rows
        ]
