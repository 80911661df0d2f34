"""PostgreSQL override repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from bedrock.domain.entities import (
    PermissionOverride,
    RoleOverride,
    RolePermissionOverride,
)
from bedrock.domain.value_objects import OverrideState


class PostgresOverrideRepository:
    """Role, permission and role-permission override repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def list_role_overrides(
        self, scope_ids: list[UUID], role_ids: list[UUID]
    ) -> list[RoleOverride]:
        if not scope_ids or not role_ids:
            return []
        cur = await self._conn.execute(
            "SELECT scope_id, role_id, state FROM role_override "
            "WHERE scope_id = ANY(%s) AND role_id = ANY(%s)",
            (scope_ids, role_ids),
        )
        rows = await cur.fetchall()
        return [
            RoleOverride(scope_id=r[0], role_id=r[1], state=OverrideState(r[2])) for r in rows
        ]

    async def list_permission_overrides(
        self, scope_ids: list[UUID], permission_ids: list[UUID]
    ) -> list[PermissionOverride]:
        if not scope_ids or not permission_ids:
            return []
        cur = await self._conn.execute(
            "SELECT scope_id, permission_id, state FROM permission_override "
            "WHERE scope_id = ANY(%s) AND permission_id = ANY(%s)",
            (scope_ids, permission_ids),
        )
        rows = await cur.fetchall()
        return [
            PermissionOverride(scope_id=r[0], permission_id=r[1], state=OverrideState(r[2]))
            for r in rows
        ]

    async def list_role_permission_overrides(
        self, scope_ids: list[UUID], role_ids: list[UUID]
    ) -> list[RolePermissionOverride]:
        if not scope_ids or not role_ids:
            return []
        cur = await self._conn.execute(
            "SELECT scope_id, role_id, permission_id, state, condition "
            "FROM role_permission_override "
            "WHERE scope_id = ANY(%s) AND role_id = ANY(%s)",
            (scope_ids, role_ids),
        )
        rows = await cur.fetchall()
        return [
            RolePermissionOverride(
                scope_id=r[0],
                role_id=r[1],
                permission_id=r[2],
                state=OverrideState(r[3]),
                condition=r[4],
            )
            for r in rows
        ]
