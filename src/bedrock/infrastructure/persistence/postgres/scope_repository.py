"""PostgreSQL scope repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from bedrock.domain.entities import Scope
from bedrock.domain.value_objects import ScopeMode


class PostgresScopeRepository:
    """Scope repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, scope_id: UUID) -> Scope | None:
        """Get scope by id."""
        cur = await self._conn.execute(
            "SELECT id, name, mode, parent_id, scope_type FROM scope WHERE id = %s",
            (scope_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return Scope(id=r[0], name=r[1], mode=ScopeMode(r[2]), parent_id=r[3], scope_type=r[4])
