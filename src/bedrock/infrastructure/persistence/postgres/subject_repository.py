"""PostgreSQL subject repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from bedrock.domain.entities import Membership, Subject
from bedrock.domain.value_objects import SubjectType


class PostgresSubjectRepository:
    """Subject and membership repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, subject_id: str) -> Subject | None:
        """Get subject by id."""
        cur = await self._conn.execute(
            "SELECT id, subject_type, attributes, display_name FROM subject WHERE id = %s",
            (subject_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return Subject(
            id=r[0],
            subject_type=SubjectType(r[1]),
            attributes=r[2] or {},
            display_name=r[3],
        )

    async def list_memberships(self, subject_id: str, scope_ids: list[UUID]) -> list[Membership]:
        """List the subject's memberships held at any of the given scopes."""
        if not scope_ids:
            return []
        cur = await self._conn.execute(
            "SELECT subject_id, scope_id, role_id FROM membership "
            "WHERE subject_id = %s AND scope_id = ANY(%s)",
            (subject_id, scope_ids),
        )
        rows = await cur.fetchall()
        return [Membership(subject_id=r[0], scope_id=r[1], role_id=r[2]) for r in rows]
