"""Subject repository port."""

from typing import Protocol
from uuid import UUID

from bedrock.domain.entities import Membership, Subject


class SubjectRepository(Protocol):
    """Port for subjects and their role memberships."""

    async def get_by_id(self, subject_id: str) -> Subject | None: ...

    async def list_memberships(
        self, subject_id: str, scope_ids: list[UUID]
    ) -> list[Membership]: ...
