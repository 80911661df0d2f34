"""Scope repository port."""

from typing import Protocol
from uuid import UUID

from bedrock.domain.entities import Scope


class ScopeRepository(Protocol):
    """Port for scope lookups."""

    async def get_by_id(self, scope_id: UUID) -> Scope | None: ...
