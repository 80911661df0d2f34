"""Role resolver port - scope/role graph evaluation."""

from collections.abc import Mapping
from typing import Any, Protocol
from uuid import UUID

from bedrock.application.dto.grant_dto import EffectiveGrant
from bedrock.application.ports.unit_of_work import UnitOfWork


class RoleResolver(Protocol):
    """Port for resolving role-based grants of a subject within a scope."""

    async def load_grants(
        self, uow: UnitOfWork, subject_id: str, scope_id: UUID
    ) -> list[EffectiveGrant]: ...

    def find_grant(
        self,
        grants: list[EffectiveGrant],
        action: str,
        resource_type_key: str | None,
        resource_pattern: str | None,
        context: Mapping[str, Any],
    ) -> EffectiveGrant | None: ...

    async def resolve(
        self,
        uow: UnitOfWork,
        subject_id: str,
        scope_id: UUID,
        action: str,
        resource_type_key: str | None,
        resource_pattern: str | None,
        context: Mapping[str, Any],
    ) -> bool: ...
