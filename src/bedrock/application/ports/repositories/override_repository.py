"""Override repository port - three override tiers."""

from typing import Protocol
from uuid import UUID

from bedrock.domain.entities import (
    PermissionOverride,
    RoleOverride,
    RolePermissionOverride,
)


class OverrideRepository(Protocol):
    """Port for scope-local override lookups."""

    async def list_role_overrides(
        self, scope_ids: list[UUID], role_ids: list[UUID]
    ) -> list[RoleOverride]: ...

    async def list_permission_overrides(
        self, scope_ids: list[UUID], permission_ids: list[UUID]
    ) -> list[PermissionOverride]: ...

    async def list_role_permission_overrides(
        self, scope_ids: list[UUID], role_ids: list[UUID]
    ) -> list[RolePermissionOverride]: ...
