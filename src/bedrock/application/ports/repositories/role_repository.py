"""Role repository port."""

from typing import Protocol
from uuid import UUID

from bedrock.domain.entities import Permission, Role, RolePermission


class RoleRepository(Protocol):
    """Port for roles, permissions and grant edges."""

    async def get_by_ids(self, role_ids: list[UUID]) -> list[Role]: ...

    async def list_role_permissions(self, role_ids: list[UUID]) -> list[RolePermission]: ...

    async def get_permissions(self, permission_ids: list[UUID]) -> list[Permission]: ...
