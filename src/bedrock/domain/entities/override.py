"""Scope-local overrides of roles, permissions and grant edges."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from bedrock.domain.value_objects import OverrideState


@dataclass
class RoleOverride:
    """Enable or disable a role wholesale below a scope."""

    scope_id: UUID
    role_id: UUID
    state: OverrideState


@dataclass
class PermissionOverride:
    """Enable or disable a permission wholesale below a scope."""

    scope_id: UUID
    permission_id: UUID
    state: OverrideState


@dataclass
class RolePermissionOverride:
    """Toggle one role -> permission edge below a scope, optionally re-conditioning it."""

    scope_id: UUID
    role_id: UUID
    permission_id: UUID
    state: OverrideState
    condition: dict[str, Any] | None = None
