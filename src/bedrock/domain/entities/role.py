"""Role entity for RBAC and its permission grant edges."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID


@dataclass
class Role:
    """Role - named permission bundle defined at a scope."""

    id: UUID
    name: str
    scope_id: UUID | None = None
    description: str = ""


@dataclass
class RolePermission:
    """Grant edge role -> permission, optionally gated by a condition document."""

    role_id: UUID
    permission_id: UUID
    condition: dict[str, Any] | None = None
    created_at: datetime | None = None
