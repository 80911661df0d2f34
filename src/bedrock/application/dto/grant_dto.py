"""Effective grant DTO - a role -> permission edge that survived overrides."""

from dataclasses import dataclass
from typing import Any

from bedrock.domain.entities import Permission, Role


@dataclass
class EffectiveGrant:
    """Surviving grant edge with the condition that gates it."""

    role: Role
    permission: Permission
    condition: dict[str, Any] | None = None
    overridden: bool = False
