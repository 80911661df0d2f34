"""Scope entity - node of the tenancy tree."""

from dataclasses import dataclass
from uuid import UUID

from bedrock.domain.value_objects import ScopeMode


@dataclass
class Scope:
    """Scope - hierarchical authorization boundary (tenant, workspace, project...)."""

    id: UUID
    name: str
    mode: ScopeMode
    parent_id: UUID | None = None
    scope_type: str | None = None
