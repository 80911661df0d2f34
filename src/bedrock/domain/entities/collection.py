"""Resource collection entity - dynamic resource group."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID


@dataclass
class ResourceCollection:
    """Collection - resources of one type matching a match definition.

    Membership is computed at evaluation time and never stored.
    """

    id: UUID
    name: str
    scope_id: UUID
    resource_type_id: str
    match: dict[str, Any] | None = None
