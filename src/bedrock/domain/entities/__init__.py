"""Domain entities."""

from bedrock.domain.entities.collection import ResourceCollection
from bedrock.domain.entities.override import (
    PermissionOverride,
    RoleOverride,
    RolePermissionOverride,
)
from bedrock.domain.entities.permission import Permission
from bedrock.domain.entities.policy import ResourcePolicy
from bedrock.domain.entities.resource import (
    Resource,
    ResourceHierarchyEdge,
    ResourceScopeLink,
    ResourceTag,
)
from bedrock.domain.entities.role import Role, RolePermission
from bedrock.domain.entities.scope import Scope
from bedrock.domain.entities.subject import Membership, Subject

__all__ = [
    "Membership",
    "Permission",
    "PermissionOverride",
    "Resource",
    "ResourceCollection",
    "ResourceHierarchyEdge",
    "ResourcePolicy",
    "ResourceScopeLink",
    "ResourceTag",
    "Role",
    "RoleOverride",
    "RolePermission",
    "RolePermissionOverride",
    "Scope",
    "Subject",
]
