"""Repository ports."""

from bedrock.application.ports.repositories.collection_repository import (
    CollectionRepository,
)
from bedrock.application.ports.repositories.override_repository import (
    OverrideRepository,
)
from bedrock.application.ports.repositories.policy_repository import PolicyRepository
from bedrock.application.ports.repositories.resource_repository import (
    ResourceRepository,
)
from bedrock.application.ports.repositories.role_repository import RoleRepository
from bedrock.application.ports.repositories.scope_repository import ScopeRepository
from bedrock.application.ports.repositories.subject_repository import (
    SubjectRepository,
)

__all__ = [
    "CollectionRepository",
    "OverrideRepository",
    "PolicyRepository",
    "ResourceRepository",
    "RoleRepository",
    "ScopeRepository",
    "SubjectRepository",
]
