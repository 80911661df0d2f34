"""Unit of Work port - one consistent read view of the store."""

from collections.abc import AsyncIterator
from typing import Protocol

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


class UnitOfWork(Protocol):
    """Unit of Work - manages the connection and repository access."""

    @property
    def scopes(self) -> ScopeRepository: ...

    @property
    def subjects(self) -> SubjectRepository: ...

    @property
    def roles(self) -> RoleRepository: ...

    @property
    def overrides(self) -> OverrideRepository: ...

    @property
    def resources(self) -> ResourceRepository: ...

    @property
    def collections(self) -> CollectionRepository: ...

    @property
    def policies(self) -> PolicyRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances."""

    async def __call__(self) -> AsyncIterator[UnitOfWork]: ...
