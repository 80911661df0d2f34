"""PostgreSQL Unit of Work implementation."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import psycopg
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from bedrock.domain.exceptions import StoreUnavailable
from bedrock.infrastructure.persistence.postgres.collection_repository import (
    PostgresCollectionRepository,
)
from bedrock.infrastructure.persistence.postgres.override_repository import (
    PostgresOverrideRepository,
)
from bedrock.infrastructure.persistence.postgres.policy_repository import (
    PostgresPolicyRepository,
)
from bedrock.infrastructure.persistence.postgres.resource_repository import (
    PostgresResourceRepository,
)
from bedrock.infrastructure.persistence.postgres.role_repository import (
    PostgresRoleRepository,
)
from bedrock.infrastructure.persistence.postgres.scope_repository import (
    PostgresScopeRepository,
)
from bedrock.infrastructure.persistence.postgres.subject_repository import (
    PostgresSubjectRepository,
)

logger = logging.getLogger(__name__)


class PostgresUnitOfWork:
    """PostgreSQL Unit of Work - one connection, one read-only snapshot transaction."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._conn: psycopg.AsyncConnection | None = None
        self._conn_cm: object | None = None

    async def __aenter__(self) -> "PostgresUnitOfWork":
        self._conn_cm = self._pool.connection()
        self._conn = await self._conn_cm.__aenter__()
        await self._conn.execute("SET TRANSACTION ISOLATION LEVEL REPEATABLE READ READ ONLY")
        self._scopes = PostgresScopeRepository(self._conn)
        self._subjects = PostgresSubjectRepository(self._conn)
        self._roles = PostgresRoleRepository(self._conn)
        self._overrides = PostgresOverrideRepository(self._conn)
        self._resources = PostgresResourceRepository(self._conn)
        self._collections = PostgresCollectionRepository(self._conn)
        self._policies = PostgresPolicyRepository(self._conn)
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if exc_type and self._conn and not self._conn.closed:
            await self._conn.rollback()
        if self._conn_cm:
            await self._conn_cm.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def scopes(self) -> PostgresScopeRepository:
        return self._scopes

    @property
    def subjects(self) -> PostgresSubjectRepository:
        return self._subjects

    @property
    def roles(self) -> PostgresRoleRepository:
        return self._roles

    @property
    def overrides(self) -> PostgresOverrideRepository:
        return self._overrides

    @property
    def resources(self) -> PostgresResourceRepository:
        return self._resources

    @property
    def collections(self) -> PostgresCollectionRepository:
        return self._collections

    @property
    def policies(self) -> PostgresPolicyRepository:
        return self._policies

    async def commit(self) -> None:
        if self._conn:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn:
            await self._conn.rollback()


def create_uow_factory(pool: AsyncConnectionPool) -> object:
    """Create UnitOfWork factory (async context manager).

    Connection and server failures surface as StoreUnavailable.
    """

    @asynccontextmanager
    async def factory() -> AsyncIterator[PostgresUnitOfWork]:
        try:
            async with PostgresUnitOfWork(pool) as uow:
                try:
                    yield uow
                    await uow.commit()
                except BaseException:
                    await uow.rollback()
                    raise
        except (psycopg.OperationalError, PoolTimeout) as exc:
            logger.error("Store unavailable: %s", exc)
            raise StoreUnavailable(str(exc)) from exc

    return factory
