"""Pool lifespan middleware - opens the decision store pool on startup."""

import logging
from typing import Any

from psycopg_pool import AsyncConnectionPool, PoolTimeout

from bedrock.domain.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


class PoolLifespanMiddleware:
    """Opens the pool on ASGI startup and closes it on shutdown.

    With wait_timeout set, startup blocks until min_size connections exist
    and fails with StoreUnavailable if the store cannot be reached in time.
    """

    def __init__(self, pool: AsyncConnectionPool, wait_timeout: float | None = None) -> None:
        self._pool = pool
        self._wait_timeout = wait_timeout

    async def process_startup(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        if self._wait_timeout is None:
            await self._pool.open()
        else:
            try:
                await self._pool.open(wait=True, timeout=self._wait_timeout)
            except PoolTimeout as exc:
                logger.error(
                    "Decision store unreachable after %.1fs at startup", self._wait_timeout
                )
                raise StoreUnavailable("Decision store unreachable at startup") from exc
        logger.info("Decision store pool opened (max_size=%d)", self._pool.max_size)

    async def process_shutdown(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        await self._pool.close()
        logger.info("Decision store pool closed")
