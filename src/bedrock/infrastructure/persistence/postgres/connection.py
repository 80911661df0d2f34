"""PostgreSQL async connection pool for decision reads."""

from psycopg_pool import AsyncConnectionPool

APPLICATION_NAME = "bedrock"


def create_pool(
    conninfo: str,
    min_size: int = 2,
    max_size: int = 10,
    acquire_timeout: float = 5.0,
    statement_timeout_ms: int = 2000,
) -> AsyncConnectionPool:
    """Create async connection pool.

    Pool is created with open=False; PoolLifespanMiddleware opens it. A
    connection not acquired within acquire_timeout raises PoolTimeout, and a
    query running past statement_timeout_ms is cancelled by the server. The
    unit of work reports both as StoreUnavailable.
    """
    return AsyncConnectionPool(
        conninfo=conninfo,
        min_size=min_size,
        max_size=max_size,
        timeout=acquire_timeout,
        kwargs={
            "application_name": APPLICATION_NAME,
            "options": f"-c statement_timeout={statement_timeout_ms}",
        },
        open=False,
    )
