"""Shared asyncpg pool for the PostgreSQL profile and message stores."""

import asyncio
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg

from padi.errors import StoreError
from padi.observability.logging import get_logger

logger = get_logger(__name__)


def resolve_dsn() -> str:
    """DSN from `PADI_DATABASE_URL`, `DATABASE_URL`, or `POSTGRES_*` parts."""
    for var in ("PADI_DATABASE_URL", "DATABASE_URL"):
        if value := os.environ.get(var):
            return value

    env = os.environ.get
    return "postgresql://{}:{}@{}:{}/{}".format(
        env("POSTGRES_USER", "padi"),
        env("POSTGRES_PASSWORD", "padi"),
        env("POSTGRES_HOST", "localhost"),
        env("POSTGRES_PORT", "5432"),
        env("POSTGRES_DB", "padi"),
    )


class PostgresPool:
    """asyncpg pool opened on first use.

    Stores hold one instance and call `acquire()`; whoever built it calls
    `close()` at shutdown.
    """

    def __init__(
        self,
        dsn: str | None = None,
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: float = 30.0,
    ) -> None:
        self._dsn = dsn or resolve_dsn()
        self._pool_kwargs = {
            "min_size": min_size,
            "max_size": max_size,
            "command_timeout": command_timeout,
        }
        self._pool: asyncpg.Pool | None = None
        self._opening = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> asyncpg.Pool:
        """Open the pool once; concurrent callers share the result.

        Raises:
            StoreError: The server is unreachable or rejected the login
        """
        async with self._opening:
            if self._pool is None:
                try:
                    self._pool = await asyncpg.create_pool(dsn=self._dsn, **self._pool_kwargs)
                except (asyncpg.PostgresError, OSError) as e:
                    logger.error("postgres_pool_connection_failed", error=str(e))
                    raise StoreError(f"Cannot reach PostgreSQL: {e}", cause=e) from e
                logger.info("postgres_pool_connected", **self._pool_kwargs)
        return self._pool

    async def close(self) -> None:
        pool, self._pool = self._pool, None
        if pool is None:
            return
        await pool.close()
        logger.info("postgres_pool_closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        pool = self._pool or await self.connect()
        async with pool.acquire() as connection:
            yield connection
