"""
asyncpg pool for the publication log.

One pool per process, opened by the FastAPI lifespan and shared by every
PostgresRecordSource. Sources never hold a connection between requests;
each fetch borrows one through execute_query().

Pool bounds and the per-query timeout come from Settings
(DB_POOL_MIN_SIZE, DB_POOL_MAX_SIZE, DB_COMMAND_TIMEOUT_SECONDS).

Lifecycle:
    await init_db()            # lifespan startup; failures are logged there
    rows = await execute_query(sql, from_, to)
    await close_db()           # lifespan shutdown

get_db_pool() opens the pool lazily, so the record source keeps working when
startup could not reach the database and the database comes back later.
"""

import logging
from typing import Any, List, Optional

import asyncpg
from asyncpg import Pool

from publication_analytics.core.config import get_settings


logger = logging.getLogger(__name__)

_pool: Optional[Pool] = None


# =============================================================================
# Pool Lifecycle
# =============================================================================

async def init_db() -> Pool:
    """
    Open the shared pool if it is not open yet.

    Raises:
        asyncpg.PostgresError: If the server rejects the connection.
        OSError: If the database host is unreachable.
    """
    global _pool

    if _pool is None:
        settings = get_settings()
        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout_seconds,
        )
        logger.info(
            f"Opened publication log pool "
            f"({settings.db_pool_min_size}-{settings.db_pool_max_size} connections)"
        )

    return _pool


async def get_db_pool() -> Pool:
    """Return the shared pool, opening it on first use."""
    if _pool is None:
        return await init_db()
    return _pool


async def close_db() -> None:
    """Close the shared pool; a later get_db_pool() opens a fresh one."""
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None


# =============================================================================
# Queries
# =============================================================================

async def execute_query(query: str, *args: Any) -> List[asyncpg.Record]:
    """
    Run one parameterized query on a pooled connection.

    Args:
        query: SQL with $1, $2, ... placeholders.
        *args: Values bound to the placeholders, in order.

    Returns:
        The fetched rows.

    Raises:
        asyncpg.PostgresError, asyncpg.InterfaceError, OSError,
        asyncio.TimeoutError: Driver and network failures, unwrapped.
    """
    pool = await get_db_pool()

    async with pool.acquire() as conn:
        return await conn.fetch(query, *args)
