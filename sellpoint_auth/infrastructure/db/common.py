from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import psycopg
from psycopg_pool import AsyncConnectionPool

from sellpoint_auth.domain.errors import OperationFailed

logger = logging.getLogger(__name__)


@asynccontextmanager
async def transaction(
    pool: AsyncConnectionPool, what: str
) -> AsyncIterator[psycopg.AsyncCursor]:
    """
    Cursor inside one committed-on-success transaction.
    Driver errors surface as OperationFailed.
    """
    try:
        async with pool.connection() as conn:
            async with conn.transaction():
                async with conn.cursor() as cur:
                    yield cur
    except psycopg.Error as e:
        logger.error("database operation failed", extra={"operation": what, "error": str(e)})
        raise OperationFailed(f"{what} failed") from e
