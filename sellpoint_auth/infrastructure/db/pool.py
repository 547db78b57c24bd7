from __future__ import annotations

from typing import Optional

from psycopg_pool import AsyncConnectionPool

from sellpoint_auth.settings import Settings, get_settings

_pool: Optional[AsyncConnectionPool] = None


def _add_connect_timeout(dsn: str, seconds: int = 3) -> str:
    if "connect_timeout=" in dsn:
        return dsn
    sep = "&" if "?" in dsn else "?"
    return f"{dsn}{sep}connect_timeout={seconds}"


def build_pool(settings: Settings) -> AsyncConnectionPool:
    """A closed pool sized from settings; connections are health-checked on checkout."""
    return AsyncConnectionPool(
        _add_connect_timeout(settings.database_url, settings.db_connect_timeout_seconds),
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        timeout=settings.db_pool_timeout_seconds,
        check=AsyncConnectionPool.check_connection,
        open=False,
    )


def get_pool() -> AsyncConnectionPool:
    """
    Process-wide pool, created on first use WITHOUT opening it.
    The app lifespan opens it on startup.
    """
    global _pool
    if _pool is None:
        _pool = build_pool(get_settings())
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
