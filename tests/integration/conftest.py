# tests/integration/conftest.py
from pathlib import Path

import pytest
import pytest_asyncio
from psycopg_pool import PoolTimeout
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from sellpoint_auth.infrastructure.db.pool import build_pool
from sellpoint_auth.settings import get_settings

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


@pytest_asyncio.fixture
async def redis_client():
    r = Redis.from_url(
        get_settings().redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=1,
    )
    try:
        await r.ping()
    except (RedisConnectionError, RedisTimeoutError, OSError):
        await r.aclose()
        pytest.skip("redis not reachable")
    try:
        yield r
    finally:
        await r.aclose()


@pytest_asyncio.fixture
async def pg_pool():
    """Migrated database with the auth tables emptied before each test."""
    p = build_pool(
        get_settings().model_copy(
            update={"db_connect_timeout_seconds": 1, "db_pool_max_size": 2}
        )
    )
    try:
        await p.open(wait=True, timeout=3)
    except PoolTimeout:
        await p.close()
        pytest.skip("postgres not reachable")

    async with p.connection() as conn:
        async with conn.cursor() as cur:
            for path in sorted(MIGRATIONS_DIR.glob("*.sql")):
                await cur.execute(path.read_text(encoding="utf-8"))
            await cur.execute("TRUNCATE user_bans, user_sessions, users;")
    try:
        yield p
    finally:
        await p.close()
