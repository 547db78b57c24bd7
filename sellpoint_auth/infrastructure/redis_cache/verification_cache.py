from __future__ import annotations

import json
from typing import Any

from redis.asyncio import Redis

from sellpoint_auth.domain.ports.verification_cache import VerificationCachePort


class RedisVerificationCache(VerificationCachePort):
    """
    Verification entries as JSON strings with a native Redis expiry.

    GET does not touch the expiry; DEL reports whether this caller removed the
    key, which is what makes consumption single-use across processes.
    """

    def __init__(self, redis: Redis, *, key_prefix: str = "vc:") -> None:
        self._redis = redis
        self._prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        await self._redis.set(self._key(key), json.dumps(value), ex=ttl_seconds)

    async def try_get(self, key: str) -> Any | None:
        raw = await self._redis.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    async def remove(self, key: str) -> bool:
        return int(await self._redis.delete(self._key(key))) == 1
