from __future__ import annotations

import copy
import time
from typing import Any, Callable, Optional

from sellpoint_auth.domain.ports.verification_cache import VerificationCachePort


class InMemoryVerificationCache(VerificationCachePort):
    """
    Process-local TTL store. Entries are dropped lazily on read and in bulk
    every `sweep_every` writes. Nothing survives a restart.

    Every method body runs without awaiting, so on a single event loop each
    call is atomic: two concurrent `remove` calls for one key cannot both win.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        sweep_every: int = 256,
    ) -> None:
        self._clock = clock
        self._sweep_every = sweep_every
        self._writes = 0
        self._entries: dict[str, tuple[Any, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._entries[key] = (copy.deepcopy(value), self._clock() + ttl_seconds)
        self._writes += 1
        if self._writes % self._sweep_every == 0:
            self.sweep()

    async def try_get(self, key: str) -> Any | None:
        entry = self._live_entry(key)
        if entry is None:
            return None
        return copy.deepcopy(entry[0])

    async def remove(self, key: str) -> bool:
        if self._live_entry(key) is None:
            return False
        del self._entries[key]
        return True

    def _live_entry(self, key: str) -> Optional[tuple[Any, float]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry[1] <= self._clock():
            del self._entries[key]
            return None
        return entry

    def sweep(self) -> int:
        """Drop every expired entry; return how many were dropped."""
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)


_cache: Optional[InMemoryVerificationCache] = None


def get_memory_cache() -> InMemoryVerificationCache:
    """Lazy process-wide singleton."""
    global _cache
    if _cache is None:
        _cache = InMemoryVerificationCache()
    return _cache
