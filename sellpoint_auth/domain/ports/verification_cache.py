from typing import Any, Protocol


class VerificationCachePort(Protocol):
    """
    Ephemeral key -> value store with a TTL per entry.

    Reads never extend the TTL; only `set` does. Values must be JSON-compatible
    (str or dict) so that out-of-process backends can hold them.
    """

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store/replace the value and (re)start its TTL."""

    async def try_get(self, key: str) -> Any | None:
        """Return the live value or None when absent or expired."""

    async def remove(self, key: str) -> bool:
        """Delete the entry. True if this call removed a live entry."""
