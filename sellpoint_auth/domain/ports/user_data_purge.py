from typing import Protocol


class UserDataPurgePort(Protocol):
    async def purge(self, user_id: str) -> None:
        """Delete data other services keep per user (favorites, cart, ...)."""
