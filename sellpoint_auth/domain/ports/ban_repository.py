from __future__ import annotations

from typing import Optional, Protocol

from sellpoint_auth.domain.entities import Ban


class BanRepositoryPort(Protocol):
    async def create(self, ban: Ban) -> bool:
        """Insert the ban record. False if not acknowledged."""

    async def get(self, ban_id: str) -> Optional[Ban]:
        """None if absent."""

    async def list_for_user(self, user_id: str) -> list[Ban]:
        """All bans recorded against the user, newest first."""

    async def delete(self, ban_id: str) -> bool:
        """False if nothing was deleted."""
