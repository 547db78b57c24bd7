from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from sellpoint_auth.domain.entities import RoleChange, Session


class SessionRepositoryPort(Protocol):
    async def create(self, session: Session) -> bool:
        """Insert a new session record. False if not acknowledged."""

    async def get(self, session_id: str) -> Optional[Session]:
        """Fresh read of one session (no caching). None if absent."""

    async def list_for_user(self, user_id: str) -> list[Session]:
        """Every session the user owns, revoked and expired ones included."""

    async def extend(self, session_id: str, expires_at: datetime, *, now: datetime) -> bool:
        """
        Move the expiry of one session that is still unrevoked and unexpired
        at `now`. False if the row no longer qualifies.
        """

    async def revoke(self, session_id: str) -> bool:
        """Set is_revoked on one session. False if nothing matched."""

    async def revoke_all_for_user(self, user_id: str) -> list[Session]:
        """
        Set is_revoked on every unrevoked session of the user in one statement.
        Return the sessions this call revoked.
        """

    async def apply_role_change(self, user_id: str, role: str, change: RoleChange) -> int:
        """
        Add or remove `role` in the snapshot of every session of the user.
        Return how many rows actually changed.
        """

    async def delete_for_user(self, user_id: str) -> int:
        """Physically delete every session of the user; return the count."""
