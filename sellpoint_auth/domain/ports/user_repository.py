from __future__ import annotations

from typing import Optional, Protocol

from sellpoint_auth.domain.entities import User


class UserRepositoryPort(Protocol):
    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Return None if not found."""

    async def get_by_email(self, email: str) -> Optional[User]:
        """Exact match on the normalised email. None if not found."""

    async def find_by_identifier(self, identifier: str) -> Optional[User]:
        """
        Look the user up by email first, then by username.
        Return None if neither matches.
        """

    async def create(self, user: User) -> bool:
        """
        Insert a new user.
        Return False if the email or the username is already taken.
        """

    async def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        """Return False if nothing matched."""

    async def confirm_email(self, user_id: str) -> bool:
        """Set email_confirmed. Return False if nothing matched."""

    async def add_role(self, user_id: str, role: str) -> bool:
        """Append the role. False if the user is missing or already has it."""

    async def remove_role(self, user_id: str, role: str) -> bool:
        """Drop the role. False if the user is missing or does not have it."""

    async def delete(self, user_id: str) -> bool:
        """Return False if nothing was deleted."""
