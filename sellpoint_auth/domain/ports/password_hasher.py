from typing import Protocol


class PasswordHasherPort(Protocol):
    def hash(self, plain: str) -> str:
        """Return a salted hash of the password."""

    def verify(self, plain: str, password_hash: str) -> bool:
        """Constant-time check of plain against password_hash."""
