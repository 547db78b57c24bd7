from __future__ import annotations

from passlib.context import CryptContext

from sellpoint_auth.domain.ports.password_hasher import PasswordHasherPort
from sellpoint_auth.settings import get_settings

# One global context; bcrypt is the only scheme we use.
_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")


class BcryptPasswordHasher(PasswordHasherPort):
    def __init__(self, rounds: int | None = None) -> None:
        # None -> settings.bcrypt_rounds, read once
        self._rounds = int(rounds if rounds is not None else get_settings().bcrypt_rounds)

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, plain: str) -> str:
        return _pwd.hash(plain, rounds=self._rounds)

    def verify(self, plain: str, password_hash: str) -> bool:
        """Safe timing; malformed hashes count as a mismatch."""
        try:
            return _pwd.verify(plain, password_hash)
        except ValueError:
            return False
