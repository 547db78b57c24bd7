from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntFlag

ROLE_USER = "user"
ROLE_ADMIN = "admin"
KNOWN_ROLES = frozenset({ROLE_USER, ROLE_ADMIN})


class BanScope(IntFlag):
    NONE = 0
    COMMENTS = 1 << 1
    ORDERS = 1 << 2
    LOGIN = 1 << 3
    MESSAGING = 1 << 4


class RoleChange(str, Enum):
    ADDED = "added"
    REMOVED = "removed"


@dataclass
class User:
    id: str
    username: str
    email: str | None = None
    password_hash: str | None = None
    roles: list[str] = field(default_factory=lambda: [ROLE_USER])
    email_confirmed: bool = False
    created_at: datetime | None = None

    def __post_init__(self):
        if self.email is not None:
            self.email = self.email.strip().lower()
            if not self.email:
                raise ValueError("email cannot be empty")


@dataclass(frozen=True)
class DeviceFingerprint:
    browser: str
    os: str
    device: str


@dataclass
class Session:
    id: str
    user_id: str
    device: DeviceFingerprint
    created_at: datetime
    expires_at: datetime
    is_revoked: bool = False
    roles: list[str] = field(default_factory=list)

    def is_valid(self, now: datetime) -> bool:
        return not self.is_revoked and self.expires_at > now

    def revoke(self) -> None:
        self.is_revoked = True

    def apply_role_change(self, role: str, change: RoleChange) -> None:
        if change is RoleChange.ADDED:
            if role not in self.roles:
                self.roles.append(role)
        elif role in self.roles:
            self.roles.remove(role)


@dataclass(frozen=True)
class Ban:
    """Immutable once written; lifting a ban deletes the record."""

    id: str
    user_id: str
    admin_id: str
    reason: str
    banned_at: datetime
    banned_until: datetime | None = None
    scope: BanScope = BanScope.COMMENTS

    def is_active(self, now: datetime) -> bool:
        return self.banned_until is None or self.banned_until > now

    def blocks_login(self, now: datetime) -> bool:
        return BanScope.LOGIN in self.scope and self.is_active(now)
