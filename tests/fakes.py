from __future__ import annotations

import asyncio
import copy
from datetime import datetime, timedelta, timezone
from typing import Any

from sellpoint_auth.domain.entities import Ban, DeviceFingerprint, RoleChange, Session, User

CHROME_WINDOWS = DeviceFingerprint(browser="Chrome 120", os="Windows", device="Desktop")
SAFARI_IOS = DeviceFingerprint(browser="Mobile Safari 17", os="iOS", device="iPhone")


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeUserRepo:
    def __init__(self, *users: User) -> None:
        self.by_id: dict[str, User] = {u.id: u for u in users}
        self.writes: list[tuple[str, str]] = []
        self.ack_writes = True
        self.yield_after_get = False

    def add(self, user: User) -> User:
        self.by_id[user.id] = user
        return user

    def _write(self, user_id: str, what: str) -> User | None:
        user = self.by_id.get(user_id)
        if user is None or not self.ack_writes:
            return None
        self.writes.append((user_id, what))
        return user

    async def get_by_id(self, user_id: str) -> User | None:
        user = self.by_id.get(user_id)
        snapshot = copy.deepcopy(user) if user else None
        if self.yield_after_get:
            await asyncio.sleep(0)
        return snapshot

    async def get_by_email(self, email: str) -> User | None:
        lowered = email.strip().lower()
        for user in self.by_id.values():
            if user.email == lowered:
                return copy.deepcopy(user)
        return None

    async def find_by_identifier(self, identifier: str) -> User | None:
        user = await self.get_by_email(identifier)
        if user is not None:
            return user
        for user in self.by_id.values():
            if user.username == identifier.strip():
                return copy.deepcopy(user)
        return None

    async def create(self, user: User) -> bool:
        if not self.ack_writes or user.id in self.by_id:
            return False
        for existing in self.by_id.values():
            if existing.username == user.username:
                return False
            if user.email is not None and existing.email == user.email:
                return False
        self.by_id[user.id] = copy.deepcopy(user)
        return True

    async def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        user = self._write(user_id, "password_hash")
        if user is None:
            return False
        user.password_hash = password_hash
        return True

    async def confirm_email(self, user_id: str) -> bool:
        user = self._write(user_id, "email_confirmed")
        if user is None:
            return False
        user.email_confirmed = True
        return True

    async def add_role(self, user_id: str, role: str) -> bool:
        user = self.by_id.get(user_id)
        if user is None or role in user.roles or self._write(user_id, "roles") is None:
            return False
        user.roles.append(role)
        return True

    async def remove_role(self, user_id: str, role: str) -> bool:
        user = self.by_id.get(user_id)
        if user is None or role not in user.roles or self._write(user_id, "roles") is None:
            return False
        user.roles.remove(role)
        return True

    async def delete(self, user_id: str) -> bool:
        return self.by_id.pop(user_id, None) is not None


class FakeSessionRepo:
    """
    Stores deep copies so the code under test cannot mutate state in place.

    With `yield_after_list` set, `list_for_user` hands control to the event
    loop after taking its snapshot, so tests can interleave another operation
    between a read and the write that follows it.
    """

    def __init__(self) -> None:
        self.by_id: dict[str, Session] = {}
        self.ack_writes = True
        self.yield_after_list = False

    async def create(self, session: Session) -> bool:
        if not self.ack_writes:
            return False
        self.by_id[session.id] = copy.deepcopy(session)
        return True

    async def get(self, session_id: str) -> Session | None:
        session = self.by_id.get(session_id)
        return copy.deepcopy(session) if session else None

    async def list_for_user(self, user_id: str) -> list[Session]:
        snapshot = [copy.deepcopy(s) for s in self.by_id.values() if s.user_id == user_id]
        if self.yield_after_list:
            await asyncio.sleep(0)
        return snapshot

    async def extend(self, session_id: str, expires_at: datetime, *, now: datetime) -> bool:
        session = self.by_id.get(session_id)
        if session is None or not self.ack_writes or not session.is_valid(now):
            return False
        session.expires_at = expires_at
        return True

    async def revoke(self, session_id: str) -> bool:
        session = self.by_id.get(session_id)
        if session is None or not self.ack_writes:
            return False
        session.revoke()
        return True

    async def revoke_all_for_user(self, user_id: str) -> list[Session]:
        revoked = []
        for session in self.by_id.values():
            if session.user_id == user_id and not session.is_revoked:
                session.revoke()
                revoked.append(copy.deepcopy(session))
        return revoked

    async def apply_role_change(self, user_id: str, role: str, change: RoleChange) -> int:
        changed = 0
        for session in self.by_id.values():
            if session.user_id != user_id:
                continue
            before = list(session.roles)
            session.apply_role_change(role, change)
            changed += session.roles != before
        return changed

    async def delete_for_user(self, user_id: str) -> int:
        doomed = [sid for sid, s in self.by_id.items() if s.user_id == user_id]
        for sid in doomed:
            del self.by_id[sid]
        return len(doomed)


class FakeBanRepo:
    def __init__(self) -> None:
        self.by_id: dict[str, Ban] = {}
        self.ack_writes = True

    async def create(self, ban: Ban) -> bool:
        if not self.ack_writes:
            return False
        self.by_id[ban.id] = ban
        return True

    async def get(self, ban_id: str) -> Ban | None:
        return self.by_id.get(ban_id)

    async def list_for_user(self, user_id: str) -> list[Ban]:
        bans = [b for b in self.by_id.values() if b.user_id == user_id]
        return sorted(bans, key=lambda b: b.banned_at, reverse=True)

    async def delete(self, ban_id: str) -> bool:
        return self.by_id.pop(ban_id, None) is not None


class FakeEmailOK:
    def __init__(self):
        self.calls: list[dict[str, Any]] = []

    async def send(self, *, to: str, subject: str, html_body: str) -> None:
        self.calls.append({"to": to, "subject": subject, "html_body": html_body})


class FakeNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.notified: list[str] = []
        self.fail = fail

    async def notify_forced_logout(self, session_id: str) -> None:
        self.notified.append(session_id)
        if self.fail:
            raise RuntimeError("socket gone")


class FakeHasher:
    def hash(self, plain: str) -> str:
        return "hashed-" + plain

    def verify(self, plain: str, password_hash: str) -> bool:
        return password_hash == "hashed-" + plain


class FakePurge:
    def __init__(self) -> None:
        self.purged: list[str] = []

    async def purge(self, user_id: str) -> None:
        self.purged.append(user_id)


class FakeWebSocket:
    def __init__(self, fail_send: bool = False) -> None:
        self.sent: list[Any] = []
        self.closed_with: int | None = None
        self.fail_send = fail_send

    async def send_json(self, data: Any) -> None:
        if self.fail_send:
            raise RuntimeError("connection reset")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed_with = code
