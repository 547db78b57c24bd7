from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from sellpoint_auth.domain.entities import DeviceFingerprint, RoleChange, Session
from sellpoint_auth.domain.errors import (
    AccessDenied,
    OperationFailed,
    SessionNotFound,
    UserNotFound,
)
from sellpoint_auth.domain.ports.session_notifier import SessionNotifierPort
from sellpoint_auth.domain.ports.session_repository import SessionRepositoryPort
from sellpoint_auth.domain.ports.user_repository import UserRepositoryPort
from sellpoint_auth.domain.services import new_opaque_token

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """
    Issues, extends, resolves and revokes per-device sessions.

    Session validity is never cached here: every check reads the store, so a
    revocation is visible to the very next request. Forced-logout pushes run
    on their own tasks and can neither block nor fail a revocation.

    One instance lives for the whole process (see `sellpoint_auth.main`) so
    that in-flight pushes stay referenced until they finish.
    """

    def __init__(
        self,
        *,
        sessions: SessionRepositoryPort,
        users: UserRepositoryPort,
        notifier: SessionNotifierPort,
        ttl: timedelta,
        max_lifetime: timedelta | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._sessions = sessions
        self._users = users
        self._notifier = notifier
        self._ttl = ttl
        self._max_lifetime = max_lifetime
        self._clock = clock
        self._pending: set[asyncio.Task] = set()

    def _expiry_for(self, created_at: datetime, now: datetime) -> datetime:
        expires_at = now + self._ttl
        if self._max_lifetime is not None:
            expires_at = min(expires_at, created_at + self._max_lifetime)
        return expires_at

    async def issue_or_refresh(self, user_id: str, device: DeviceFingerprint) -> str:
        """
        Return the token of the user's valid session for this device, pushing
        its expiry forward, or create a new session if there is none.

        Stale sessions (revoked/expired) on the same device are left in place.
        The extension only lands on a row that is still valid, so a revoke that
        commits in between wins and this login gets a new session instead.
        """
        now = self._clock()
        sessions = await self._sessions.list_for_user(user_id)

        current = next(
            (s for s in sessions if s.device == device and s.is_valid(now)), None
        )
        if current is not None:
            expires_at = self._expiry_for(current.created_at, now)
            if expires_at > now and await self._sessions.extend(
                current.id, expires_at, now=now
            ):
                logger.info(
                    "session extended",
                    extra={"user_id": user_id, "session_id": current.id},
                )
                return current.id

        return await self._create(user_id, device, now)

    async def _create(self, user_id: str, device: DeviceFingerprint, now: datetime) -> str:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFound()

        session = Session(
            id=new_opaque_token(),
            user_id=user_id,
            device=device,
            created_at=now,
            expires_at=self._expiry_for(now, now),
            is_revoked=False,
            roles=list(user.roles),
        )
        if not await self._sessions.create(session):
            raise OperationFailed("Failed to create session")
        logger.info(
            "session issued",
            extra={
                "user_id": user_id,
                "session_id": session.id,
                "browser": device.browser,
                "os": device.os,
                "device": device.device,
            },
        )
        return session.id

    async def resolve(self, session_id: str) -> Session | None:
        """The session if it exists and is still usable, else None."""
        if not session_id:
            return None
        session = await self._sessions.get(session_id)
        if session is None or not session.is_valid(self._clock()):
            return None
        return session

    async def list_active(self, user_id: str) -> list[Session]:
        if await self._users.get_by_id(user_id) is None:
            raise UserNotFound()
        now = self._clock()
        return [s for s in await self._sessions.list_for_user(user_id) if s.is_valid(now)]

    async def revoke(self, session_id: str) -> None:
        session = await self._sessions.get(session_id)
        if session is None or session.is_revoked:
            raise SessionNotFound()
        await self._revoke(session)

    async def revoke_owned(self, session_id: str, acting_user_id: str) -> None:
        """Revoke one of the acting user's own sessions (logout of a device)."""
        if await self._users.get_by_id(acting_user_id) is None:
            raise UserNotFound()
        session = await self._sessions.get(session_id)
        if session is None or session.is_revoked:
            raise SessionNotFound()
        if session.user_id != acting_user_id:
            raise AccessDenied("It's not your session")
        await self._revoke(session)

    async def _revoke(self, session: Session) -> None:
        self._dispatch_forced_logout(session.id)
        if not await self._sessions.revoke(session.id):
            raise SessionNotFound()
        logger.info(
            "session revoked",
            extra={"user_id": session.user_id, "session_id": session.id},
        )

    async def revoke_all_for_user(
        self, user_id: str, *, notify: bool = False
    ) -> list[Session]:
        """
        Mark every session of the user revoked in one statement.

        With notify=True a forced-logout push goes out for each session that
        was still unexpired. Returns the sessions this call revoked.
        """
        if await self._users.get_by_id(user_id) is None:
            raise UserNotFound()

        now = self._clock()
        revoked = await self._sessions.revoke_all_for_user(user_id)
        if notify:
            for session in revoked:
                if session.expires_at > now:
                    self._dispatch_forced_logout(session.id)
        logger.info(
            "all sessions revoked",
            extra={"user_id": user_id, "count": len(revoked), "notified": notify},
        )
        return revoked

    async def propagate_role_change(
        self, user_id: str, role: str, change: RoleChange
    ) -> int:
        """
        Rewrite the role snapshot carried by every session of the user so that
        authorization follows the user record without a re-login.
        """
        changed = await self._sessions.apply_role_change(user_id, role, change)
        logger.info(
            "role propagated to sessions",
            extra={
                "user_id": user_id,
                "role": role,
                "change": change.value,
                "count": changed,
            },
        )
        return changed

    async def delete_all_for_user(self, user_id: str) -> int:
        """Physical delete, used only when the account itself goes away."""
        return await self._sessions.delete_for_user(user_id)

    def _dispatch_forced_logout(self, session_id: str) -> None:
        task = asyncio.create_task(self._push_forced_logout(session_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _push_forced_logout(self, session_id: str) -> None:
        try:
            await self._notifier.notify_forced_logout(session_id)
        except Exception:  # noqa: BLE001
            # best-effort: the revoked flag in the store is authoritative
            logger.warning(
                "forced logout push failed",
                extra={"session_id": session_id},
                exc_info=True,
            )

    async def drain_notifications(self) -> None:
        """Wait for in-flight forced-logout pushes (tests, shutdown)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
