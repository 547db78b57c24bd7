from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from sellpoint_auth.application.sessions import SessionManager, utcnow
from sellpoint_auth.domain.entities import Ban, BanScope
from sellpoint_auth.domain.errors import (
    BanNotFound,
    InvalidOperation,
    OperationFailed,
    SelfTargetedAction,
    UserNotFound,
)
from sellpoint_auth.domain.ports.ban_repository import BanRepositoryPort
from sellpoint_auth.domain.ports.user_repository import UserRepositoryPort
from sellpoint_auth.domain.services import new_opaque_token

logger = logging.getLogger(__name__)


class BanEnforcement:
    """
    Creates and lifts bans. A ban carrying the Login scope also ends every
    live session of the target, pushing a forced logout to each.
    """

    def __init__(
        self,
        *,
        bans: BanRepositoryPort,
        users: UserRepositoryPort,
        session_manager: SessionManager,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._bans = bans
        self._users = users
        self._session_manager = session_manager
        self._clock = clock

    async def ban(
        self,
        target_user_id: str,
        admin_id: str,
        reason: str,
        banned_until: datetime | None = None,
        scope: BanScope = BanScope.COMMENTS,
    ) -> Ban:
        if not target_user_id or not admin_id:
            raise InvalidOperation("UserId is required")
        if target_user_id == admin_id:
            logger.warning("admin tried to ban themselves", extra={"admin_id": admin_id})
            raise SelfTargetedAction("You can't ban yourself")
        if await self._users.get_by_id(target_user_id) is None:
            raise UserNotFound()

        ban = Ban(
            id=new_opaque_token(),
            user_id=target_user_id,
            admin_id=admin_id,
            reason=reason,
            banned_at=self._clock(),
            banned_until=banned_until,
            scope=BanScope(scope),
        )
        if not await self._bans.create(ban):
            raise OperationFailed("Failed to create ban")
        logger.info(
            "ban created",
            extra={
                "ban_id": ban.id,
                "user_id": ban.user_id,
                "admin_id": admin_id,
                "scope": int(ban.scope),
                "banned_until": banned_until.isoformat() if banned_until else None,
            },
        )

        if BanScope.LOGIN in ban.scope:
            revoked = await self._session_manager.revoke_all_for_user(
                target_user_id, notify=True
            )
            logger.info(
                "login ban enforced",
                extra={"user_id": target_user_id, "sessions_revoked": len(revoked)},
            )
        return ban

    async def unban(self, ban_id: str, admin_id: str) -> None:
        ban = await self._bans.get(ban_id)
        if ban is None:
            raise BanNotFound()
        if ban.user_id == admin_id:
            logger.warning("admin tried to unban themselves", extra={"admin_id": admin_id})
            raise SelfTargetedAction("You can't unban yourself")
        if not await self._bans.delete(ban_id):
            raise BanNotFound()
        logger.info("ban lifted", extra={"ban_id": ban_id, "admin_id": admin_id})

    async def list_for_user(self, user_id: str) -> list[Ban]:
        return await self._bans.list_for_user(user_id)

    async def active_login_ban(self, user_id: str) -> Ban | None:
        now = self._clock()
        for ban in await self._bans.list_for_user(user_id):
            if ban.blocks_login(now):
                return ban
        return None
