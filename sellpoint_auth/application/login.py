import logging

from sellpoint_auth.application.bans import BanEnforcement
from sellpoint_auth.application.sessions import SessionManager
from sellpoint_auth.domain.entities import DeviceFingerprint
from sellpoint_auth.domain.errors import LoginBanned
from sellpoint_auth.domain.ports.password_hasher import PasswordHasherPort
from sellpoint_auth.domain.ports.user_repository import UserRepositoryPort

logger = logging.getLogger(__name__)


async def login(
    users: UserRepositoryPort,
    hasher: PasswordHasherPort,
    bans: BanEnforcement,
    session_manager: SessionManager,
    identifier: str,
    password: str,
    device: DeviceFingerprint,
) -> str | None:
    """Session token for valid credentials, None otherwise."""
    user = await users.find_by_identifier(identifier.strip())
    if user is None or not user.password_hash:
        return None
    if not hasher.verify(password, user.password_hash):
        return None

    ban = await bans.active_login_ban(user.id)
    if ban is not None:
        logger.warning(
            "login rejected by ban", extra={"user_id": user.id, "ban_id": ban.id}
        )
        raise LoginBanned()

    return await session_manager.issue_or_refresh(user.id, device)
