import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Callable

import sellpoint_auth.domain.services as domain_services
from sellpoint_auth.application.sessions import SessionManager
from sellpoint_auth.domain.entities import ROLE_USER, DeviceFingerprint, User
from sellpoint_auth.domain.errors import EmailAlreadyRegistered, OperationFailed
from sellpoint_auth.domain.ports.password_hasher import PasswordHasherPort
from sellpoint_auth.domain.ports.user_repository import UserRepositoryPort

logger = logging.getLogger(__name__)

# first try is the bare local part, then suffixed variants
USERNAME_ATTEMPTS = 4


async def register(
    users: UserRepositoryPort,
    hasher: PasswordHasherPort,
    session_manager: SessionManager,
    email: str,
    password: str,
    device: DeviceFingerprint,
    clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
) -> str:
    """
    Create a plain `user` account for a new email and sign it in on this device.

    Returns the session token.
    """
    normalized_email = email.strip().lower()
    if await users.get_by_email(normalized_email) is not None:
        raise EmailAlreadyRegistered()

    password_hash = hasher.hash(password)
    for attempt in range(USERNAME_ATTEMPTS):
        suffix = secrets.token_hex(2) if attempt else None
        user = User(
            id=uuid.uuid4().hex,
            username=domain_services.username_from_email(normalized_email, suffix),
            email=normalized_email,
            password_hash=password_hash,
            roles=[ROLE_USER],
            created_at=clock(),
        )
        if await users.create(user):
            break
        # a concurrent registration may have taken the email in the meantime
        if await users.get_by_email(normalized_email) is not None:
            raise EmailAlreadyRegistered()
    else:
        raise OperationFailed("Failed to create user")

    logger.info("user registered", extra={"user_id": user.id, "username": user.username})
    return await session_manager.issue_or_refresh(user.id, device)
