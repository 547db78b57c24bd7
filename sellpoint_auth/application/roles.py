import logging

from sellpoint_auth.application.sessions import SessionManager
from sellpoint_auth.domain.entities import KNOWN_ROLES, RoleChange
from sellpoint_auth.domain.errors import (
    RoleAlreadyAssigned,
    RoleNotAssigned,
    UnknownRole,
    UserNotFound,
)
from sellpoint_auth.domain.ports.user_repository import UserRepositoryPort

logger = logging.getLogger(__name__)


async def set_user_role(
    users: UserRepositoryPort,
    session_manager: SessionManager,
    user_id: str,
    role: str,
) -> None:
    if role not in KNOWN_ROLES:
        raise UnknownRole()
    user = await users.get_by_id(user_id)
    if user is None:
        raise UserNotFound()
    # the write itself refuses a role the user already has
    if not await users.add_role(user_id, role):
        raise RoleAlreadyAssigned(f"User already {role}")
    logger.info("role added", extra={"user_id": user_id, "role": role})

    await session_manager.propagate_role_change(user_id, role, RoleChange.ADDED)


async def remove_user_role(
    users: UserRepositoryPort,
    session_manager: SessionManager,
    user_id: str,
    role: str,
) -> None:
    if role not in KNOWN_ROLES:
        raise UnknownRole()
    user = await users.get_by_id(user_id)
    if user is None:
        raise UserNotFound()
    if not await users.remove_role(user_id, role):
        raise RoleNotAssigned(f"User doesn't have role {role}")
    logger.info("role removed", extra={"user_id": user_id, "role": role})

    await session_manager.propagate_role_change(user_id, role, RoleChange.REMOVED)
