import logging

from sellpoint_auth.application.code_verification import CodeVerifier
from sellpoint_auth.application.sessions import SessionManager
from sellpoint_auth.domain.errors import InvalidOperation, UserNotFound
from sellpoint_auth.domain.ports.user_data_purge import UserDataPurgePort
from sellpoint_auth.domain.ports.user_repository import UserRepositoryPort

logger = logging.getLogger(__name__)


async def send_delete_account_code(
    users: UserRepositoryPort,
    verifier: CodeVerifier,
    user_id: str,
) -> None:
    user = await users.get_by_id(user_id)
    if user is None:
        raise UserNotFound()
    if not user.email:
        raise InvalidOperation("User has no email address")

    await verifier.send_code(user.id, user.email)


async def delete_account(
    users: UserRepositoryPort,
    verifier: CodeVerifier,
    session_manager: SessionManager,
    purge: UserDataPurgePort,
    user_id: str,
    code: str,
) -> None:
    """Confirm the mailed code, then remove the user and everything keyed by them."""
    user = await users.get_by_id(user_id)
    if user is None:
        raise UserNotFound()

    await verifier.consume(user.id, code)

    await purge.purge(user.id)
    # connected devices get their forced logout before the rows disappear
    await session_manager.revoke_all_for_user(user.id, notify=True)
    removed_sessions = await session_manager.delete_all_for_user(user.id)
    if not await users.delete(user.id):
        raise UserNotFound()
    logger.info(
        "account deleted",
        extra={"user_id": user.id, "sessions_removed": removed_sessions},
    )
