from sellpoint_auth.application.code_verification import CodeVerifier
from sellpoint_auth.domain.errors import (
    EmailAlreadyConfirmed,
    InvalidOperation,
    OperationFailed,
    UserNotFound,
)
from sellpoint_auth.domain.ports.user_repository import UserRepositoryPort


async def send_email_verification_code(
    users: UserRepositoryPort,
    verifier: CodeVerifier,
    user_id: str,
) -> None:
    user = await users.get_by_id(user_id)
    if user is None:
        raise UserNotFound()
    if user.email_confirmed:
        raise EmailAlreadyConfirmed()
    if not user.email:
        raise InvalidOperation("User has no email address")

    await verifier.send_code(user.email, user.email)


async def confirm_email(
    users: UserRepositoryPort,
    verifier: CodeVerifier,
    user_id: str,
    code: str,
) -> None:
    user = await users.get_by_id(user_id)
    if user is None:
        raise UserNotFound()
    if not user.email:
        raise InvalidOperation("User has no email address")

    await verifier.consume(user.email, code)
    if not await users.confirm_email(user.id):
        raise OperationFailed("Failed to update user")
