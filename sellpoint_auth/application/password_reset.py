from __future__ import annotations

import logging
from typing import Callable

import sellpoint_auth.domain.services as domain_services
from sellpoint_auth.application.messages import MailContent, reset_password_mail
from sellpoint_auth.domain.errors import InvalidCode, OperationFailed, UserNotFound
from sellpoint_auth.domain.ports.email_port import EmailPort
from sellpoint_auth.domain.ports.password_hasher import PasswordHasherPort
from sellpoint_auth.domain.ports.user_repository import UserRepositoryPort
from sellpoint_auth.domain.ports.verification_cache import VerificationCachePort

logger = logging.getLogger(__name__)

RESET_PREFIX = "reset-pass"
ACCESS_CODE_PREFIX = "reset-pass-access-code"


def reset_key(reset_token: str) -> str:
    return f"{RESET_PREFIX}:{reset_token}"


def access_code_key(access_code: str) -> str:
    return f"{ACCESS_CODE_PREFIX}:{access_code}"


class PasswordResetHandshake:
    """
    request -> verify -> commit, every step single-use.

    Stage 1 binds a mailed short code to an opaque reset token; stage 2
    trades a matching code for an opaque access code; stage 3 spends the
    access code on the new password. A guessed short code is useless without
    the reset token, and neither secret survives its successful use.
    """

    def __init__(
        self,
        *,
        cache: VerificationCachePort,
        users: UserRepositoryPort,
        email: EmailPort,
        hasher: PasswordHasherPort,
        code_ttl_seconds: int = 15 * 60,
        access_ttl_seconds: int = 30 * 60,
        code_length: int = 6,
    ) -> None:
        self._cache = cache
        self._users = users
        self._email = email
        self._hasher = hasher
        self._code_ttl = code_ttl_seconds
        self._access_ttl = access_ttl_seconds
        self._code_length = code_length

    async def request_reset(
        self, identifier: str, *, schedule: Callable[..., None] | None = None
    ) -> str | None:
        """
        Mail a reset code to the account behind an email or username.

        Returns the reset token, or None when no account matches. Callers must
        answer both cases identically. With `schedule` (e.g.
        `BackgroundTasks.add_task`) the mail is handed over instead of awaited,
        so the caller answers before the relay does and a relay failure is
        only logged.
        """
        user = await self._users.find_by_identifier(identifier.strip())
        if user is None or not user.email:
            logger.info("password reset requested for unknown identifier")
            return None

        reset_token = domain_services.new_opaque_token()
        code = domain_services.generate_code(self._code_length)
        await self._cache.set(
            reset_key(reset_token),
            {"code": code, "user_id": user.id},
            self._code_ttl,
        )

        mail = reset_password_mail(code, self._code_ttl // 60)
        if schedule is None:
            await self._email.send(
                to=user.email, subject=mail.subject, html_body=mail.html_body
            )
            logger.info("password reset code sent", extra={"user_id": user.id})
        else:
            schedule(self._deliver, user.id, user.email, mail)
        return reset_token

    async def _deliver(self, user_id: str, to: str, mail: MailContent) -> None:
        try:
            await self._email.send(to=to, subject=mail.subject, html_body=mail.html_body)
        except Exception:  # noqa: BLE001
            logger.warning(
                "password reset mail failed", extra={"user_id": user_id}, exc_info=True
            )
            return
        logger.info("password reset code sent", extra={"user_id": user_id})

    async def verify_code(self, reset_token: str, input_code: str) -> str | None:
        """
        Exchange a matching code for an access code.

        None for unknown/expired tokens and for wrong codes; a wrong code
        leaves the stage-1 entry in place with its original expiry.
        """
        key = reset_key(reset_token)
        stored = await self._cache.try_get(key)
        if not stored:
            return None

        if not domain_services.codes_match(stored["code"], input_code):
            logger.warning(
                "password reset code mismatch", extra={"user_id": stored["user_id"]}
            )
            return None

        # losing a concurrent race for the same entry counts as a miss
        if not await self._cache.remove(key):
            return None

        access_code = domain_services.new_opaque_token()
        await self._cache.set(
            access_code_key(access_code), stored["user_id"], self._access_ttl
        )
        logger.info(
            "password reset code verified", extra={"user_id": stored["user_id"]}
        )
        return access_code

    async def commit(self, new_password: str, access_code: str) -> None:
        key = access_code_key(access_code)
        user_id = await self._cache.try_get(key)
        if not user_id or not await self._cache.remove(key):
            raise InvalidCode()

        user = await self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFound()

        password_hash = self._hasher.hash(new_password)
        if not await self._users.set_password_hash(user.id, password_hash):
            raise OperationFailed("Failed to update user")
        logger.info("password reset committed", extra={"user_id": user.id})
