from __future__ import annotations

import logging
from typing import Callable

import sellpoint_auth.domain.services as domain_services
from sellpoint_auth.application.messages import MailContent
from sellpoint_auth.domain.errors import InvalidCode
from sellpoint_auth.domain.ports.email_port import EmailPort
from sellpoint_auth.domain.ports.verification_cache import VerificationCachePort

logger = logging.getLogger(__name__)

VERIFY_EMAIL_PREFIX = "verify"
DELETE_ACCOUNT_PREFIX = "delete-account"


class CodeVerifier:
    """Single-stage mailed code stored under `{prefix}:{subject_key}`."""

    def __init__(
        self,
        *,
        cache: VerificationCachePort,
        email: EmailPort,
        prefix: str,
        mail: Callable[[str, int], MailContent],
        ttl_seconds: int = 15 * 60,
        code_length: int = 6,
    ) -> None:
        self._cache = cache
        self._email = email
        self._prefix = prefix
        self._mail = mail
        self._ttl = ttl_seconds
        self._code_length = code_length

    @property
    def prefix(self) -> str:
        return self._prefix

    def _key(self, subject_key: str) -> str:
        return f"{self._prefix}:{subject_key}"

    async def send_code(self, subject_key: str, recipient: str) -> None:
        """Issue a fresh code (replacing any previous one) and mail it."""
        code = domain_services.generate_code(self._code_length)
        await self._cache.set(self._key(subject_key), code, self._ttl)
        mail = self._mail(code, self._ttl // 60)
        await self._email.send(to=recipient, subject=mail.subject, html_body=mail.html_body)
        logger.info("verification code sent", extra={"purpose": self._prefix})

    async def consume(self, subject_key: str, input_code: str) -> None:
        """
        Remove the code if input_code matches, else raise InvalidCode.
        A mismatch leaves the stored code untouched.
        """
        key = self._key(subject_key)
        stored = await self._cache.try_get(key)
        if not stored or not domain_services.codes_match(stored, input_code):
            logger.warning("verification code rejected", extra={"purpose": self._prefix})
            raise InvalidCode()
        if not await self._cache.remove(key):
            raise InvalidCode()
