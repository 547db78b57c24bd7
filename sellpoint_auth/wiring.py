from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from sellpoint_auth.application.bans import BanEnforcement
from sellpoint_auth.application.code_verification import (
    DELETE_ACCOUNT_PREFIX,
    VERIFY_EMAIL_PREFIX,
    CodeVerifier,
)
from sellpoint_auth.application.messages import confirm_email_mail, delete_account_mail
from sellpoint_auth.application.password_reset import PasswordResetHandshake
from sellpoint_auth.application.sessions import SessionManager, utcnow
from sellpoint_auth.domain.ports.ban_repository import BanRepositoryPort
from sellpoint_auth.domain.ports.email_port import EmailPort
from sellpoint_auth.domain.ports.password_hasher import PasswordHasherPort
from sellpoint_auth.domain.ports.session_repository import SessionRepositoryPort
from sellpoint_auth.domain.ports.user_data_purge import UserDataPurgePort
from sellpoint_auth.domain.ports.user_repository import UserRepositoryPort
from sellpoint_auth.domain.ports.verification_cache import VerificationCachePort
from sellpoint_auth.infrastructure.realtime.connections import SessionConnectionRegistry
from sellpoint_auth.settings import Settings


@dataclass
class Services:
    """Process-wide collaborators, built once by the app lifespan."""

    users: UserRepositoryPort
    hasher: PasswordHasherPort
    purge: UserDataPurgePort
    connections: SessionConnectionRegistry
    session_manager: SessionManager
    password_reset: PasswordResetHandshake
    email_verifier: CodeVerifier
    delete_account_verifier: CodeVerifier
    bans: BanEnforcement


def build_services(
    settings: Settings,
    *,
    users: UserRepositoryPort,
    sessions: SessionRepositoryPort,
    bans: BanRepositoryPort,
    cache: VerificationCachePort,
    email: EmailPort,
    hasher: PasswordHasherPort,
    purge: UserDataPurgePort,
    connections: SessionConnectionRegistry,
    clock: Callable[[], datetime] = utcnow,
) -> Services:
    max_lifetime = (
        timedelta(hours=settings.session_max_lifetime_hours)
        if settings.session_max_lifetime_hours
        else None
    )
    session_manager = SessionManager(
        sessions=sessions,
        users=users,
        notifier=connections,
        ttl=timedelta(hours=settings.session_ttl_hours),
        max_lifetime=max_lifetime,
        clock=clock,
    )
    code_ttl = settings.verification_code_ttl_minutes * 60
    return Services(
        users=users,
        hasher=hasher,
        purge=purge,
        connections=connections,
        session_manager=session_manager,
        password_reset=PasswordResetHandshake(
            cache=cache,
            users=users,
            email=email,
            hasher=hasher,
            code_ttl_seconds=settings.reset_code_ttl_minutes * 60,
            access_ttl_seconds=settings.reset_access_ttl_minutes * 60,
            code_length=settings.code_length,
        ),
        email_verifier=CodeVerifier(
            cache=cache,
            email=email,
            prefix=VERIFY_EMAIL_PREFIX,
            mail=confirm_email_mail,
            ttl_seconds=code_ttl,
            code_length=settings.code_length,
        ),
        delete_account_verifier=CodeVerifier(
            cache=cache,
            email=email,
            prefix=DELETE_ACCOUNT_PREFIX,
            mail=delete_account_mail,
            ttl_seconds=code_ttl,
            code_length=settings.code_length,
        ),
        bans=BanEnforcement(
            bans=bans, users=users, session_manager=session_manager, clock=clock
        ),
    )
