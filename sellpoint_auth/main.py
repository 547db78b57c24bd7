import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from sellpoint_auth.domain.ports.verification_cache import VerificationCachePort
from sellpoint_auth.infrastructure.cache.memory import get_memory_cache
from sellpoint_auth.infrastructure.db.bans_repo import PgBanRepository
from sellpoint_auth.infrastructure.db.pool import close_pool, get_pool
from sellpoint_auth.infrastructure.db.purge import PgUserDataPurge
from sellpoint_auth.infrastructure.db.sessions_repo import PgSessionRepository
from sellpoint_auth.infrastructure.db.users_repo import PgUserRepository
from sellpoint_auth.infrastructure.email.http_smtp_adapter import HttpSmtpEmailAdapter
from sellpoint_auth.infrastructure.realtime.connections import SessionConnectionRegistry
from sellpoint_auth.infrastructure.redis_cache.client import close_redis, get_redis
from sellpoint_auth.infrastructure.redis_cache.verification_cache import (
    RedisVerificationCache,
)
from sellpoint_auth.infrastructure.security.password import BcryptPasswordHasher
from sellpoint_auth.logging import setup_logging
from sellpoint_auth.presentation.api import api
from sellpoint_auth.presentation.errors import register_exception_handlers
from sellpoint_auth.settings import Settings, get_settings
from sellpoint_auth.wiring import build_services

settings = get_settings()
logger = logging.getLogger(__name__)


def _verification_cache(settings: Settings) -> VerificationCachePort:
    if settings.verification_cache_backend == "redis":
        return RedisVerificationCache(get_redis())
    return get_memory_cache()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    pool = get_pool()
    if not getattr(pool, "is_open", False):
        await pool.open()

    # ONE shared http client, owned here and lent to the email adapter
    http_client = httpx.AsyncClient(timeout=5.0)
    email_adapter = HttpSmtpEmailAdapter(
        base_url=settings.smtp_base_url,
        sender=settings.mail_from,
        client=http_client,
    )

    services = build_services(
        settings,
        users=PgUserRepository(pool),
        sessions=PgSessionRepository(pool),
        bans=PgBanRepository(pool),
        cache=_verification_cache(settings),
        email=email_adapter,
        hasher=BcryptPasswordHasher(settings.bcrypt_rounds),
        purge=PgUserDataPurge(pool, settings.purge_tables),
        connections=SessionConnectionRegistry(),
    )
    app.state.services = services
    logger.info(
        "auth service started",
        extra={
            "env": settings.app_env,
            "verification_cache": settings.verification_cache_backend,
        },
    )

    try:
        yield
    finally:
        # shutdown
        await services.session_manager.drain_notifications()
        await email_adapter.aclose()  # it won't close the shared client
        await http_client.aclose()
        await close_redis()
        await close_pool()


def create_app() -> FastAPI:
    setup_logging(settings.log_level)
    app = FastAPI(title="Sellpoint Auth API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    register_exception_handlers(app)
    app.include_router(api)
    return app


app = create_app()
