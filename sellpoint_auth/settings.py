from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Infra
    database_url: str = "postgresql://app:app@db:5432/app"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_pool_timeout_seconds: float = 5.0
    db_connect_timeout_seconds: int = 3
    redis_url: str = "redis://redis:6379/0"
    verification_cache_backend: Literal["memory", "redis"] = "memory"
    smtp_base_url: str = "http://smtp-mock:8025"
    mail_from: str = "no-reply@sellpoint.pp.ua"

    # Sessions
    session_ttl_hours: int = 168
    # None keeps expiry purely sliding; set to cap lifetime from created_at
    session_max_lifetime_hours: int | None = None

    # Security / policies
    bcrypt_rounds: int = 12
    code_length: int = 6
    reset_code_ttl_minutes: int = 15
    reset_access_ttl_minutes: int = 30
    verification_code_ttl_minutes: int = 15

    # Account deletion cascade (tables keyed by user_id)
    purge_tables: list[str] = ["favorite_products", "favorite_sellers", "carts"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
