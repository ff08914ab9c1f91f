from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from anchor_blog.domain.entities.user import FirstUserPolicy


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _csv(name: str, default: str) -> tuple[str, ...]:
    value = _env(name, default) or ""
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    postgres_dsn: str
    db_statement_timeout_ms: int
    db_pool_timeout_seconds: float
    jwt_access_secret: str
    jwt_refresh_secret: str
    jwt_access_ttl_minutes: int
    jwt_refresh_ttl_days: int
    hmac_secret: str
    activation_token_ttl_hours: int
    password_reset_token_ttl_minutes: int
    first_user_policy: FirstUserPolicy
    public_base_url: str
    google_client_id: str
    google_client_secret: str
    google_redirect_uri: str
    cors_origins: tuple[str, ...]
    log_level: str


def get_settings() -> Settings:
    return Settings(
        postgres_dsn=_env("POSTGRES_DSN", ""),
        db_statement_timeout_ms=int(_env("DB_STATEMENT_TIMEOUT_MS", "5000")),
        db_pool_timeout_seconds=float(_env("DB_POOL_TIMEOUT_SECONDS", "5")),
        jwt_access_secret=_env("JWT_ACCESS_SECRET", ""),
        jwt_refresh_secret=_env("JWT_REFRESH_SECRET", ""),
        jwt_access_ttl_minutes=int(_env("JWT_ACCESS_TTL_MINUTES", "60")),
        jwt_refresh_ttl_days=int(_env("JWT_REFRESH_TTL_DAYS", "7")),
        hmac_secret=_env("HMAC_SECRET", ""),
        activation_token_ttl_hours=int(_env("ACTIVATION_TOKEN_TTL_HOURS", "24")),
        password_reset_token_ttl_minutes=int(_env("PASSWORD_RESET_TOKEN_TTL_MINUTES", "60")),
        first_user_policy=FirstUserPolicy(_env("FIRST_USER_POLICY", "unverified").strip().lower()),
        public_base_url=_env("PUBLIC_BASE_URL", "http://localhost:8080").rstrip("/"),
        google_client_id=_env("GOOGLE_CLIENT_ID", ""),
        google_client_secret=_env("GOOGLE_CLIENT_SECRET", ""),
        google_redirect_uri=_env("GOOGLE_REDIRECT_URI", ""),
        cors_origins=_csv("CORS_ORIGINS", "*"),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
    )
