from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: str) -> bool:
    return (_env(name, default) or "").strip().lower() in {"1", "true", "yes", "on"}


def _csv(name: str, default: str) -> list[str]:
    value = _env(name, default) or ""
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class SeedAccount:
    email: str
    password: str
    nickname: str


@dataclass(frozen=True)
class Settings:
    postgres_dsn: str
    jwt_secret_key: str
    jwt_algorithm: str
    jwt_access_token_validity_seconds: int
    jwt_refresh_token_validity_seconds: int
    refresh_cookie_secure: bool
    oauth_code_ttl_seconds: int
    internal_api_key: str
    admin_account: SeedAccount
    test_account: SeedAccount
    db_auto_create: bool
    log_level: str
    cors_allow_origins: list[str]


def get_settings() -> Settings:
    return Settings(
        postgres_dsn=_env("POSTGRES_DSN", ""),
        jwt_secret_key=_env("JWT_SECRET_KEY", ""),
        jwt_algorithm=_env("JWT_ALGORITHM", "HS512"),
        jwt_access_token_validity_seconds=int(_env("JWT_ACCESS_TOKEN_VALIDITY_SECONDS", "1800")),
        jwt_refresh_token_validity_seconds=int(_env("JWT_REFRESH_TOKEN_VALIDITY_SECONDS", "604800")),
        refresh_cookie_secure=_bool("REFRESH_COOKIE_SECURE", "true"),
        oauth_code_ttl_seconds=int(_env("OAUTH_CODE_TTL_SECONDS", "300")),
        internal_api_key=_env("INTERNAL_API_KEY", ""),
        admin_account=SeedAccount(
            email=_env("ADMIN_EMAIL", ""),
            password=_env("ADMIN_PASSWORD", ""),
            nickname=_env("ADMIN_NICKNAME", "admin"),
        ),
        test_account=SeedAccount(
            email=_env("TEST_EMAIL", ""),
            password=_env("TEST_PASSWORD", ""),
            nickname=_env("TEST_NICKNAME", "tester"),
        ),
        db_auto_create=_bool("DB_AUTO_CREATE", "false"),
        log_level=_env("LOG_LEVEL", "INFO"),
        cors_allow_origins=_csv("CORS_ALLOW_ORIGINS", ""),
    )
