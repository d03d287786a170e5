from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: bool = False) -> bool:
    value = _env(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _csv(name: str, default: str) -> tuple[str, ...]:
    value = _env(name, default) or ""
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    postgres_dsn: str
    jwt_secret: str
    jwt_access_ttl_minutes: int
    stripe_secret_key: str
    stripe_publishable_key: str
    billing_currency: str
    cors_allow_origins: tuple[str, ...]
    subscription_jobs_enabled: bool
    log_level: str


def get_settings() -> Settings:
    return Settings(
        postgres_dsn=_env("POSTGRES_DSN", ""),
        jwt_secret=_env("JWT_SECRET", ""),
        jwt_access_ttl_minutes=int(_env("JWT_ACCESS_TTL_MINUTES", "60")),
        stripe_secret_key=_env("STRIPE_SECRET_KEY", ""),
        stripe_publishable_key=_env("STRIPE_PUBLISHABLE_KEY", ""),
        billing_currency=_env("BILLING_CURRENCY", "INR").upper(),
        cors_allow_origins=_csv("CORS_ALLOW_ORIGINS", "*"),
        subscription_jobs_enabled=_bool("SUBSCRIPTION_JOBS_ENABLED"),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
    )
