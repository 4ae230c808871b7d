# farm_directory/config.py
"""
Settings read from environment variables.

``Settings.from_env()`` is what the ASGI entrypoint uses; tests build a
``Settings`` directly with an in-memory database URL.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DATABASE_URL = f"sqlite:///{(BASE_DIR / 'farms.db').as_posix()}"


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _csv(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(p.strip() for p in raw.split(",") if p.strip())


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    database_url: str = DEFAULT_DATABASE_URL
    jwt_algorithm: str = "HS256"
    access_token_ttl_minutes: int = 60
    bcrypt_rounds: int = 10
    session_cookie_name: str = "token"
    session_cookie_secure: bool = False

    # Public listing shows approved farms only unless this is switched on
    public_include_unapproved: bool = False

    rate_limit_enabled: bool = True
    auth_rate_limit: str = "10 per 15 minutes"
    api_rate_limit: str = "100 per 15 minutes"

    cors_origins: tuple[str, ...] = ("http://localhost:5173",)

    seed_admin_email: str | None = None
    seed_admin_password: str | None = None
    seed_admin_name: str = "Admin User"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        secret = os.getenv("JWT_SECRET")
        if not secret:
            raise RuntimeError("JWT_SECRET is not set")
        return cls(
            jwt_secret=secret,
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            access_token_ttl_minutes=int(os.getenv("ACCESS_TOKEN_TTL_MINUTES", "60")),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "10")),
            session_cookie_name=os.getenv("SESSION_COOKIE_NAME", "token"),
            session_cookie_secure=_flag("SESSION_COOKIE_SECURE", False),
            public_include_unapproved=_flag("FARMS_PUBLIC_INCLUDE_UNAPPROVED", False),
            rate_limit_enabled=_flag("RATE_LIMIT_ENABLED", True),
            auth_rate_limit=os.getenv("AUTH_RATE_LIMIT", "10 per 15 minutes"),
            api_rate_limit=os.getenv("API_RATE_LIMIT", "100 per 15 minutes"),
            cors_origins=_csv("CORS_ORIGINS", "http://localhost:5173"),
            seed_admin_email=os.getenv("SEED_ADMIN_EMAIL") or None,
            seed_admin_password=os.getenv("SEED_ADMIN_PASSWORD") or None,
            seed_admin_name=os.getenv("SEED_ADMIN_NAME", "Admin User"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
