# app/core/config.py

import logging
import os
from datetime import timedelta
from functools import lru_cache
from typing import List

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# =========================
# DEFAULTS
# =========================

ACCESS_TOKEN_LIFETIME = timedelta(hours=1)
REFRESH_TOKEN_LIFETIME = timedelta(weeks=2)

DEV_JWT_SECRET = "dev-jwt-secret-change-me"
DEV_SESSION_SECRET = "dev-session-secret-change-me"


class ConfigurationError(RuntimeError):
    pass


def getenv_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def default_database_url() -> str:
    db_user = os.getenv("DB_USER", "shop_user")
    db_pass = os.getenv("DB_PASS", "shop_pass")
    db_host = os.getenv("DB_HOST", "localhost")
    db_port = os.getenv("DB_PORT", "5432")
    db_name = os.getenv("DB_NAME", "review_shop")
    return f"postgresql://{db_user}:{db_pass}@{db_host}:{db_port}/{db_name}"


class Settings(BaseModel):
    """
    Process-wide configuration, built once at startup.

    The token issuer, session middleware, refresh cookie helpers and the
    database layer all receive this object instead of reading the
    environment themselves.
    """

    model_config = ConfigDict(frozen=True)

    environment: str = "development"
    database_url: str = "sqlite:///./review_shop.db"

    jwt_secret: str = DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_lifetime: timedelta = ACCESS_TOKEN_LIFETIME
    refresh_token_lifetime: timedelta = REFRESH_TOKEN_LIFETIME

    session_secret: str = DEV_SESSION_SECRET
    session_cookie: str = "session"
    session_max_age: int = 14 * 24 * 60 * 60

    refresh_cookie_name: str = "refreshToken"
    refresh_cookie_path: str = "/token/refresh"
    cookie_secure: bool = True

    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    auto_create_tables: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        environment = os.getenv("ENVIRONMENT", "development")
        jwt_secret = os.getenv("JWT_SECRET")
        session_secret = os.getenv("SESSION_SECRET")

        missing = [
            name
            for name, value in (("JWT_SECRET", jwt_secret), ("SESSION_SECRET", session_secret))
            if not value
        ]
        if missing:
            if environment.lower() == "production":
                raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")
            logger.warning("⚠️  %s not set, using development defaults", ", ".join(missing))

        origins = os.getenv("CORS_ORIGINS", "*")

        return cls(
            environment=environment,
            database_url=os.getenv("DATABASE_URL") or default_database_url(),
            jwt_secret=jwt_secret or DEV_JWT_SECRET,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            session_secret=session_secret or DEV_SESSION_SECRET,
            session_max_age=int(os.getenv("SESSION_MAX_AGE", str(14 * 24 * 60 * 60))),
            cookie_secure=getenv_bool("COOKIE_SECURE", True),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            auto_create_tables=getenv_bool("AUTO_CREATE_TABLES", False),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
