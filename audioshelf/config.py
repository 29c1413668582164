"""Process-wide server settings resolved once from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, Optional

SESSION_LIFETIME_ENV = "SESSION_LIFETIME"
COOKIE_SECURE_ENV = "COOKIE_ONLY_OVER_HTTPS"
DATABASE_URL_ENV = "DATABASE_URL"
LOG_LEVEL_ENV = "AUDIOSHELF_LOG_LEVEL"
CORS_ORIGINS_ENV = "AUDIOSHELF_CORS_ORIGINS"

DEFAULT_SESSION_LIFETIME_HOURS = 720
DEFAULT_RENEWAL_THRESHOLD = timedelta(hours=6)
DEFAULT_DATABASE_URL = "sqlite:///audioshelf.db"
SESSION_COOKIE_NAME = "audioshelf_session"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class ConfigurationError(ValueError):
    """Raised when an environment value cannot be interpreted."""


@dataclass(frozen=True)
class ServerSettings:
    """Immutable runtime configuration shared by the web layer and services."""

    session_lifetime: timedelta = timedelta(hours=DEFAULT_SESSION_LIFETIME_HOURS)
    renewal_threshold: timedelta = DEFAULT_RENEWAL_THRESHOLD
    cookie_secure: bool = False
    cookie_name: str = SESSION_COOKIE_NAME
    database_url: str = DEFAULT_DATABASE_URL
    log_level: int = logging.INFO
    cors_origins: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerSettings":
        """Build settings from ``environ`` (defaults to :data:`os.environ`)."""

        env = os.environ if environ is None else environ
        return cls(
            session_lifetime=timedelta(
                hours=_parse_int(env.get(SESSION_LIFETIME_ENV), SESSION_LIFETIME_ENV)
            ),
            cookie_secure=_parse_bool(env.get(COOKIE_SECURE_ENV), COOKIE_SECURE_ENV),
            database_url=(env.get(DATABASE_URL_ENV) or "").strip() or DEFAULT_DATABASE_URL,
            log_level=_parse_log_level(env.get(LOG_LEVEL_ENV)),
            cors_origins=env.get(CORS_ORIGINS_ENV),
        )


def _parse_int(raw: Optional[str], name: str) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_SESSION_LIFETIME_HOURS
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer number of hours") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive")
    return value


def _parse_bool(raw: Optional[str], name: str) -> bool:
    if raw is None:
        return False
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean")


def _parse_log_level(raw: Optional[str]) -> int:
    if not raw or not raw.strip():
        return logging.INFO
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else logging.INFO


__all__ = [
    "ConfigurationError",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_RENEWAL_THRESHOLD",
    "SESSION_COOKIE_NAME",
    "ServerSettings",
]
