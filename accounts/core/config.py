"""
Configuration helpers for the accounts backend.

Settings are read once from environment variables (database URL, SMTP,
logging) so that routers/services do not fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    database_echo: bool
    database_pool_recycle_seconds: int
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str
    smtp_timeout_seconds: int
    welcome_email_enabled: bool
    log_level: str
    log_file: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=os.getenv("DATABASE_URL", ""),
        database_echo=_bool(os.getenv("DATABASE_ECHO"), False),
        database_pool_recycle_seconds=_int(os.getenv("DATABASE_POOL_RECYCLE_SECONDS", "1800"), 1800),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        smtp_timeout_seconds=_int(os.getenv("SMTP_TIMEOUT_SECONDS", "10"), 10),
        welcome_email_enabled=_bool(os.getenv("WELCOME_EMAIL_ENABLED"), True),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        log_file=os.getenv("LOG_FILE", ""),
    )
