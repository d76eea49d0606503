# parish/config.py
"""
Runtime settings, read once from the environment (.env supported).

Every knob has a safe default so the app boots against a local SQLite file
with no configuration at all. Malformed numbers/booleans fall back to the
default instead of crashing startup.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()

_DEV_ORIGINS = (
    "http://localhost:3000", "http://127.0.0.1:3000",
    "http://localhost:5173", "http://127.0.0.1:5173",
)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


def _env_list(name: str, default: tuple[str, ...]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [p.strip() for p in raw.split(",") if p.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./parish.db"
    sql_echo: bool = False

    jwt_secret: str = "changeme"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 12

    cors_origins: List[str] = field(default_factory=lambda: list(_DEV_ORIGINS))

    upload_file_limit_mb: int = 10
    upload_reminder_hours: int = 48
    default_officiant: str = "Parish Priest"

    tz: str = "Asia/Manila"
    log_level: str = "INFO"
    auto_create_tables: bool = True

    @property
    def upload_file_limit_bytes(self) -> int:
        return self.upload_file_limit_mb * 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL") or Settings.database_url,
        sql_echo=_env_bool("SQL_ECHO", False),
        jwt_secret=os.getenv("JWT_SECRET", Settings.jwt_secret),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", Settings.jwt_algorithm),
        jwt_expire_hours=_env_int("JWT_EXPIRE_HOURS", 12),
        cors_origins=_env_list("CORS_ORIGINS", _DEV_ORIGINS),
        upload_file_limit_mb=_env_int("UPLOAD_FILE_LIMIT_MB", 10),
        upload_reminder_hours=_env_int("UPLOAD_REMINDER_HOURS", 48),
        default_officiant=os.getenv("DEFAULT_OFFICIANT", Settings.default_officiant),
        tz=os.getenv("TZ", Settings.tz),
        log_level=os.getenv("LOG_LEVEL", Settings.log_level).upper(),
        auto_create_tables=_env_bool("AUTO_CREATE_TABLES", True),
    )
