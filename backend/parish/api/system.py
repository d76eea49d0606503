# parish/api/system.py
from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

import parish
from parish.config import get_settings
from parish.db import engine

router = APIRouter(prefix="/api", tags=["ops"])


def _db_driver_from_url(url: str | None) -> str | None:
    if not url or "://" not in url:
        return None
    scheme = url.split("://", 1)[0]  # e.g., "postgresql+psycopg2"
    if "+" in scheme:
        return scheme.split("+", 1)[1]  # "psycopg2"
    return scheme  # fallback


@router.get("/health")
def health():
    """Liveness check with a lightweight DB probe and local time."""
    settings = get_settings()
    now_local = datetime.now(ZoneInfo(settings.tz)).isoformat()

    db = {"status": "ok", "driver": _db_driver_from_url(settings.database_url)}
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        db["status"] = f"error: {type(e).__name__}"

    return {
        "status": "ok",
        "time": {"tz": settings.tz, "now": now_local},
        "db": db,
    }


@router.get("/version")
def version():
    """Minimal runtime info; confirms DB driver for the UI."""
    settings = get_settings()
    return {
        "app": "Parish Back-Office",
        "version": parish.__version__,
        "db_driver": _db_driver_from_url(settings.database_url),
        "tz": settings.tz,
        "upload_limit_mb": settings.upload_file_limit_mb,
    }
