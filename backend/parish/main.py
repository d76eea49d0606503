import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import parish
from parish.auth import warn_if_default_secret
from parish.config import get_settings

# Ensure all SQLAlchemy models are imported so mappers resolve
import parish.models  # noqa: F401
from parish.db import init_db

from parish.api import (
    auth,          # /api/auth
    requests,      # /api/requests (+ issue-certificate)
    certificates,  # /api/certificates (registry, upload, download)
    records,       # /api/records
)

# Ops endpoints (/api/health, /api/version)
from parish.api.system import router as system_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    warn_if_default_secret(settings)
    if settings.auto_create_tables:
        init_db()
    logger.info("parish API %s started", parish.__version__)
    yield


app = FastAPI(title="Parish Back-Office API", version=parish.__version__, lifespan=lifespan)

# --- CORS for the admin/public frontend ---
_wildcard = settings.cors_origins == ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=not _wildcard,  # browsers reject credentials with "*"
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(system_router)        # /api/health, /api/version
app.include_router(auth.router)          # /api/auth/login, /api/auth/me
app.include_router(requests.router)      # /api/requests
app.include_router(certificates.router)  # /api/certificates
app.include_router(records.router)       # /api/records
