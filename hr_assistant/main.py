"""FastAPI application entry point.

Configures CORS, structured logging, error envelopes, lifespan events
(including APScheduler), and router registration.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hr_assistant.core.config import settings
from hr_assistant.core.error_handlers import register_exception_handlers
from hr_assistant.core.logging import setup_logging
from hr_assistant.routers import health, interviews
from hr_assistant.scheduler.jobs import shutdown_scheduler, start_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: starts APScheduler on startup, stops it on exit."""
    setup_logging()
    logger.info("Application starting up")
    start_scheduler()
    yield
    shutdown_scheduler()
    logger.info("Application shutting down")


app = FastAPI(
    title="HR Assistant API",
    description="Interview scheduling backend for HR recruiting",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# CORS Configuration
# ---------------------------------------------------------------------------
_raw_origins = settings.ALLOWED_ORIGINS.strip()
if _raw_origins == "*":
    _allowed_origins: list[str] = ["*"]
else:
    _allowed_origins = [o.strip() for o in _raw_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Router Registration
# ---------------------------------------------------------------------------
app.include_router(health.router, tags=["Health"])
app.include_router(interviews.router, prefix="/api/interviews", tags=["Interviews"])
