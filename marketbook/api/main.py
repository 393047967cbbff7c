"""marketbook FastAPI application entry point.

Start with (needs the ``server`` extra):
    uvicorn marketbook.api.main:app --reload --host 0.0.0.0 --port 8000

The lifespan creates the database (if missing), the engine, the session
factory and the reminder service; all are torn down on shutdown.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from marketbook.config import load_booking_config
from marketbook.core.exceptions import ProjectError
from marketbook.core.logger import configure
from marketbook.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from marketbook.services.reminder_service import ReminderService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure()

    booking_config = load_booking_config()
    await ensure_database_exists()
    engine = build_engine()
    session_factory = build_session_factory(engine)
    await init_db()

    app.state.session_factory = session_factory
    app.state.booking_config = booking_config

    reminders = ReminderService(session_factory, config=booking_config)
    if os.environ.get("REMINDERS_ENABLED", "true").lower() in ("1", "true", "yes"):
        reminders.start()
    app.state.reminder_service = reminders
    logger.info("API: ready (horizon=%d days)", booking_config.horizon_days)

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    await reminders.stop()
    await close_engine()
    logger.info("API: engine disposed")


app = FastAPI(
    title="marketbook API",
    version="1.0.0",
    description="Availability scheduling and booking-slot management for marketplace services.",
    lifespan=lifespan,
)

# Rate limiter: API_RATE_LIMIT env var (default 60/minute)
_rate_limit = os.environ.get("API_RATE_LIMIT", "60/minute")
limiter = Limiter(key_func=get_remote_address, default_limits=[_rate_limit])
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(ProjectError)
async def project_error_handler(request: Request, exc: ProjectError):
    if exc.http_status >= 500:
        logger.error("API: %s on %s", exc.code, request.url.path, extra={"error_code": exc.code})
    else:
        logger.info("API: %s on %s: %s", exc.code, request.url.path, exc.message, extra={"error_code": exc.code})
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


_allowed_origins = os.environ.get(
    "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Optional API key authentication ──────────────────────────────
# With ADMIN_API_KEY set, every /api/v1/* request needs  X-Api-Key: <value>
_ADMIN_API_KEY = os.environ.get("ADMIN_API_KEY", "").strip() or None


@app.middleware("http")
async def api_key_middleware(request: Request, call_next):
    if _ADMIN_API_KEY and request.url.path.startswith("/api/v1"):
        if request.headers.get("X-Api-Key") != _ADMIN_API_KEY:
            return JSONResponse(
                status_code=401,
                content={"detail": "Unauthorized: set X-Api-Key header", "code": "UNAUTHORIZED"},
            )
    return await call_next(request)


# ── Routers ───────────────────────────────────────────────────────
from marketbook.api.routers import availability, bookings, markets, schedule  # noqa: E402

app.include_router(availability.router, prefix="/api/v1")
app.include_router(schedule.router, prefix="/api/v1")
app.include_router(bookings.router, prefix="/api/v1")
app.include_router(markets.router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
