import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from athlete_base.api.health import router as health_router
from athlete_base.api.registration import router as registration_router
from athlete_base.config.settings import Settings, get_settings
from athlete_base.core.logger import setup_logger
from athlete_base.core.password import make_hasher
from athlete_base.db.pool import ConnectionPool
from athlete_base.registration.service import PasswordHasher, RegistrationService
from athlete_base.users.coach_repository import CoachRepository
from athlete_base.users.player_repository import PlayerRepository


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the connection pool on startup and drain it on shutdown.

    A database that is down at startup is logged, not fatal: the pool
    reconnects on first use and /api/health reports the outage.
    """
    pool: ConnectionPool = app.state.pool
    pool.open()
    if await pool.check_health():
        logger.info("[STARTUP] Database connection test successful")
    else:
        logger.warning("[STARTUP] Database connection test failed; continuing in degraded mode")
    yield
    await pool.close()
    logger.info("[SHUTDOWN] Application stopped")


def create_app(
    settings: Settings | None = None,
    pool: ConnectionPool | None = None,
    hasher: PasswordHasher | None = None,
) -> FastAPI:
    """Build the FastAPI application with its pool and registration service.

    Args:
        settings: Settings to use instead of the environment
        pool: Pre-built pool (tests inject one bound to sqlite)
        hasher: Password hasher override; defaults to bcrypt at settings.bcrypt_rounds

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    pool = pool or ConnectionPool(settings)

    if hasher is None:
        hasher = make_hasher(settings)
    service = RegistrationService(PlayerRepository(pool), CoachRepository(pool), hasher=hasher)

    app = FastAPI(title="Athlete Base", version=settings.app_version, lifespan=lifespan)
    app.state.pool = pool
    app.state.registration_service = service
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=86400,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all HTTP requests."""
        started = time.perf_counter()
        logger.debug(f"[API] Request: {request.method} {request.url.path}")
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(f"[API] Response: {response.status_code} for {request.method} {request.url.path} in {duration_ms:.0f}ms")
        return response

    app.include_router(registration_router)
    app.include_router(health_router)

    logger.info("FastAPI application initialized")
    return app


def build_app() -> FastAPI:
    """Factory for ``uvicorn --factory athlete_base.main:build_app``."""
    settings = get_settings()
    setup_logger(level=settings.log_level)
    return create_app(settings)
