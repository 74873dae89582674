"""FastAPI application factory."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from apaddicto.admin.router import router as admin_router
from apaddicto.auth.rate_limiter import get_auth_rate_limiter, get_general_rate_limiter
from apaddicto.auth.router import router as auth_router
from apaddicto.config import get_settings
from apaddicto.database import close_db, init_db
from apaddicto.health.router import router as health_router
from apaddicto.middleware import setup_middleware
from apaddicto.progress.router import router as progress_router
from apaddicto.store import close_store, init_store
from apaddicto.strategies.router import router as strategies_router
from apaddicto.users.router import router as users_router

logger = structlog.get_logger()


async def purge_rate_limits() -> int:
    """Drop expired entries from both limiters. Returns how many were removed."""
    removed = 0
    for limiter in (get_auth_rate_limiter(), get_general_rate_limiter()):
        removed += await limiter.cleanup()
    return removed


async def _cleanup_loop(interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = await purge_rate_limits()
        except Exception:
            logger.exception("rate_limit_cleanup_failed")
            continue
        if removed:
            logger.info("rate_limit_cleanup", removed=removed)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_store(settings.kv_backend, settings.redis_url)

    cleanup_task = asyncio.create_task(_cleanup_loop(settings.rate_limit_cleanup_interval_seconds))

    yield

    cleanup_task.cancel()
    try:
        await cleanup_task
    except asyncio.CancelledError:
        pass

    await close_db()
    await close_store()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Apaddicto API",
        description="Authentication and progress tracking for the Apaddicto craving-management app",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(progress_router)
    app.include_router(strategies_router)
    app.include_router(admin_router)

    return app


app = create_app()
