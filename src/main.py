"""
Main FastAPI application entry point.

Builds the application with the request-defense middleware stack
(outermost first):

1. TraceMiddleware - request correlation id
2. CSRFMiddleware - session-bound token check on mutating requests
3. RateLimitMiddleware - per-client, per-action sliding window
4. IdempotencyMiddleware - replay of retried payment submissions

The lifespan owns the maintenance scheduler that sweeps expired rate-limit
records, CSRF tokens and idempotency records.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.core.config import settings
from src.core.container import (
    get_database,
    get_logger,
    get_maintenance_scheduler,
    get_redis,
)
from src.presentation.routers import system_router
from src.presentation.routers.api.middleware.csrf_middleware import CSRFMiddleware
from src.presentation.routers.api.middleware.idempotency_middleware import (
    IdempotencyMiddleware,
)
from src.presentation.routers.api.middleware.rate_limit_middleware import (
    RateLimitMiddleware,
)
from src.presentation.routers.api.middleware.trace_middleware import TraceMiddleware
from src.presentation.routers.api.v1 import v1_router
from src.presentation.routers.api.v1.errors import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Startup: create tables (development only), start the scheduler.
    Shutdown: stop the scheduler, dispose the engine, close Redis.
    """
    logger = get_logger()
    database = get_database()
    if settings.is_development:
        await database.create_all()

    scheduler = get_maintenance_scheduler()
    await scheduler.start()
    logger.info(
        "Application started",
        environment=settings.environment.value,
        rate_limit_backend=settings.rate_limit_backend,
    )

    yield

    await scheduler.stop()
    await database.close()
    if settings.rate_limit_backend == "redis":
        await get_redis().aclose()
    logger.info("Application stopped")


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Request-defense layer: rate limiting, lockout, idempotency, CSRF",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Starlette runs the last-added middleware first.
    app.add_middleware(IdempotencyMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(TraceMiddleware)

    register_exception_handlers(app)

    app.include_router(system_router)
    app.include_router(v1_router)
    return app


app = create_app()
