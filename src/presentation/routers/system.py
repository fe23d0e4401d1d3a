"""System router for non-versioned application endpoints.

Root, health and configuration endpoints. Lightweight and side-effect free
so load balancers can poll them; the rate limiter skips them.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.container import get_database
from src.infrastructure.persistence.database import Database

system_router = APIRouter(tags=["System"])


@system_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint - basic status check."""
    return {
        "message": settings.app_name,
        "status": "operational",
        "version": settings.app_version,
    }


@system_router.get("/health")
async def health(database: Database = Depends(get_database)) -> JSONResponse:
    """Health check endpoint for monitoring and load balancers.

    Reports ``degraded`` (503) when the durable store is unreachable, since
    lockout checks fail closed without it.
    """
    if await database.check_connection():
        return JSONResponse(content={"status": "healthy", "database": "ok"})
    return JSONResponse(
        status_code=503,
        content={"status": "degraded", "database": "unavailable"},
    )


@system_router.get("/config")
async def get_config() -> JSONResponse:
    """Configuration debug endpoint (development only).

    Secrets and connection URLs are never included.
    """
    if not settings.is_development:
        return JSONResponse(
            status_code=403,
            content={"detail": "Config endpoint only available in development"},
        )

    return JSONResponse(
        content={
            "environment": settings.environment.value,
            "debug": settings.debug,
            "api": {
                "name": settings.app_name,
                "version": settings.app_version,
                "base_url": settings.api_base_url,
                "v1_prefix": settings.api_v1_prefix,
            },
            "rate_limit": {"backend": settings.rate_limit_backend},
            "lockout": {
                "threshold": settings.lockout_threshold,
                "duration_seconds": settings.lockout_duration_seconds,
            },
            "csrf": {
                "header_name": settings.csrf_header_name,
                "exempt_paths": settings.csrf_exempt_paths,
            },
            "idempotency": {
                "path_prefixes": settings.idempotent_path_prefixes,
                "ttl_seconds": settings.idempotency_ttl_seconds,
            },
        }
    )
