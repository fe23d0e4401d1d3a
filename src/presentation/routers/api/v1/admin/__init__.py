"""Admin API routers (require ``X-Admin-Key``)."""

from src.presentation.routers.api.v1.admin.lockouts import router as lockouts_router

__all__ = ["lockouts_router"]
