"""API v1 routers.

RESTful resource-based endpoints. All endpoints use resource nouns, not
action verbs.

Resources:
    /api/v1/sessions           - Session management (login/logout)
    /api/v1/csrf-tokens        - CSRF token retrieval
    /api/v1/payments           - Idempotent payment submission
    /api/v1/webhooks/payments  - Payment provider callbacks

Admin Resources:
    /api/v1/admin/lockouts/{identifier} - Lockout status and unlock
"""

from fastapi import APIRouter

from src.presentation.routers.api.v1 import csrf_tokens, payments, sessions, webhooks
from src.presentation.routers.api.v1.admin import lockouts_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(sessions.router)
v1_router.include_router(csrf_tokens.router)
v1_router.include_router(payments.router)
v1_router.include_router(webhooks.router)
v1_router.include_router(lockouts_router)

__all__ = [
    "v1_router",
]
