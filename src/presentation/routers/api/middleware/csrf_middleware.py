"""CSRF middleware.

Outermost defense: every state-changing request must carry the CSRF token
bound to its session in the ``X-CSRF-Token`` header. Safe methods and
exempt paths pass through untouched.

Rejections are 403 "Forbidden" regardless of the reason; the reason is
logged and recorded as a security event only.
"""

from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.core.container import get_csrf_service, get_logger, get_security_event_recorder
from src.domain.enums import SecurityEventType, SecuritySeverity
from src.domain.events.security_events import SecurityEvent
from src.presentation.routers.api.middleware.request_identity import (
    client_key,
    resolve,
    session_id_from,
)
from src.presentation.routers.api.v1.errors import ErrorResponseBuilder


class CSRFMiddleware(BaseHTTPMiddleware):
    """Validate CSRF tokens on mutating requests."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        csrf = resolve(request, get_csrf_service)
        validation = csrf.validate(
            method=request.method,
            path=request.url.path,
            headers=request.headers,
            session_id=session_id_from(request),
        )
        if validation.valid:
            return await call_next(request)

        reason = validation.error.value if validation.error else "unknown"
        ip_address = client_key(request)
        resolve(request, get_logger).warning(
            "CSRF validation failed",
            reason=reason,
            method=request.method,
            path=request.url.path,
            client_key=ip_address,
        )
        await resolve(request, get_security_event_recorder).record(
            SecurityEvent(
                event_type=SecurityEventType.CSRF_REJECTED,
                severity=SecuritySeverity.MEDIUM,
                ip_address=ip_address,
                user_agent=request.headers.get("user-agent"),
                details={"reason": reason, "path": request.url.path},
            )
        )
        return ErrorResponseBuilder.from_status(
            request=request, status_code=403, detail="Forbidden"
        )
