"""Rate limit middleware for FastAPI.

Applies the sliding-window limiter to every mutating API request:

0. Reject any request from a client under a repeat offender block
1. Map ``METHOD /path`` to a RateLimitAction (unmapped requests pass)
2. ``check`` the caller's budget; a denied check returns 429 with
   ``Retry-After``
3. Run the request
4. ``record`` the attempt with ``success = status < 400`` (a handler that
   raises counts as a failure); a successful login clears the caller's
   login record

Fail-Open Design:
    A limiter failure never rejects a request. ``check`` failures let the
    request through; ``record`` failures are logged.

Response Headers (RFC 6585):
    - Retry-After: Seconds until retry allowed (on 429)
    - X-RateLimit-Limit: Attempts allowed per window
    - X-RateLimit-Remaining: Attempts left after this one
"""

import math
from datetime import datetime
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.core.clock import utc_now
from src.core.container import (
    get_logger,
    get_rate_limiter,
    get_security_event_recorder,
)
from src.core.result import Failure, Success
from src.domain.enums import RateLimitAction, SecurityEventType, SecuritySeverity
from src.domain.events.security_events import SecurityEvent
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.rate_limit_protocol import RateLimitProtocol
from src.domain.value_objects import RateLimitDecision
from src.infrastructure.rate_limit import action_for_request
from src.infrastructure.rate_limit.config import is_skipped_path
from src.presentation.routers.api.middleware.request_identity import (
    client_key,
    resolve,
)
from src.presentation.routers.api.v1.errors import ErrorResponseBuilder

RATE_LIMITED_DETAIL = "Too many attempts. Please try again later."
CLIENT_BLOCKED_DETAIL = "Too many blocked attempts. Please try again later."


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Starlette middleware for per-client, per-action rate limiting."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if is_skipped_path(request.url.path):
            return await call_next(request)

        limiter = resolve(request, get_rate_limiter)
        logger = resolve(request, get_logger)
        key = client_key(request)

        match await limiter.blocked_until(client_key=key):
            case Success(value=until) if until is not None:
                return await self._reject_client(request, key, until)
            case Failure(error=error):
                logger.warning(
                    "Offender lookup failed, allowing request",
                    client_key=key,
                    error_code=error.code.value,
                )

        action = action_for_request(request.method, request.url.path)
        if action is None:
            return await call_next(request)

        decision: RateLimitDecision | None = None
        match await limiter.check(client_key=key, action=action):
            case Success(value=checked):
                decision = checked
            case Failure(error=error):
                logger.warning(
                    "Rate limit check failed, allowing request",
                    action=action.value,
                    client_key=key,
                    error_code=error.code.value,
                )

        if decision is not None and not decision.allowed:
            await self._record_block(request, key, action.value, decision)
            return ErrorResponseBuilder.from_status(
                request=request,
                status_code=429,
                detail=RATE_LIMITED_DETAIL,
                headers={
                    "Retry-After": str(decision.retry_after_seconds(utc_now())),
                    "X-RateLimit-Limit": str(decision.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        try:
            response = await call_next(request)
        except Exception:
            await self._record(limiter, logger, key, action, success=False)
            raise

        await self._record(
            limiter, logger, key, action, success=response.status_code < 400
        )

        if decision is not None:
            response.headers["X-RateLimit-Limit"] = str(decision.limit)
            response.headers["X-RateLimit-Remaining"] = str(
                max(decision.remaining_attempts - 1, 0)
            )
        return response

    async def _record_block(
        self,
        request: Request,
        key: str,
        action: str,
        decision: RateLimitDecision,
    ) -> None:
        await resolve(request, get_security_event_recorder).record(
            SecurityEvent(
                event_type=SecurityEventType.RATE_LIMIT_BLOCKED,
                severity=SecuritySeverity.HIGH,
                identifier=key,
                ip_address=key,
                user_agent=request.headers.get("user-agent"),
                details={
                    "action": action,
                    "path": request.url.path,
                    "blocked_until": (
                        decision.blocked_until.isoformat()
                        if decision.blocked_until
                        else ""
                    ),
                },
            )
        )

    async def _reject_client(
        self, request: Request, key: str, until: datetime
    ) -> Response:
        await resolve(request, get_security_event_recorder).record(
            SecurityEvent(
                event_type=SecurityEventType.RATE_LIMIT_BLOCKED,
                severity=SecuritySeverity.CRITICAL,
                identifier=key,
                ip_address=key,
                user_agent=request.headers.get("user-agent"),
                details={
                    "scope": "client",
                    "path": request.url.path,
                    "blocked_until": until.isoformat(),
                },
            )
        )
        retry_after = max(1, math.ceil((until - utc_now()).total_seconds()))
        return ErrorResponseBuilder.from_status(
            request=request,
            status_code=429,
            detail=CLIENT_BLOCKED_DETAIL,
            headers={"Retry-After": str(retry_after)},
        )

    @staticmethod
    async def _record(
        limiter: RateLimitProtocol,
        logger: LoggerProtocol,
        key: str,
        action: RateLimitAction,
        *,
        success: bool,
    ) -> None:
        match await limiter.record(client_key=key, action=action, success=success):
            case Failure(error=error):
                logger.warning(
                    "Rate limit record failed",
                    action=action.value,
                    client_key=key,
                    error_code=error.code.value,
                )
