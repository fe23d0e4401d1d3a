"""Idempotency middleware.

Wraps mutating requests under ``settings.idempotent_path_prefixes`` in
``IdempotencyGuard.execute``. The key is the ``Idempotency-Key`` header when
present, otherwise one derived from method, path, caller scope and body.

The chosen key is exposed to the route as ``request.state.idempotency_key``
so it can be forwarded to external providers. Replayed responses carry
``Idempotent-Replayed: true``.

The caller scope is built from the session the store confirms active, never
from a session id the client merely presents.
"""

import asyncio
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.application.services.idempotency_guard import request_fingerprint
from src.core.clock import utc_now
from src.core.config import settings
from src.core.constants import (
    IDEMPOTENCY_KEY_HEADER,
    IDEMPOTENT_REPLAY_HEADER,
    MAX_IDEMPOTENCY_KEY_LENGTH,
    MUTATING_HTTP_METHODS,
)
from src.core.container import (
    get_idempotency_guard,
    get_logger,
    get_session_repository,
)
from src.core.result import Failure, Success
from src.domain.protocols.session_repository import SessionData
from src.domain.value_objects import IdempotentResponse
from src.presentation.routers.api.middleware.request_identity import (
    caller_scope,
    resolve,
    session_id_from,
)
from src.presentation.routers.api.v1.errors import ErrorResponseBuilder


def is_idempotent_path(method: str, path: str) -> bool:
    """Whether a request is deduplicated."""
    return method.upper() in MUTATING_HTTP_METHODS and any(
        path.startswith(prefix) for prefix in settings.idempotent_path_prefixes
    )


class IdempotencyMiddleware(BaseHTTPMiddleware):
    """Deduplicate retried mutations."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if not is_idempotent_path(request.method, request.url.path):
            return await call_next(request)

        guard = resolve(request, get_idempotency_guard)
        body = await request.body()
        scope = caller_scope(request, session=await self._verified_session(request))

        key = request.headers.get(IDEMPOTENCY_KEY_HEADER)
        if key is not None:
            key = key.strip()
            if not key or len(key) > MAX_IDEMPOTENCY_KEY_LENGTH:
                return ErrorResponseBuilder.from_status(
                    request=request,
                    status_code=400,
                    detail="Invalid Idempotency-Key header.",
                )
        else:
            key = guard.derive_key(
                method=request.method,
                path=request.url.path,
                body=body,
                caller_scope=scope,
            )
        request.state.idempotency_key = key

        async def handler() -> IdempotentResponse:
            response = await call_next(request)
            chunks = [chunk async for chunk in response.body_iterator]  # type: ignore[attr-defined]
            return IdempotentResponse(
                status_code=response.status_code,
                body=b"".join(
                    c if isinstance(c, bytes) else c.encode("utf-8") for c in chunks
                ),
                content_type=response.headers.get("content-type", "application/json"),
            )

        outcome = await guard.execute(
            key=key,
            caller_scope=scope,
            handler=handler,
            request_method=request.method.upper(),
            request_path=request.url.path,
            request_params=request_fingerprint(body),
        )

        response = Response(
            content=outcome.body,
            status_code=outcome.status_code,
            media_type=outcome.response.content_type,
        )
        if outcome.replayed:
            response.headers[IDEMPOTENT_REPLAY_HEADER] = "true"
        return response

    @staticmethod
    async def _verified_session(request: Request) -> SessionData | None:
        """The caller's active session, or None if absent, unknown or unreachable."""
        session_id = session_id_from(request)
        if session_id is None:
            return None

        logger = resolve(request, get_logger)
        repository = resolve(request, get_session_repository)
        try:
            result = await asyncio.wait_for(
                repository.find_active(session_id, now=utc_now()),
                timeout=settings.durable_store_timeout_seconds,
            )
        except TimeoutError:
            logger.warning(
                "Session lookup timed out, scoping by client key",
                path=request.url.path,
            )
            return None

        match result:
            case Success(value=session):
                return session
            case Failure(error=error):
                logger.warning(
                    "Session lookup failed, scoping by client key",
                    path=request.url.path,
                    error_code=error.code.value,
                )
        return None
