"""Platform session dependency.

Resolves the caller's live session from the session cookie (or
``X-Session-ID``). Routes that act for a signed-in caller depend on
``require_session``.
"""

from fastapi import Depends, HTTPException, Request, status

from src.core.clock import utc_now
from src.core.container import get_logger, get_session_repository
from src.core.result import Failure, Success
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.session_repository import SessionData, SessionRepository
from src.presentation.routers.api.middleware.request_identity import session_id_from


async def require_session(
    request: Request,
    sessions: SessionRepository = Depends(get_session_repository),
    logger: LoggerProtocol = Depends(get_logger),
) -> SessionData:
    """Return the caller's live session.

    Raises:
        HTTPException: 401 when no live session matches, 503 when the
            session store is unreachable.
    """
    session_id = session_id_from(request)
    if not session_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required"
        )

    match await sessions.find_active(session_id, now=utc_now()):
        case Success(value=None):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
            )
        case Success(value=session):
            return session
        case Failure(error=error):
            logger.error(
                "Session lookup failed",
                error_code=error.code.value,
                path=request.url.path,
            )
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service temporarily unavailable. Please try again later.",
            )
