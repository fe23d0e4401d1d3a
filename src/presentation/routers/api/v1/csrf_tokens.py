"""CSRF tokens resource router.

Endpoints:
    GET /api/v1/csrf-tokens - Get (or issue) the current session's token
"""

from fastapi import APIRouter, Depends

from src.core.config import settings
from src.core.container import get_csrf_service
from src.domain.protocols import CSRFProtocol
from src.domain.protocols.session_repository import SessionData
from src.presentation.routers.api.middleware.session_dependencies import (
    require_session,
)
from src.presentation.routers.api.v1.errors import ProblemDetails
from src.schemas.security_schemas import CSRFTokenResponse

router = APIRouter(prefix="/csrf-tokens", tags=["CSRF"])


@router.get(
    "",
    response_model=CSRFTokenResponse,
    responses={401: {"description": "No live session", "model": ProblemDetails}},
    summary="Get CSRF token",
)
async def get_csrf_token(
    session: SessionData = Depends(require_session),
    csrf: CSRFProtocol = Depends(get_csrf_service),
) -> CSRFTokenResponse:
    """Return the live token, issuing a new one if it is missing or expired."""
    return CSRFTokenResponse(
        csrf_token=csrf.get_or_issue(session.session_id),
        header_name=settings.csrf_header_name,
    )
