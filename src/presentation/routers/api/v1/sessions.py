"""Sessions resource router.

Endpoints:
    POST   /api/v1/sessions         - Create session (login)
    DELETE /api/v1/sessions/current - Delete current session (logout)

Login runs behind the login rate limit (middleware) and the account lockout
(AuthenticateUserHandler). Every authentication failure, including a locked
account, gets the same 401 body.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response

from src.application.commands import AuthenticateUser, CreateSession, RevokeSession
from src.application.commands.handlers import (
    AuthenticateUserHandler,
    CreateSessionHandler,
    RevokeSessionHandler,
)
from src.core.config import settings
from src.core.container import (
    get_authenticate_user_handler,
    get_create_session_handler,
    get_csrf_service,
    get_revoke_session_handler,
)
from src.core.result import Failure, Success
from src.domain.protocols import CSRFProtocol
from src.presentation.routers.api.middleware.request_identity import (
    client_key,
    session_id_from,
)
from src.presentation.routers.api.v1.errors import ErrorResponseBuilder, ProblemDetails
from src.schemas.security_schemas import SessionCreateRequest, SessionCreateResponse

INVALID_CREDENTIALS_DETAIL = "Invalid credentials"

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SessionCreateResponse,
    responses={
        401: {"description": "Authentication failed", "model": ProblemDetails},
        429: {"description": "Too many attempts", "model": ProblemDetails},
    },
    summary="Create session",
    description="Authenticate and open a session; returns the session's CSRF token.",
)
async def create_session(
    request: Request,
    response: Response,
    data: SessionCreateRequest,
    auth_handler: AuthenticateUserHandler = Depends(get_authenticate_user_handler),
    session_handler: CreateSessionHandler = Depends(get_create_session_handler),
    csrf: CSRFProtocol = Depends(get_csrf_service),
) -> SessionCreateResponse | JSONResponse:
    """Create a new session (login).

    POST /api/v1/sessions → 201 Created

    Orchestrates 2 handlers:
    1. AuthenticateUser - lockout check + credential verification
    2. CreateSession - persist the platform session

    then issues the session's CSRF token and sets the session cookie.
    """
    ip_address = client_key(request)
    user_agent = request.headers.get("user-agent")

    match await auth_handler.handle(
        AuthenticateUser(
            identifier=data.identifier,
            password=data.password,
            ip_address=ip_address,
            user_agent=user_agent,
        )
    ):
        case Failure():
            return ErrorResponseBuilder.from_status(
                request=request,
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=INVALID_CREDENTIALS_DETAIL,
            )
        case Success(value=authenticated):
            pass

    match await session_handler.handle(
        CreateSession(
            identifier=authenticated.identifier,
            ip_address=ip_address,
            user_agent=user_agent,
        )
    ):
        case Failure(error=error):
            return ErrorResponseBuilder.from_application_error(error, request)
        case Success(value=session):
            pass

    csrf_token = csrf.issue(session.session_id)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=not settings.is_development and not settings.is_testing,
        samesite="lax",
    )
    return SessionCreateResponse(
        session_id=session.session_id,
        csrf_token=csrf_token,
        expires_at=session.expires_at,
    )


@router.delete(
    "/current",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"description": "No session", "model": ProblemDetails},
        403: {"description": "CSRF validation failed", "model": ProblemDetails},
    },
    summary="Delete current session",
    description="Log out: revoke the session and its CSRF token.",
)
async def delete_current_session(
    request: Request,
    handler: RevokeSessionHandler = Depends(get_revoke_session_handler),
) -> Response:
    """Delete the current session (logout).

    DELETE /api/v1/sessions/current → 204 No Content
    """
    session_id = session_id_from(request)
    if session_id is None:
        return ErrorResponseBuilder.from_status(
            request=request,
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    match await handler.handle(
        RevokeSession(session_id=session_id, ip_address=client_key(request))
    ):
        case Failure(error=error):
            return ErrorResponseBuilder.from_application_error(error, request)
        case Success():
            response = Response(status_code=status.HTTP_204_NO_CONTENT)
            response.delete_cookie(settings.session_cookie_name)
            return response
