"""Admin lockouts resource router.

Endpoints:
    GET    /api/v1/admin/lockouts/{identifier} - Lockout status
    DELETE /api/v1/admin/lockouts/{identifier} - Unlock account

Both require ``X-Admin-Key``. Unlocking also revokes every session of the
account and is recorded as a critical security event.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request
from fastapi.responses import JSONResponse

from src.application.commands import UnlockAccount
from src.application.commands.handlers import UnlockAccountHandler
from src.application.queries import GetLockoutStatus
from src.application.queries.handlers import GetLockoutStatusHandler
from src.core.clock import utc_now
from src.core.container import (
    get_get_lockout_status_handler,
    get_unlock_account_handler,
)
from src.core.result import Failure, Success
from src.domain.entities.lockout_record import LockoutRecord, normalize_identifier
from src.presentation.routers.api.middleware.admin_dependencies import (
    require_admin_key,
)
from src.presentation.routers.api.middleware.request_identity import client_key
from src.presentation.routers.api.v1.errors import ErrorResponseBuilder, ProblemDetails
from src.schemas.security_schemas import LockoutStatusResponse

router = APIRouter(
    prefix="/admin/lockouts",
    tags=["Admin"],
    responses={403: {"description": "Admin key missing or wrong", "model": ProblemDetails}},
)

IdentifierPath = Annotated[str, Path(min_length=1, max_length=255)]


def _to_response(record: LockoutRecord) -> LockoutStatusResponse:
    return LockoutStatusResponse(
        identifier=record.identifier,
        failed_attempts=record.failed_attempts,
        is_locked=record.is_locked(utc_now()),
        locked_until=record.locked_until,
        last_failed_at=record.last_failed_at,
    )


@router.get("/{identifier}", response_model=LockoutStatusResponse)
async def get_lockout_status(
    request: Request,
    identifier: IdentifierPath,
    _admin: str = Depends(require_admin_key),
    handler: GetLockoutStatusHandler = Depends(get_get_lockout_status_handler),
) -> LockoutStatusResponse | JSONResponse:
    match await handler.handle(GetLockoutStatus(identifier=identifier)):
        case Success(value=record):
            return _to_response(record)
        case Failure(error=error):
            return ErrorResponseBuilder.from_application_error(error, request)


@router.delete("/{identifier}", response_model=LockoutStatusResponse)
async def unlock_account(
    request: Request,
    identifier: IdentifierPath,
    performed_by: str = Depends(require_admin_key),
    handler: UnlockAccountHandler = Depends(get_unlock_account_handler),
) -> LockoutStatusResponse | JSONResponse:
    """Clear the lockout and revoke the account's sessions."""
    match await handler.handle(
        UnlockAccount(
            identifier=identifier,
            performed_by=performed_by,
            ip_address=client_key(request),
        )
    ):
        case Success(value=record):
            return _to_response(
                record or LockoutRecord(identifier=normalize_identifier(identifier))
            )
        case Failure(error=error):
            return ErrorResponseBuilder.from_application_error(error, request)
