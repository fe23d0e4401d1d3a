"""Get lockout status handler (administrative read)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.application.errors import ApplicationError, ApplicationErrorCode
from src.application.queries.lockout_queries import GetLockoutStatus
from src.core.result import Failure, Result, Success
from src.domain.entities.lockout_record import LockoutRecord, normalize_identifier

if TYPE_CHECKING:
    from src.application.services.lockout_tracker import LockoutTracker


class GetLockoutStatusHandler:
    """Handler for GetLockoutStatus query.

    An identifier that never failed yields an empty record rather than a
    not-found error.
    """

    def __init__(self, *, lockout_tracker: LockoutTracker) -> None:
        self._lockout = lockout_tracker

    async def handle(
        self, query: GetLockoutStatus
    ) -> Result[LockoutRecord, ApplicationError]:
        identifier = normalize_identifier(query.identifier)
        match await self._lockout.get_status(identifier):
            case Success(value=None):
                return Success(value=LockoutRecord(identifier=identifier))
            case Success(value=record):
                return Success(value=record)
            case Failure(error=error):
                return Failure(
                    error=ApplicationError(
                        code=ApplicationErrorCode.SERVICE_UNAVAILABLE,
                        message="Lockout store unavailable",
                        domain_error=error,
                    )
                )
