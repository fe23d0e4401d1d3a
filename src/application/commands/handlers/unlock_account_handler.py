"""Unlock account handler (administrative).

Delegates to LockoutTracker.unlock, which clears the counters, revokes the
account's sessions and records the unlock as a security event.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.application.commands.security_commands import UnlockAccount
from src.application.errors import ApplicationError, ApplicationErrorCode
from src.core.result import Failure, Result, Success
from src.domain.entities.lockout_record import LockoutRecord

if TYPE_CHECKING:
    from src.application.services.lockout_tracker import LockoutTracker


class UnlockAccountHandler:
    """Handler for UnlockAccount command."""

    def __init__(self, *, lockout_tracker: LockoutTracker) -> None:
        self._lockout = lockout_tracker

    async def handle(
        self, cmd: UnlockAccount
    ) -> Result[LockoutRecord | None, ApplicationError]:
        match await self._lockout.unlock(
            cmd.identifier,
            performed_by=cmd.performed_by,
            ip_address=cmd.ip_address,
        ):
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
