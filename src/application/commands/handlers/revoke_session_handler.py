"""Revoke session handler (logout).

Revokes the platform session and drops its CSRF token so a stolen token
stops verifying at the same moment the session ends.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.application.commands.security_commands import RevokeSession
from src.application.errors import ApplicationError, ApplicationErrorCode
from src.core.result import Failure, Result, Success
from src.domain.enums import SecurityEventType, SecuritySeverity
from src.domain.events.security_events import SecurityEvent

if TYPE_CHECKING:
    from src.application.services.security_event_recorder import (
        SecurityEventRecorder,
    )
    from src.domain.protocols.csrf_protocol import CSRFProtocol
    from src.domain.protocols.session_repository import SessionRepository

LOGOUT_REASON = "logout"


class RevokeSessionHandler:
    """Handler for RevokeSession command."""

    def __init__(
        self,
        *,
        session_repository: SessionRepository,
        csrf: CSRFProtocol,
        events: SecurityEventRecorder,
    ) -> None:
        self._sessions = session_repository
        self._csrf = csrf
        self._events = events

    async def handle(self, cmd: RevokeSession) -> Result[bool, ApplicationError]:
        """Revoke the session.

        Returns:
            Success(True) if a live session was revoked, Success(False) if it
            was already gone.
        """
        self._csrf.revoke(cmd.session_id)

        match await self._sessions.revoke(cmd.session_id, LOGOUT_REASON):
            case Failure(error=error):
                return Failure(
                    error=ApplicationError(
                        code=ApplicationErrorCode.SERVICE_UNAVAILABLE,
                        message="Session store unavailable",
                        domain_error=error,
                    )
                )
            case Success(value=revoked):
                if revoked:
                    await self._events.record(
                        SecurityEvent(
                            event_type=SecurityEventType.SESSION_REVOKED,
                            severity=SecuritySeverity.LOW,
                            ip_address=cmd.ip_address,
                            details={"reason": LOGOUT_REASON},
                        )
                    )
                return Success(value=revoked)
