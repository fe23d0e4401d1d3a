"""Create session handler.

Opens a platform session after AuthenticateUserHandler succeeded. The
session id is an opaque random token; CSRF tokens and idempotency scopes
are bound to it.
"""

from __future__ import annotations

import secrets
from datetime import timedelta
from typing import TYPE_CHECKING

from src.application.commands.security_commands import CreatedSession, CreateSession
from src.application.errors import ApplicationError, ApplicationErrorCode
from src.core.clock import Clock, utc_now
from src.core.constants import TOKEN_BYTES
from src.core.result import Failure, Result, Success
from src.domain.protocols.session_repository import SessionData

if TYPE_CHECKING:
    from src.domain.protocols.session_repository import SessionRepository


class CreateSessionHandler:
    """Handler for CreateSession command."""

    def __init__(
        self,
        *,
        session_repository: SessionRepository,
        session_ttl_seconds: int = 86400,
        clock: Clock = utc_now,
    ) -> None:
        self._sessions = session_repository
        self._ttl = timedelta(seconds=session_ttl_seconds)
        self._clock = clock

    async def handle(self, cmd: CreateSession) -> Result[CreatedSession, ApplicationError]:
        session = SessionData(
            session_id=secrets.token_urlsafe(TOKEN_BYTES),
            identifier=cmd.identifier,
            expires_at=self._clock() + self._ttl,
            ip_address=cmd.ip_address,
            user_agent=cmd.user_agent,
        )
        match await self._sessions.create(session):
            case Failure(error=error):
                return Failure(
                    error=ApplicationError(
                        code=ApplicationErrorCode.SERVICE_UNAVAILABLE,
                        message="Session store unavailable",
                        domain_error=error,
                    )
                )
            case _:
                return Success(
                    value=CreatedSession(
                        session_id=session.session_id,
                        identifier=session.identifier,
                        expires_at=session.expires_at,
                    )
                )
