"""Authenticate user handler.

Single responsibility: decide whether one login attempt succeeds.
Does NOT create sessions (CQRS separation).

Flow:
1. Normalize the identifier
2. Reject immediately if the account is locked (credentials never checked,
   lock never extended)
3. Verify credentials through the external verifier
4. Record the failure (may lock the account) or reset the counters
5. Record a security event
6. Return Success(AuthenticatedUser) or Failure(reason)

The reasons are internal. The presentation layer answers every failure
with the same 401 body, so a locked account is indistinguishable from a
wrong password.

Architecture:
- Application layer ONLY imports from domain layer and application services
- The credential verifier is injected via protocol
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.application.commands.security_commands import (
    AuthenticatedUser,
    AuthenticateUser,
)
from src.core.result import Failure, Result, Success
from src.domain.entities.lockout_record import normalize_identifier
from src.domain.enums import SecurityEventType, SecuritySeverity
from src.domain.events.security_events import SecurityEvent

if TYPE_CHECKING:
    from src.application.services.lockout_tracker import LockoutTracker
    from src.application.services.security_event_recorder import (
        SecurityEventRecorder,
    )
    from src.domain.protocols.credential_verifier_protocol import (
        CredentialVerifierProtocol,
    )


class AuthenticationFailure:
    """Authentication failure reasons (internal only)."""

    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"


class AuthenticateUserHandler:
    """Handler for AuthenticateUser command."""

    def __init__(
        self,
        *,
        lockout_tracker: LockoutTracker,
        credential_verifier: CredentialVerifierProtocol,
        events: SecurityEventRecorder,
    ) -> None:
        self._lockout = lockout_tracker
        self._verifier = credential_verifier
        self._events = events

    async def handle(self, cmd: AuthenticateUser) -> Result[AuthenticatedUser, str]:
        """Handle one login attempt.

        Returns:
            Success(AuthenticatedUser) when credentials are correct and the
            account is not locked; Failure(AuthenticationFailure.*) otherwise.
        """
        identifier = normalize_identifier(cmd.identifier)
        if not identifier:
            return Failure(error=AuthenticationFailure.INVALID_CREDENTIALS)

        if await self._lockout.is_locked(identifier):
            await self._record(
                cmd,
                identifier,
                SecurityEventType.LOGIN_REJECTED_LOCKED,
                SecuritySeverity.MEDIUM,
            )
            return Failure(error=AuthenticationFailure.ACCOUNT_LOCKED)

        if not await self._verifier.verify(identifier, cmd.password):
            # Store failures are logged by the tracker; the attempt is
            # rejected either way.
            await self._lockout.record_failure(identifier)
            await self._record(
                cmd, identifier, SecurityEventType.LOGIN_FAILED, SecuritySeverity.MEDIUM
            )
            return Failure(error=AuthenticationFailure.INVALID_CREDENTIALS)

        await self._lockout.record_success(identifier)
        await self._record(
            cmd, identifier, SecurityEventType.LOGIN_SUCCEEDED, SecuritySeverity.LOW
        )
        return Success(value=AuthenticatedUser(identifier=identifier))

    async def _record(
        self,
        cmd: AuthenticateUser,
        identifier: str,
        event_type: SecurityEventType,
        severity: SecuritySeverity,
    ) -> None:
        await self._events.record(
            SecurityEvent(
                event_type=event_type,
                severity=severity,
                identifier=identifier,
                ip_address=cmd.ip_address,
                user_agent=cmd.user_agent,
            )
        )
