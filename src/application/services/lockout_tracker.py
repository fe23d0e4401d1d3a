"""Account lockout tracker (application service).

Counts consecutive failed credential checks per account in the durable
store and locks the account for a fixed duration once the threshold is
reached. Counters survive restarts and are shared by every serving process.

Failure policy (fail closed):
    Every store call is bounded by ``store_timeout_seconds``. When the store
    is unreachable or slow, ``is_locked`` answers True and the mutating
    calls return Failure(LockoutError(DURABLE_STORE_UNAVAILABLE)). An
    attacker cannot brute-force an account by knocking the store over.

Usage:
    tracker = get_lockout_tracker()
    if await tracker.is_locked("alice@example.com"):
        ...  # reject without checking credentials
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from datetime import timedelta
from typing import TYPE_CHECKING, TypeVar

from src.core.clock import Clock, utc_now
from src.core.enums import ErrorCode
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities.lockout_record import LockoutRecord, normalize_identifier
from src.domain.enums import SecurityEventType, SecuritySeverity
from src.domain.errors import LockoutError
from src.domain.events.security_events import SecurityEvent

if TYPE_CHECKING:
    from src.application.services.security_event_recorder import (
        SecurityEventRecorder,
    )
    from src.domain.protocols.lockout_repository import LockoutRepository
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.domain.protocols.session_repository import SessionRepository

T = TypeVar("T")

UNLOCK_SESSION_REASON = "account_unlocked"


class LockoutTracker:
    """Durable failed-login counter with temporal lockout.

    Args:
        repository: Durable lockout store.
        session_repository: Platform sessions (revoked on unlock).
        events: Security event recorder.
        logger: Structured logger.
        threshold: Failures that trigger a lock.
        lockout_duration_seconds: Lock length.
        store_timeout_seconds: Upper bound on each store call.
        clock: Time source (injectable for tests).
    """

    def __init__(
        self,
        *,
        repository: LockoutRepository,
        session_repository: SessionRepository,
        events: SecurityEventRecorder,
        logger: LoggerProtocol,
        threshold: int = 5,
        lockout_duration_seconds: int = 900,
        store_timeout_seconds: float = 2.0,
        clock: Clock = utc_now,
    ) -> None:
        if threshold <= 0:
            raise ValueError(f"threshold must be positive, got {threshold}")
        self._repository = repository
        self._sessions = session_repository
        self._events = events
        self._logger = logger
        self._threshold = threshold
        self._duration = timedelta(seconds=lockout_duration_seconds)
        self._timeout = store_timeout_seconds
        self._clock = clock

    async def record_failure(
        self, identifier: str
    ) -> Result[LockoutRecord, LockoutError]:
        """Count one failed credential check; lock at the threshold."""
        identifier = normalize_identifier(identifier)
        now = self._clock()
        result = await self._bounded(
            "record_failure",
            identifier,
            self._repository.register_failure(
                identifier,
                now=now,
                threshold=self._threshold,
                lockout_duration=self._duration,
            ),
        )
        match result:
            case Success(value=record):
                if record.failed_attempts == self._threshold and record.is_locked(now):
                    await self._events.record(
                        SecurityEvent(
                            event_type=SecurityEventType.ACCOUNT_LOCKED,
                            severity=SecuritySeverity.HIGH,
                            identifier=identifier,
                            details={
                                "failed_attempts": str(record.failed_attempts),
                                "locked_until": record.locked_until.isoformat()
                                if record.locked_until
                                else "",
                            },
                        )
                    )
                return Success(value=record)
            case Failure(error=error):
                return Failure(error=error)

    async def record_success(self, identifier: str) -> Result[None, LockoutError]:
        """Reset counters after a successful credential check."""
        identifier = normalize_identifier(identifier)
        result = await self._bounded(
            "record_success", identifier, self._repository.reset(identifier)
        )
        match result:
            case Success():
                return Success(value=None)
            case Failure(error=error):
                return Failure(error=error)

    async def is_locked(self, identifier: str) -> bool:
        """Whether authentication must be rejected; True if the store is down."""
        identifier = normalize_identifier(identifier)
        result = await self._bounded(
            "is_locked", identifier, self._repository.find(identifier)
        )
        match result:
            case Success(value=None):
                return False
            case Success(value=record):
                return record.is_locked(self._clock())
            case _:
                return True

    async def get_status(
        self, identifier: str
    ) -> Result[LockoutRecord | None, LockoutError]:
        """Current lockout record (None if the account never failed)."""
        identifier = normalize_identifier(identifier)
        return await self._bounded(
            "get_status", identifier, self._repository.find(identifier)
        )

    async def unlock(
        self,
        identifier: str,
        *,
        performed_by: str,
        ip_address: str | None = None,
    ) -> Result[LockoutRecord | None, LockoutError]:
        """Administrative unlock: clear counters and revoke live sessions.

        Args:
            identifier: Account to unlock.
            performed_by: Operator responsible (audit trail).
            ip_address: Operator address (audit trail).

        Returns:
            Success(cleared record, or None if the account had no record).
        """
        identifier = normalize_identifier(identifier)
        result = await self._bounded(
            "unlock", identifier, self._repository.clear(identifier)
        )
        if isinstance(result, Failure):
            return result

        revoked: list[str] = []
        match await self._bounded(
            "revoke_sessions",
            identifier,
            self._sessions.revoke_all_for_identifier(identifier, UNLOCK_SESSION_REASON),
        ):
            case Success(value=session_ids):
                revoked = session_ids
            case Failure(error=error):
                # Counters are already cleared; report the partial unlock.
                return Failure(error=error)

        self._logger.warning(
            "Account unlocked by administrator",
            identifier=identifier,
            performed_by=performed_by,
            ip_address=ip_address,
            sessions_revoked=len(revoked),
        )
        await self._events.record(
            SecurityEvent(
                event_type=SecurityEventType.ACCOUNT_UNLOCKED,
                severity=SecuritySeverity.CRITICAL,
                identifier=identifier,
                ip_address=ip_address,
                details={
                    "performed_by": performed_by,
                    "sessions_revoked": str(len(revoked)),
                },
            )
        )
        return result

    async def _bounded(
        self,
        operation: str,
        identifier: str,
        call: Awaitable[Result[T, DomainError]],
    ) -> Result[T, LockoutError]:
        """Await a store call under the timeout and map failures to LockoutError."""
        try:
            result = await asyncio.wait_for(call, timeout=self._timeout)
        except TimeoutError:
            self._logger.error(
                "Lockout store timed out, failing closed",
                operation=operation,
                identifier=identifier,
                timeout_seconds=self._timeout,
            )
            return Failure(
                error=LockoutError(
                    code=ErrorCode.DURABLE_STORE_UNAVAILABLE,
                    message=f"Lockout store timed out during {operation}",
                    details={"operation": operation},
                )
            )

        match result:
            case Success(value=value):
                return Success(value=value)
            case Failure(error=error):
                self._logger.error(
                    "Lockout store unavailable, failing closed",
                    operation=operation,
                    identifier=identifier,
                    error_code=error.code.value,
                    error_message=error.message,
                )
                return Failure(
                    error=LockoutError(
                        code=ErrorCode.DURABLE_STORE_UNAVAILABLE,
                        message=f"Lockout store unavailable during {operation}",
                        details={"operation": operation},
                    )
                )
