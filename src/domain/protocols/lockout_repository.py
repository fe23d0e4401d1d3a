"""LockoutRepository protocol (port) for durable account lockout state.

Every mutating operation MUST be a single atomic statement in the store
(increment-and-compare-threshold, clear). Application-level
read-modify-write is race-prone across serving processes.

Implementations translate store exceptions into ``Failure`` so the tracker
can apply its fail-closed policy.
"""

from datetime import datetime, timedelta
from typing import Protocol

from src.core.errors import DomainError
from src.core.result import Result
from src.domain.entities.lockout_record import LockoutRecord


class LockoutRepository(Protocol):
    """Durable lockout store.

    Implementations:
        - LockoutRepository (SQLAlchemy): ``account_lockouts`` table
    """

    async def find(self, identifier: str) -> Result[LockoutRecord | None, DomainError]:
        """Load the lockout record for an identifier.

        Args:
            identifier: Normalized account identifier.

        Returns:
            Success(record or None), Failure if the store is unavailable.
        """
        ...

    async def register_failure(
        self,
        identifier: str,
        *,
        now: datetime,
        threshold: int,
        lockout_duration: timedelta,
    ) -> Result[LockoutRecord, DomainError]:
        """Atomically count one failed credential check.

        Increments ``failed_attempts``, stamps ``last_failed_at`` and sets
        ``locked_until = now + lockout_duration`` once the new count reaches
        ``threshold``. A failure arriving after an expired lock restarts the
        count at one.

        Returns:
            Success(updated record), Failure if the store is unavailable.
        """
        ...

    async def reset(self, identifier: str) -> Result[None, DomainError]:
        """Reset counters after a successful credential check."""
        ...

    async def clear(self, identifier: str) -> Result[LockoutRecord | None, DomainError]:
        """Clear counters and lock in one atomic update (administrative unlock).

        Returns:
            Success(cleared record, or None if the identifier has no record).
        """
        ...
