"""Account lockout record entity.

Pure business logic, no framework dependencies.

Mirrors one row of the durable ``account_lockouts`` table. Mutations happen
in the store through atomic statements; this entity is the read model the
tracker reasons about.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, kw_only=True)
class LockoutRecord:
    """Failed-authentication state for one account identifier.

    Business Rules:
        - If ``locked_until`` is in the future, authentication is rejected
          regardless of credential correctness
        - Lockout is temporal: reaching the threshold never touches
          ``is_active``
        - An administrative unlock clears counters and lock together

    Attributes:
        identifier: Normalized account identifier (lower-cased email).
        failed_attempts: Consecutive failed credential checks.
        last_failed_at: Time of the most recent failure.
        locked_until: End of the current lockout, if any.
        is_active: Account activation flag (not managed by lockout).

    Example:
        >>> record = LockoutRecord(identifier="alice@example.com")
        >>> record.is_locked(datetime.now(UTC))
        False
    """

    identifier: str
    failed_attempts: int = 0
    last_failed_at: datetime | None = None
    locked_until: datetime | None = None
    is_active: bool = True

    def is_locked(self, now: datetime) -> bool:
        """Check whether the account is locked at ``now``.

        Args:
            now: Current time (timezone-aware).

        Returns:
            True if ``locked_until`` is set and strictly in the future.
        """
        return self.locked_until is not None and self.locked_until > now


def normalize_identifier(identifier: str) -> str:
    """Canonical form of an account identifier (trimmed, lower-cased)."""
    return identifier.strip().lower()
