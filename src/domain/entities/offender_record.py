"""Repeat offender entity.

Pure business logic, no framework dependencies.

Tracks how many per-action blocks one client has tripped recently. Enough of
them within the escalation window earn the client a block that covers every
endpoint, not just the action it was abusing.
"""

from dataclasses import dataclass
from datetime import datetime

from src.domain.value_objects.rate_limit_policy import EscalationPolicy, RateLimitPolicy


@dataclass(slots=True, kw_only=True)
class OffenderRecord:
    """Offense history for one client key.

    Business Rules:
        - Offenses older than the escalation window are forgotten, unless a
          client-wide block is still running
        - Reaching the threshold blocks the client; each later offense on
          the same record pushes the block end out again

    Attributes:
        client_key: Client identifier (usually an IP address).
        offenses: Per-action blocks tripped since ``first_offense_at``.
        first_offense_at: When the oldest remembered offense happened.
        blocked_until: End of the client-wide block, if any.
    """

    client_key: str
    offenses: int = 0
    first_offense_at: datetime
    blocked_until: datetime | None = None

    def is_blocked(self, now: datetime) -> bool:
        """Whether the client-wide block is active at ``now``."""
        return self.blocked_until is not None and now < self.blocked_until

    def is_stale(self, now: datetime, escalation: EscalationPolicy) -> bool:
        """Whether the record may be forgotten."""
        return (
            now >= self.first_offense_at + escalation.window
            and not self.is_blocked(now)
        )

    def add_offense(
        self,
        now: datetime,
        policy: RateLimitPolicy,
        escalation: EscalationPolicy,
    ) -> datetime | None:
        """Count one offense and escalate once the threshold is reached.

        Args:
            now: Time of the offense.
            policy: Policy of the action whose block was tripped.
            escalation: Escalation rules.

        Returns:
            The new client-wide block end when this offense escalated,
            otherwise None.
        """
        self.offenses += 1
        if self.offenses < escalation.threshold:
            return None
        until = now + escalation.block_duration(policy)
        if self.blocked_until is None or until > self.blocked_until:
            self.blocked_until = until
        return self.blocked_until
