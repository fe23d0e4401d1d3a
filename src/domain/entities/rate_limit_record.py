"""Rate limit record entity.

Pure business logic, no framework dependencies.

One record exists per ``(action, client_key)`` while the client has attempts
in an open window or an active block.
"""

from dataclasses import dataclass
from datetime import datetime

from src.domain.enums import RateLimitAction
from src.domain.value_objects.rate_limit_policy import RateLimitPolicy


@dataclass(slots=True, kw_only=True)
class RateLimitRecord:
    """Attempt counter for one client and one action.

    Business Rules:
        - ``attempts`` never exceeds ``max_attempts`` without ``blocked_until``
          being set
        - A record mid-block survives the end of its window
        - ``in_flight`` counts allowed checks not yet recorded; together with
          ``attempts`` it never exceeds ``max_attempts``
        - Evicted only once both the window and any block have elapsed

    Attributes:
        action: Action the attempts belong to.
        client_key: Client identifier (IP address, account ID).
        attempts: Attempts recorded in the current window.
        in_flight: Checks allowed but not yet recorded.
        window_start: When the current window opened.
        blocked_until: End of the active block, if any.
    """

    action: RateLimitAction
    client_key: str
    attempts: int = 0
    in_flight: int = 0
    window_start: datetime
    blocked_until: datetime | None = None

    def window_end(self, policy: RateLimitPolicy) -> datetime:
        """When the current counting window closes."""
        return self.window_start + policy.window

    def window_expired(self, now: datetime, policy: RateLimitPolicy) -> bool:
        """Whether the counting window has closed."""
        return now >= self.window_end(policy)

    def is_blocked(self, now: datetime) -> bool:
        """Whether a block is active at ``now``."""
        return self.blocked_until is not None and now < self.blocked_until

    def is_purgeable(self, now: datetime, policy: RateLimitPolicy) -> bool:
        """Whether the record may be evicted.

        Both the window and the block must have elapsed; the block controls
        availability, not the window.
        """
        return self.window_expired(now, policy) and not self.is_blocked(now)

    def remaining(self, policy: RateLimitPolicy) -> int:
        """Attempts left in the current window."""
        return max(0, policy.max_attempts - self.attempts)

    def available(self, policy: RateLimitPolicy) -> int:
        """Attempts left once in-flight checks are accounted for."""
        return max(0, policy.max_attempts - self.attempts - self.in_flight)

    def block(self, now: datetime, policy: RateLimitPolicy) -> datetime:
        """Start a block at ``now`` and return its end."""
        self.blocked_until = now + policy.block_duration
        return self.blocked_until
