"""Rate limit policy and decision value objects.

A policy is the static configuration attached to one ``RateLimitAction``;
a decision is the answer to a single ``check`` call.

Usage:
    from src.domain.value_objects import RateLimitPolicy

    login_policy = RateLimitPolicy(
        max_attempts=5,
        window_seconds=900,
        block_duration_seconds=1800,
    )
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitPolicy:
    """Rate limit policy configuration (value object).

    Window With Escalating Block:
        - Attempts are counted from the first attempt of a window
        - Recording the ``max_attempts``-th attempt blocks the client for
          ``block_duration_seconds``
        - The block, not the window, controls when the client may retry

    Attributes:
        max_attempts: Attempts allowed per window before the client is blocked.
        window_seconds: Length of the counting window.
        block_duration_seconds: How long a block lasts once triggered.
        whitelist: Client keys that always pass (e.g. loopback for admin).

    Raises:
        ValueError: If any numeric field is not positive.
    """

    max_attempts: int
    """Attempts allowed per window.

    Typical values:
        - 3-5 for credential checks
        - 10 for payment submissions
        - 100 for generic API traffic
    """

    window_seconds: int
    """Length of the counting window in seconds."""

    block_duration_seconds: int
    """Block length in seconds, applied when the window budget is spent."""

    whitelist: frozenset[str] = field(default_factory=frozenset)
    """Client keys exempt from this policy."""

    def __post_init__(self) -> None:
        """Validate policy configuration after initialization.

        Raises:
            ValueError: If any numeric field is invalid.
        """
        if self.max_attempts <= 0:
            raise ValueError(f"max_attempts must be positive, got {self.max_attempts}")
        if self.window_seconds <= 0:
            raise ValueError(
                f"window_seconds must be positive, got {self.window_seconds}"
            )
        if self.block_duration_seconds <= 0:
            raise ValueError(
                "block_duration_seconds must be positive, "
                f"got {self.block_duration_seconds}"
            )

    @property
    def window(self) -> timedelta:
        """Counting window as a timedelta."""
        return timedelta(seconds=self.window_seconds)

    @property
    def block_duration(self) -> timedelta:
        """Block duration as a timedelta."""
        return timedelta(seconds=self.block_duration_seconds)

    @property
    def ttl_seconds(self) -> int:
        """Lifetime of a shared-store record: long enough for window and block."""
        return max(self.window_seconds, self.block_duration_seconds)

    def is_whitelisted(self, client_key: str) -> bool:
        """Check whether a client key bypasses this policy.

        Args:
            client_key: Client identifier (usually an IP address).

        Returns:
            bool: True if the client is exempt.
        """
        return client_key in self.whitelist


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitDecision:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request may proceed.
        remaining_attempts: Attempts left in the current window.
        reset_at: When the current window ends.
        limit: Policy maximum (for X-RateLimit-Limit).
        blocked_until: End of the active block, if any.
    """

    allowed: bool
    remaining_attempts: int
    reset_at: datetime
    limit: int
    blocked_until: datetime | None = None

    def retry_after_seconds(self, now: datetime) -> int:
        """Seconds a rejected client should wait (Retry-After header).

        Uses ``blocked_until`` when blocked, otherwise the window end.
        Never less than one second.

        Args:
            now: Current time.

        Returns:
            int: Whole seconds, rounded up.
        """
        until = self.blocked_until or self.reset_at
        return max(1, math.ceil((until - now).total_seconds()))


@dataclass(frozen=True, slots=True, kw_only=True)
class EscalationPolicy:
    """Client-wide block for repeat offenders.

    Every per-action block a client trips is one offense. Once a client
    collects ``threshold`` offenses within ``window_seconds`` it is blocked
    from every endpoint for the tripping policy's block duration times
    ``multiplier``. Further offenses while on record extend the block.

    Attributes:
        threshold: Offenses that trigger the client-wide block.
        multiplier: Factor applied to the tripping policy's block duration.
        window_seconds: How long offenses are remembered.

    Raises:
        ValueError: If any field is not positive.
    """

    threshold: int = 3
    multiplier: int = 8
    window_seconds: int = 86400

    def __post_init__(self) -> None:
        for name in ("threshold", "multiplier", "window_seconds"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

    @property
    def window(self) -> timedelta:
        """Offense memory as a timedelta."""
        return timedelta(seconds=self.window_seconds)

    def block_duration(self, policy: RateLimitPolicy) -> timedelta:
        """Client-wide block length for an offense against ``policy``."""
        return policy.block_duration * self.multiplier
