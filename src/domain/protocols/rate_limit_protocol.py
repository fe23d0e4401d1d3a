"""Rate limit protocol (port) for sliding-window rate limiting with blocks.

Following hexagonal architecture:
- Domain defines the PORT (this protocol)
- Infrastructure provides ADAPTERS (InMemoryRateLimiter, RedisRateLimiter)
- Presentation middleware uses the protocol via the container

Usage:
    from src.domain.protocols import RateLimitProtocol

    result = await rate_limiter.check(
        client_key="203.0.113.7",
        action=RateLimitAction.LOGIN,
    )
    match result:
        case Success(value=decision) if not decision.allowed:
            ...  # 429 with Retry-After from decision.blocked_until
"""

from datetime import datetime
from typing import Protocol

from src.core.result import Result
from src.domain.enums import RateLimitAction
from src.domain.errors import RateLimitError
from src.domain.value_objects.rate_limit_policy import RateLimitDecision


class RateLimitProtocol(Protocol):
    """Protocol for rate limiting systems.

    Implementations:
        - InMemoryRateLimiter: process-local map (default, single instance)
        - RedisRateLimiter: Lua script over Redis (shared across instances)

    Fail-Open Design:
        Infrastructure errors must yield Success(allowed=True). Rate limit
        failures should NEVER cause denial of service.
    """

    async def check(
        self,
        *,
        client_key: str,
        action: RateLimitAction,
    ) -> Result[RateLimitDecision, RateLimitError]:
        """Decide whether the client may attempt ``action`` now.

        Purges an expired record first (window AND block elapsed). An allowed
        check reserves one attempt until the matching ``record``, so
        concurrent requests can never spend more than the policy maximum.

        Args:
            client_key: Client identifier (IP address, account ID).
            action: Action being attempted.

        Returns:
            Success(RateLimitDecision); Failure only for severe errors.
        """
        ...

    async def record(
        self,
        *,
        client_key: str,
        action: RateLimitAction,
        success: bool,
    ) -> Result[None, RateLimitError]:
        """Record the outcome of an attempt.

        A success for LOGIN deletes the client's record. Every other outcome
        counts one attempt and releases the reservation taken by ``check``.
        The attempt that reaches the policy maximum starts the block.

        Args:
            client_key: Client identifier.
            action: Action that was attempted.
            success: Whether the attempt succeeded.

        Returns:
            Success(None), or Failure(RateLimitError) if the store failed.
        """
        ...

    async def blocked_until(
        self, *, client_key: str
    ) -> Result[datetime | None, RateLimitError]:
        """End of the client-wide repeat offender block.

        Every per-action block a client trips counts as one offense; enough
        offenses within the escalation window block the client on every
        endpoint for a multiple of the tripping block.

        Args:
            client_key: Client identifier.

        Returns:
            Success(block end) while blocked, Success(None) otherwise.
        """
        ...

    async def sweep(self, *, batch_size: int = 500) -> int:
        """Evict records whose window and block have both elapsed.

        Args:
            batch_size: Keys examined per batch.

        Returns:
            Number of records evicted.
        """
        ...
