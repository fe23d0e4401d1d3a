"""SecurityEventRepository protocol (port) for the security audit trail.

Recording is best effort: a failed write is logged by the caller and never
changes the outcome of the request that produced the event.
"""

from typing import Protocol

from src.core.errors import DomainError
from src.core.result import Result
from src.domain.events.security_events import SecurityEvent


class SecurityEventRepository(Protocol):
    """Append-only security event store."""

    async def record(self, event: SecurityEvent) -> Result[None, DomainError]:
        """Persist one security event."""
        ...
