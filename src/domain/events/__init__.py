"""Domain events module.

Usage:
    >>> from src.domain.events import SecurityEvent
    >>> event = SecurityEvent(
    ...     event_type=SecurityEventType.ACCOUNT_UNLOCKED,
    ...     severity=SecuritySeverity.CRITICAL,
    ...     identifier="alice@example.com",
    ... )
"""

from src.domain.events.base_event import DomainEvent
from src.domain.events.security_events import SecurityEvent

__all__ = [
    "DomainEvent",
    "SecurityEvent",
]
