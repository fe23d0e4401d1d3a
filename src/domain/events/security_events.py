"""Security domain events.

One event type covers the whole audit trail; ``event_type`` says what
happened. Persisted to ``security_events`` by the security event repository
and mirrored to the structured log.

Severity guide:
    - LOW: routine success (login succeeded)
    - MEDIUM: single rejection (wrong password, CSRF reject)
    - HIGH: guard state change (account locked, client blocked)
    - CRITICAL: administrative override (account unlocked)
"""

from dataclasses import dataclass, field

from src.domain.enums import SecurityEventType, SecuritySeverity
from src.domain.events.base_event import DomainEvent


@dataclass(frozen=True, kw_only=True, slots=True)
class SecurityEvent(DomainEvent):
    """A security-relevant event.

    Attributes:
        event_type: What happened.
        severity: How urgent it is.
        identifier: Account identifier or client key involved.
        ip_address: Client address, when known.
        user_agent: Client user agent, when known.
        details: Extra context (never secrets).
    """

    event_type: SecurityEventType
    severity: SecuritySeverity
    identifier: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    details: dict[str, str] = field(default_factory=dict)
