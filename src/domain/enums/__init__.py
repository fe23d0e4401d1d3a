"""Domain enumerations.

Usage:
    from src.domain.enums import RateLimitAction, SecurityEventType
"""

from src.domain.enums.csrf_failure_reason import CSRFFailureReason
from src.domain.enums.rate_limit_action import RateLimitAction
from src.domain.enums.security_event_type import SecurityEventType, SecuritySeverity

__all__ = [
    "CSRFFailureReason",
    "RateLimitAction",
    "SecurityEventType",
    "SecuritySeverity",
]
