"""Security event enumerations.

Types and severities of the append-only security audit trail written by the
request-defense layer.
"""

from enum import Enum


class SecurityEventType(str, Enum):
    """Security-relevant things that happened."""

    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGIN_REJECTED_LOCKED = "login_rejected_locked"
    ACCOUNT_LOCKED = "account_locked"
    ACCOUNT_UNLOCKED = "account_unlocked"
    RATE_LIMIT_BLOCKED = "rate_limit_blocked"
    CSRF_REJECTED = "csrf_rejected"
    SESSION_REVOKED = "session_revoked"


class SecuritySeverity(str, Enum):
    """Severity levels for security events."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
