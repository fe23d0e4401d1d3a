"""Security commands (CQRS write operations).

Commands represent intent to change state. All commands are immutable
(frozen=True) and use keyword-only arguments (kw_only=True).

Pattern:
- Commands are data containers (no logic)
- Handlers execute business logic and return Result types
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, kw_only=True)
class AuthenticateUser:
    """Verify credentials for one login attempt.

    Consults the lockout tracker before the credential verifier. Does NOT
    create sessions (CQRS separation).

    Attributes:
        identifier: Account identifier (email, any case).
        password: Plaintext password (never logged).
        ip_address: Client address for the audit trail.
        user_agent: Client user agent for the audit trail.
    """

    identifier: str
    password: str
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True, kw_only=True)
class AuthenticatedUser:
    """Response from successful authentication (a DTO, not a command).

    Attributes:
        identifier: Normalized account identifier.
    """

    identifier: str


@dataclass(frozen=True, kw_only=True)
class CreateSession:
    """Open a platform session after successful authentication.

    Attributes:
        identifier: Normalized account identifier.
        ip_address: Client address at login.
        user_agent: Client user agent at login.
    """

    identifier: str
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True, kw_only=True)
class CreatedSession:
    """Response from session creation.

    Attributes:
        session_id: Opaque session identifier (cookie value).
        identifier: Account the session belongs to.
        expires_at: Session expiry.
    """

    session_id: str
    identifier: str
    expires_at: datetime


@dataclass(frozen=True, kw_only=True)
class RevokeSession:
    """End one session (logout).

    Attributes:
        session_id: Session to revoke.
        ip_address: Client address for the audit trail.
    """

    session_id: str
    ip_address: str | None = None


@dataclass(frozen=True, kw_only=True)
class UnlockAccount:
    """Administrative unlock of a locked account.

    Attributes:
        identifier: Account to unlock.
        performed_by: Operator label for the audit trail.
        ip_address: Operator address.
    """

    identifier: str
    performed_by: str
    ip_address: str | None = None
