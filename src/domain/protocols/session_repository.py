"""SessionRepository protocol (port) for platform sessions.

The platform's sessions are owned by its data layer; the defense layer only
creates them on login, revokes them on logout, and revokes all of an
account's sessions on administrative unlock.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from src.core.errors import DomainError
from src.core.result import Result


@dataclass(frozen=True, kw_only=True)
class SessionData:
    """Platform session as seen by the defense layer.

    Attributes:
        session_id: Opaque session identifier (cookie value).
        identifier: Account identifier the session belongs to.
        expires_at: When the session expires.
        ip_address: Client address at creation.
        user_agent: Client user agent at creation.
        is_revoked: Whether the session was revoked.
    """

    session_id: str
    identifier: str
    expires_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None
    is_revoked: bool = False


class SessionRepository(Protocol):
    """Platform session store.

    Implementations:
        - SessionRepository (SQLAlchemy): ``user_sessions`` table
    """

    async def create(self, session: SessionData) -> Result[None, DomainError]:
        """Persist a new session."""
        ...

    async def find_active(
        self, session_id: str, *, now: datetime
    ) -> Result[SessionData | None, DomainError]:
        """Load a session that is neither revoked nor expired."""
        ...

    async def revoke(self, session_id: str, reason: str) -> Result[bool, DomainError]:
        """Revoke one session.

        Returns:
            Success(True) if a live session was revoked.
        """
        ...

    async def revoke_all_for_identifier(
        self, identifier: str, reason: str
    ) -> Result[list[str], DomainError]:
        """Revoke every live session of an account.

        Returns:
            Success(ids of the revoked sessions).
        """
        ...
