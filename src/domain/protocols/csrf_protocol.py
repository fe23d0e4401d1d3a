"""CSRF protocol (port) for session-bound token issuance and verification.

Implementations:
    - CSRFTokenService: process-local map (single instance)
"""

from collections.abc import Mapping
from typing import Protocol

from src.domain.value_objects.csrf_validation import CSRFValidation


class CSRFProtocol(Protocol):
    """Issue and verify CSRF tokens bound to session identifiers.

    All calls are synchronous and never block on I/O.
    """

    def issue(self, session_id: str) -> str:
        """Generate a token for a session, replacing any previous one."""
        ...

    def get_or_issue(self, session_id: str) -> str:
        """Return the session's live token, issuing a new one if missing or expired."""
        ...

    def verify(self, session_id: str, token: str) -> bool:
        """Constant-time check of ``token`` against the session's live token.

        Returns False (and evicts the record) once the token has expired.
        """
        ...

    def validate(
        self,
        *,
        method: str,
        path: str,
        headers: Mapping[str, str],
        session_id: str | None,
    ) -> CSRFValidation:
        """Request-level entry point.

        Safe methods and exempt paths bypass verification entirely.
        """
        ...

    def revoke(self, session_id: str) -> None:
        """Drop the session's token (explicit session termination)."""
        ...

    def sweep(self, *, batch_size: int = 500) -> int:
        """Evict expired tokens. Returns the number evicted."""
        ...
