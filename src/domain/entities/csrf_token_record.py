"""CSRF token record entity.

Pure business logic, no framework dependencies.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, kw_only=True)
class CSRFTokenRecord:
    """The live CSRF token of one session.

    Attributes:
        session_id: Session the token is bound to.
        token: Opaque random token.
        expires_at: When the token stops verifying.
    """

    session_id: str
    token: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Expired once ``now`` is strictly past ``expires_at``."""
        return now > self.expires_at
