"""Idempotency record entity.

Pure business logic, no framework dependencies.

Identity is ``(key, caller_scope)``: the scope disambiguates tenant and
principal so one caller can never replay another caller's response.
"""

from dataclasses import dataclass
from datetime import datetime

from src.domain.value_objects.idempotency import IdempotentResponse


@dataclass(slots=True, kw_only=True)
class IdempotencyRecord:
    """Stored first response for one idempotency key.

    Business Rules:
        - At most one record per ``(key, caller_scope)``
        - Read-only after creation until ``expires_at``

    Attributes:
        key: Client-supplied or server-derived idempotency key.
        caller_scope: Tenant/principal scope of the caller.
        request_method: HTTP method of the first request.
        request_path: Path of the first request.
        request_params: Fingerprint of the first request body.
        response: The captured response.
        created_at: When the record was stored.
        expires_at: When the record stops being replayable.
    """

    key: str
    caller_scope: str
    request_method: str
    request_path: str
    request_params: str
    response: IdempotentResponse
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Whether the record is past its replay window."""
        return now >= self.expires_at
