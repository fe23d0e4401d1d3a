"""Domain entities for business logic.

Pure business logic entities with no framework dependencies.
"""

from src.domain.entities.csrf_token_record import CSRFTokenRecord
from src.domain.entities.idempotency_record import IdempotencyRecord
from src.domain.entities.lockout_record import LockoutRecord, normalize_identifier
from src.domain.entities.offender_record import OffenderRecord
from src.domain.entities.rate_limit_record import RateLimitRecord

__all__ = [
    "CSRFTokenRecord",
    "IdempotencyRecord",
    "LockoutRecord",
    "OffenderRecord",
    "RateLimitRecord",
    "normalize_identifier",
]
