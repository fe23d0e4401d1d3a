"""Domain-level error codes (machine-readable).

Carried on ``DomainError.code`` inside ``Failure``. Expected rejections
(limit hit, account locked, CSRF failure) are not errors and have no code.
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes.

    Codes follow the ENTITY_ACTION_REASON naming convention.
    """

    # Rate limiter backend
    RATE_LIMIT_RECORD_FAILED = "rate_limit_record_failed"

    # Durable store (lockouts, idempotency records, sessions, events)
    DURABLE_STORE_UNAVAILABLE = "durable_store_unavailable"

    # Payment gateway
    PAYMENT_FAILED = "payment_failed"
