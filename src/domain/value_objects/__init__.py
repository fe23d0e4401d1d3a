"""Domain value objects with validation.

Immutable value objects that enforce business constraints.
"""

from src.domain.value_objects.csrf_validation import CSRFValidation
from src.domain.value_objects.idempotency import IdempotencyOutcome, IdempotentResponse
from src.domain.value_objects.rate_limit_policy import (
    EscalationPolicy,
    RateLimitDecision,
    RateLimitPolicy,
)

__all__ = [
    "CSRFValidation",
    "EscalationPolicy",
    "IdempotencyOutcome",
    "IdempotentResponse",
    "RateLimitDecision",
    "RateLimitPolicy",
]
