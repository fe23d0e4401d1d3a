"""Rate limit error types.

Usage:
    from src.domain.errors import RateLimitError
    from src.core.enums import ErrorCode
    from src.core.result import Failure

    return Failure(error=RateLimitError(
        code=ErrorCode.RATE_LIMIT_RECORD_FAILED,
        message="Failed to record rate limit attempt: Redis connection lost",
    ))
"""

from dataclasses import dataclass

from src.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitError(DomainError):
    """Rate limit system failure.

    A DENIED check is NOT an error: it is a successful operation that returns
    ``allowed=False``. This type covers actual store failures.

    Design:
        Rate limiting fails open. Adapters return Success(allowed=True) on
        store errors and only surface this error from operations where the
        caller needs to know (recording failures, misconfiguration).
    """

    pass

