"""Domain errors package.

Expected rejections (limit hit, account locked, CSRF failure) are values
on the guards' results, not errors. These types cover store failures.

Usage:
    from src.domain.errors import LockoutError, RateLimitError
"""

from src.domain.errors.lockout_error import LockoutError
from src.domain.errors.rate_limit_error import RateLimitError

__all__ = [
    "LockoutError",
    "RateLimitError",
]
