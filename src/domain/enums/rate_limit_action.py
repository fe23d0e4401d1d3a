"""Rate limit action enumeration.

Every rate-limited operation belongs to exactly one action, and each action
owns one static policy (max attempts, window, block duration).

Usage:
    from src.domain.enums import RateLimitAction

    decision = await rate_limiter.check(
        client_key="203.0.113.7",
        action=RateLimitAction.LOGIN,
    )
"""

from enum import Enum


class RateLimitAction(str, Enum):
    """Actions a rate limit policy can be attached to.

    String Enum:
        Inherits from str for easy serialization (Redis keys, log fields).
    """

    LOGIN = "login"
    """Credential checks. A recorded success clears the client's record."""

    REGISTER = "register"
    """Account registration."""

    PASSWORD_RESET = "password_reset"
    """Password reset requests."""

    PAYMENT = "payment"
    """Payment submissions."""

    ADMIN = "admin"
    """Administrative operations (lockout status and unlock)."""

    API = "api"
    """Any other mutating API request."""

    @property
    def resets_on_success(self) -> bool:
        """Whether a recorded success deletes the record outright.

        Only login has this policy: a successful authentication is a fresh
        start for the client. Every other action keeps counting.
        """
        return self is RateLimitAction.LOGIN
