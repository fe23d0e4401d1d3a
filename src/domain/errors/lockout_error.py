"""Account lockout error types."""

from dataclasses import dataclass

from src.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class LockoutError(DomainError):
    """Lockout store failure (``ErrorCode.DURABLE_STORE_UNAVAILABLE``).

    The tracker fails closed on this error: the account is treated as
    locked until the store answers again.
    """

    pass
