"""Lockout queries (CQRS read operations)."""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class GetLockoutStatus:
    """Read the lockout state of one account (administrative).

    Attributes:
        identifier: Account identifier (any case).
    """

    identifier: str
