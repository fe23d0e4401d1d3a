"""Result types for railway-oriented programming.

Every guard in the request-defense layer reports expected outcomes (limit
hit, lockout active, invalid token) as values instead of raising. Store
failures travel the same way so each caller can apply its own fail-open or
fail-closed policy.

Usage:
    def parse_attempts(raw: str) -> Result[int, str]:
        if not raw.isdigit():
            return Failure(error="attempts must be numeric")
        return Success(value=int(raw))

    match parse_attempts("3"):
        case Success(value=attempts):
            print(f"Attempts: {attempts}")
        case Failure(error=error):
            print(f"Error: {error}")
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Represents a successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Represents a failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


type Result[T, E] = Success[T] | Failure[E]
