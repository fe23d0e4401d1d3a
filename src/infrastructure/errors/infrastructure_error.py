"""Errors reported by adapters around the durable store and payment gateway.

Adapters catch driver exceptions at their boundary and return these inside
``Failure``. They are ``DomainError`` dataclasses, never raised, so the
lockout tracker and idempotency guard can apply their fail-closed or
fail-open policy by matching on the result.
"""

from dataclasses import dataclass
from typing import Any

from src.core.errors import DomainError
from src.infrastructure.enums import InfrastructureErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class InfrastructureError(DomainError):
    """Base adapter error.

    Attributes:
        infrastructure_code: Driver-level reason, for logs only.
        details: Operation name and exception type.
    """

    infrastructure_code: InfrastructureErrorCode | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DatabaseError(InfrastructureError):
    """Durable store call failed (connection, timeout, constraint)."""


@dataclass(frozen=True, slots=True, kw_only=True)
class ExternalServiceError(InfrastructureError):
    """Payment gateway call failed.

    Attributes:
        service_name: Gateway name, e.g. ``"stub"``.
    """

    service_name: str
