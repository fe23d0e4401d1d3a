"""Application layer error types.

Handlers wrap store and gateway failures in ApplicationError so routers
can pick a status code without inspecting domain or adapter errors.
"""

from dataclasses import dataclass
from enum import Enum

from src.core.errors.domain_error import DomainError


class ApplicationErrorCode(Enum):
    """Application-level error codes.

    Examples:
        >>> error = ApplicationError(
        ...     code=ApplicationErrorCode.SERVICE_UNAVAILABLE,
        ...     message="Lockout store unavailable",
        ... )
    """

    SERVICE_UNAVAILABLE = "service_unavailable"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


@dataclass(frozen=True, slots=True, kw_only=True)
class ApplicationError:
    """Application layer error.

    Attributes:
        code: Application error code.
        message: Internal message (never shown to clients verbatim).
        domain_error: Underlying store or gateway error, if any.
    """

    code: ApplicationErrorCode
    message: str
    domain_error: DomainError | None = None
