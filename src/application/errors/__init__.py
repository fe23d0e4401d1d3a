"""Application layer errors.

Usage:
    from src.application.errors import ApplicationError, ApplicationErrorCode
"""

from src.application.errors.application_error import (
    ApplicationError,
    ApplicationErrorCode,
)

__all__ = [
    "ApplicationError",
    "ApplicationErrorCode",
]
