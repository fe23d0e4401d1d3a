"""Adapter error types.

Usage:
    from src.infrastructure.errors import DatabaseError
"""

from src.infrastructure.errors.infrastructure_error import (
    DatabaseError,
    ExternalServiceError,
    InfrastructureError,
)

__all__ = [
    "DatabaseError",
    "ExternalServiceError",
    "InfrastructureError",
]
