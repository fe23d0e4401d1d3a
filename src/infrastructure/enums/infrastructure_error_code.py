"""Error codes for failures inside guard stores and gateways.

Recorded on ``InfrastructureError.infrastructure_code`` for logs. The
``code`` a caller branches on stays a domain ``ErrorCode``.
"""

from enum import Enum


class InfrastructureErrorCode(Enum):
    """Why a store or gateway call failed."""

    # Durable store (SQLAlchemy)
    DATABASE_CONNECTION_FAILED = "database_connection_failed"
    DATABASE_TIMEOUT = "database_timeout"
    DATABASE_CONSTRAINT_VIOLATION = "database_constraint_violation"
    DATABASE_ERROR = "database_error"

    # Payment gateway
    EXTERNAL_SERVICE_ERROR = "external_service_error"
