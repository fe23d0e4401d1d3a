"""Mapping from SQLAlchemy/driver exceptions to DatabaseError results.

Every durable guard store reports failures the same way so the services
above them can apply one fail-closed or fail-open rule.
"""

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError

from src.core.enums import ErrorCode
from src.core.result import Failure
from src.infrastructure.enums import InfrastructureErrorCode
from src.infrastructure.errors import DatabaseError


def store_failure(operation: str, error: Exception) -> Failure[DatabaseError]:
    """Wrap an exception raised by the durable store.

    Args:
        operation: Repository operation name (for logs).
        error: Original exception.

    Returns:
        Failure(DatabaseError) with code DURABLE_STORE_UNAVAILABLE.
    """
    if isinstance(error, TimeoutError):
        infrastructure_code = InfrastructureErrorCode.DATABASE_TIMEOUT
    elif isinstance(error, (OperationalError, InterfaceError, OSError)):
        infrastructure_code = InfrastructureErrorCode.DATABASE_CONNECTION_FAILED
    elif isinstance(error, IntegrityError):
        infrastructure_code = InfrastructureErrorCode.DATABASE_CONSTRAINT_VIOLATION
    else:
        infrastructure_code = InfrastructureErrorCode.DATABASE_ERROR

    return Failure(
        error=DatabaseError(
            code=ErrorCode.DURABLE_STORE_UNAVAILABLE,
            infrastructure_code=infrastructure_code,
            message=f"Durable store {operation} failed: {error}",
            details={"operation": operation, "error_type": type(error).__name__},
        )
    )
