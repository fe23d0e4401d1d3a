"""Container module - Centralized dependency injection.

Re-exports every factory so callers import from one place:

    from src.core.container import get_logger, get_rate_limiter, ...

Organized into modules by concern:
- infrastructure: logging, database, redis, rate limiter, CSRF, passwords,
  payments
- repositories: durable stores
- services: lockout tracker, idempotency guard, security events, scheduler
- handlers: command/query handler factories
"""

from src.core.container.handlers import (
    get_authenticate_user_handler,
    get_create_session_handler,
    get_get_lockout_status_handler,
    get_revoke_session_handler,
    get_unlock_account_handler,
)
from src.core.container.infrastructure import (
    get_credential_verifier,
    get_csrf_service,
    get_database,
    get_logger,
    get_password_service,
    get_payment_gateway,
    get_rate_limiter,
    get_redis,
)
from src.core.container.repositories import (
    get_idempotency_repository,
    get_lockout_repository,
    get_security_event_repository,
    get_session_repository,
)
from src.core.container.services import (
    get_idempotency_guard,
    get_lockout_tracker,
    get_maintenance_scheduler,
    get_security_event_recorder,
)

__all__ = [
    # Infrastructure
    "get_credential_verifier",
    "get_csrf_service",
    "get_database",
    "get_logger",
    "get_password_service",
    "get_payment_gateway",
    "get_rate_limiter",
    "get_redis",
    # Repositories
    "get_idempotency_repository",
    "get_lockout_repository",
    "get_security_event_repository",
    "get_session_repository",
    # Services
    "get_idempotency_guard",
    "get_lockout_tracker",
    "get_maintenance_scheduler",
    "get_security_event_recorder",
    # Handlers
    "get_authenticate_user_handler",
    "get_create_session_handler",
    "get_get_lockout_status_handler",
    "get_revoke_session_handler",
    "get_unlock_account_handler",
]
