"""Repository implementations (adapters) for the durable guard stores.

Each repository takes an ``async_sessionmaker`` and opens one short
session per operation. Store exceptions become ``Failure(DatabaseError)``.
"""

from src.infrastructure.persistence.repositories.idempotency_repository import (
    IdempotencyRepository,
)
from src.infrastructure.persistence.repositories.lockout_repository import (
    LockoutRepository,
)
from src.infrastructure.persistence.repositories.security_event_repository import (
    SecurityEventRepository,
)
from src.infrastructure.persistence.repositories.session_repository import (
    SessionRepository,
)

__all__ = [
    "IdempotencyRepository",
    "LockoutRepository",
    "SecurityEventRepository",
    "SessionRepository",
]
