"""Database models for the persistence layer.

Importing this package registers every table on ``BaseModel.metadata``
(used by ``Database.create_all`` and Alembic autogenerate).

Models Organization:
    - account_lockout.py: Durable failed-login counters
    - idempotency_record.py: Stored first responses (write-once)
    - user_session.py: Platform sessions
    - user.py: Credential store
    - security_event.py: Security audit trail (append-only)

Note:
    Domain entities (dataclasses) live in src/domain/entities/ and are
    mapped to/from these models in the repository layer.
"""

from src.infrastructure.persistence.base import BaseModel
from src.infrastructure.persistence.models.account_lockout import AccountLockoutModel
from src.infrastructure.persistence.models.idempotency_record import (
    IdempotencyRecordModel,
)
from src.infrastructure.persistence.models.security_event import SecurityEventModel
from src.infrastructure.persistence.models.user import UserModel
from src.infrastructure.persistence.models.user_session import UserSessionModel

__all__ = [
    "AccountLockoutModel",
    "BaseModel",
    "IdempotencyRecordModel",
    "SecurityEventModel",
    "UserModel",
    "UserSessionModel",
]
