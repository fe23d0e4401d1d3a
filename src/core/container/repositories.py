"""Repository dependency factories.

Repositories are app-scoped: each holds the shared session factory and opens
one short session per operation, so concurrent requests never share a
session.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.container.infrastructure import get_database

if TYPE_CHECKING:
    from src.infrastructure.persistence.repositories import (
        IdempotencyRepository,
        LockoutRepository,
        SecurityEventRepository,
        SessionRepository,
    )


@lru_cache()
def get_lockout_repository() -> "LockoutRepository":
    from src.infrastructure.persistence.repositories import LockoutRepository

    return LockoutRepository(session_factory=get_database().session_factory)


@lru_cache()
def get_idempotency_repository() -> "IdempotencyRepository":
    from src.infrastructure.persistence.repositories import IdempotencyRepository

    return IdempotencyRepository(session_factory=get_database().session_factory)


@lru_cache()
def get_session_repository() -> "SessionRepository":
    from src.infrastructure.persistence.repositories import SessionRepository

    return SessionRepository(session_factory=get_database().session_factory)


@lru_cache()
def get_security_event_repository() -> "SecurityEventRepository":
    from src.infrastructure.persistence.repositories import SecurityEventRepository

    return SecurityEventRepository(session_factory=get_database().session_factory)
