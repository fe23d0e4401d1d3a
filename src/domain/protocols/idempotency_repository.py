"""IdempotencyRepository protocol (port) for stored first responses.

Inserts MUST rely on the store's uniqueness constraint on
``(key, caller_scope)``; a second insert reports "already exists" instead
of failing.
"""

from datetime import datetime
from typing import Protocol

from src.core.errors import DomainError
from src.core.result import Result
from src.domain.entities.idempotency_record import IdempotencyRecord


class IdempotencyRepository(Protocol):
    """Durable idempotency store.

    Implementations:
        - IdempotencyRepository (SQLAlchemy): ``idempotency_records`` table
    """

    async def find(
        self,
        key: str,
        caller_scope: str,
        *,
        now: datetime,
    ) -> Result[IdempotencyRecord | None, DomainError]:
        """Load a live (unexpired) record.

        Returns:
            Success(record or None), Failure if the store is unavailable.
        """
        ...

    async def insert(self, record: IdempotencyRecord) -> Result[bool, DomainError]:
        """Insert a record, relying on the uniqueness constraint.

        Returns:
            Success(True) if inserted, Success(False) if a record for the
            same ``(key, caller_scope)`` already exists, Failure if the store
            is unavailable.
        """
        ...

    async def delete_expired(
        self,
        *,
        now: datetime,
        batch_size: int,
    ) -> Result[int, DomainError]:
        """Delete up to ``batch_size`` records past ``expires_at``.

        Returns:
            Success(number of rows deleted).
        """
        ...
