"""LockoutRepository - SQLAlchemy implementation of LockoutRepository protocol.

Adapter for hexagonal architecture. Every mutation is a single UPDATE
statement evaluated by the database, so two serving processes recording
failures for the same account at the same instant both count.

Each operation opens its own short session from ``session_factory``; the
lockout check never joins the request's business transaction.
"""

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import Row, and_, case, insert, null, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.clock import ensure_utc
from src.core.errors import DomainError
from src.core.result import Result, Success
from src.domain.entities.lockout_record import LockoutRecord
from src.infrastructure.persistence.models.account_lockout import AccountLockoutModel
from src.infrastructure.persistence.repositories.store_errors import store_failure

_RETURNED_COLUMNS = (
    AccountLockoutModel.identifier,
    AccountLockoutModel.failed_attempts,
    AccountLockoutModel.last_failed_at,
    AccountLockoutModel.locked_until,
    AccountLockoutModel.is_active,
)


class LockoutRepository:
    """SQLAlchemy implementation of LockoutRepository protocol.

    This class does NOT inherit from the protocol (structural typing).

    Example:
        >>> repo = LockoutRepository(session_factory=database.session_factory)
        >>> result = await repo.register_failure(
        ...     "alice@example.com",
        ...     now=utc_now(),
        ...     threshold=5,
        ...     lockout_duration=timedelta(minutes=15),
        ... )
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find(self, identifier: str) -> Result[LockoutRecord | None, DomainError]:
        """Load the lockout row for ``identifier``."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(*_RETURNED_COLUMNS).where(
                        AccountLockoutModel.identifier == identifier
                    )
                )
                row = result.one_or_none()
        except (SQLAlchemyError, OSError) as e:
            return store_failure("lockout_find", e)

        return Success(value=self._to_entity(row) if row is not None else None)

    async def register_failure(
        self,
        identifier: str,
        *,
        now: datetime,
        threshold: int,
        lockout_duration: timedelta,
    ) -> Result[LockoutRecord, DomainError]:
        """Count one failure atomically, creating the row on first failure.

        Two processes may both miss the row and race on INSERT; the loser
        hits the unique constraint and re-runs the UPDATE, which then finds
        the winner's row.
        """
        locked_until = now + lockout_duration
        try:
            record = await self._increment(
                identifier, now=now, threshold=threshold, locked_until=locked_until
            )
            if record is not None:
                return Success(value=record)

            try:
                async with self._session_factory() as session:
                    await session.execute(
                        insert(AccountLockoutModel).values(
                            identifier=identifier,
                            failed_attempts=1,
                            last_failed_at=now,
                            locked_until=locked_until if threshold <= 1 else None,
                            is_active=True,
                        )
                    )
                    await session.commit()
            except IntegrityError:
                record = await self._increment(
                    identifier, now=now, threshold=threshold, locked_until=locked_until
                )
                if record is None:
                    raise
                return Success(value=record)
        except (SQLAlchemyError, OSError) as e:
            return store_failure("lockout_register_failure", e)

        return Success(
            value=LockoutRecord(
                identifier=identifier,
                failed_attempts=1,
                last_failed_at=now,
                locked_until=locked_until if threshold <= 1 else None,
            )
        )

    async def reset(self, identifier: str) -> Result[None, DomainError]:
        """Zero the counters after a successful credential check."""
        try:
            async with self._session_factory() as session:
                await session.execute(
                    update(AccountLockoutModel)
                    .where(AccountLockoutModel.identifier == identifier)
                    .values(failed_attempts=0, last_failed_at=None, locked_until=None)
                )
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            return store_failure("lockout_reset", e)
        return Success(value=None)

    async def clear(self, identifier: str) -> Result[LockoutRecord | None, DomainError]:
        """Clear counters and lock in one statement (administrative unlock)."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    update(AccountLockoutModel)
                    .where(AccountLockoutModel.identifier == identifier)
                    .values(failed_attempts=0, last_failed_at=None, locked_until=None)
                    .returning(*_RETURNED_COLUMNS)
                )
                row = result.one_or_none()
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            return store_failure("lockout_clear", e)

        return Success(value=self._to_entity(row) if row is not None else None)

    async def _increment(
        self,
        identifier: str,
        *,
        now: datetime,
        threshold: int,
        locked_until: datetime,
    ) -> LockoutRecord | None:
        lock_expired = and_(
            AccountLockoutModel.locked_until.is_not(None),
            AccountLockoutModel.locked_until <= now,
        )
        # SET expressions all see the pre-update row.
        new_count = case(
            (lock_expired, 1),
            else_=AccountLockoutModel.failed_attempts + 1,
        )
        stmt = (
            update(AccountLockoutModel)
            .where(AccountLockoutModel.identifier == identifier)
            .values(
                failed_attempts=new_count,
                last_failed_at=now,
                locked_until=case(
                    (new_count >= threshold, locked_until),
                    (lock_expired, null()),
                    else_=AccountLockoutModel.locked_until,
                ),
            )
            .returning(*_RETURNED_COLUMNS)
        )

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            row = result.one_or_none()
            await session.commit()

        return self._to_entity(row) if row is not None else None

    @staticmethod
    def _to_entity(row: Row[Any]) -> LockoutRecord:
        return LockoutRecord(
            identifier=row.identifier,
            failed_attempts=row.failed_attempts,
            last_failed_at=ensure_utc(row.last_failed_at),
            locked_until=ensure_utc(row.locked_until),
            is_active=row.is_active,
        )
