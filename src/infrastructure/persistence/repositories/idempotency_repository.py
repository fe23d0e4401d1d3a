"""IdempotencyRepository - SQLAlchemy implementation of IdempotencyRepository protocol.

The ``(key, caller_scope)`` unique constraint decides which response wins;
this adapter never checks before inserting.
"""

from datetime import datetime
from typing import Any, cast

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.clock import ensure_utc
from src.core.errors import DomainError
from src.core.result import Result, Success
from src.domain.entities.idempotency_record import IdempotencyRecord
from src.domain.value_objects.idempotency import IdempotentResponse
from src.infrastructure.persistence.models.idempotency_record import (
    IdempotencyRecordModel,
)
from src.infrastructure.persistence.repositories.store_errors import store_failure


class IdempotencyRepository:
    """SQLAlchemy implementation of IdempotencyRepository protocol.

    Example:
        >>> repo = IdempotencyRepository(session_factory=database.session_factory)
        >>> await repo.insert(record)
        Success(value=True)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find(
        self,
        key: str,
        caller_scope: str,
        *,
        now: datetime,
    ) -> Result[IdempotencyRecord | None, DomainError]:
        """Load the unexpired record for ``(key, caller_scope)``."""
        stmt = select(IdempotencyRecordModel).where(
            IdempotencyRecordModel.key == key,
            IdempotencyRecordModel.caller_scope == caller_scope,
            IdempotencyRecordModel.expires_at > now,
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                model = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            return store_failure("idempotency_find", e)

        return Success(value=self._to_entity(model) if model is not None else None)

    async def insert(self, record: IdempotencyRecord) -> Result[bool, DomainError]:
        """Insert; Success(False) when another writer got there first.

        An expired row still holding the slot (not yet swept) is replaced.
        """
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(IdempotencyRecordModel).where(
                        IdempotencyRecordModel.key == record.key,
                        IdempotencyRecordModel.caller_scope == record.caller_scope,
                        IdempotencyRecordModel.expires_at <= record.created_at,
                    )
                )
                session.add(self._to_model(record))
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    return Success(value=False)
        except (SQLAlchemyError, OSError) as e:
            return store_failure("idempotency_insert", e)

        return Success(value=True)

    async def delete_expired(
        self,
        *,
        now: datetime,
        batch_size: int,
    ) -> Result[int, DomainError]:
        """Delete one batch of expired records."""
        expired_ids = (
            select(IdempotencyRecordModel.id)
            .where(IdempotencyRecordModel.expires_at <= now)
            .limit(batch_size)
        )
        try:
            async with self._session_factory() as session:
                ids = list((await session.execute(expired_ids)).scalars())
                if not ids:
                    return Success(value=0)
                result = await session.execute(
                    delete(IdempotencyRecordModel).where(
                        IdempotencyRecordModel.id.in_(ids)
                    )
                )
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            return store_failure("idempotency_delete_expired", e)

        return Success(value=cast(Any, result).rowcount or 0)

    @staticmethod
    def _to_model(record: IdempotencyRecord) -> IdempotencyRecordModel:
        return IdempotencyRecordModel(
            key=record.key,
            caller_scope=record.caller_scope,
            request_method=record.request_method,
            request_path=record.request_path,
            request_params=record.request_params,
            response_status=record.response.status_code,
            response_body=record.response.body,
            response_content_type=record.response.content_type,
            created_at=record.created_at,
            expires_at=record.expires_at,
        )

    @staticmethod
    def _to_entity(model: IdempotencyRecordModel) -> IdempotencyRecord:
        return IdempotencyRecord(
            key=model.key,
            caller_scope=model.caller_scope,
            request_method=model.request_method,
            request_path=model.request_path,
            request_params=model.request_params,
            response=IdempotentResponse(
                status_code=model.response_status,
                body=bytes(model.response_body),
                content_type=model.response_content_type,
            ),
            created_at=cast(datetime, ensure_utc(model.created_at)),
            expires_at=cast(datetime, ensure_utc(model.expires_at)),
        )
