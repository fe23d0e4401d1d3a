"""SecurityEventRepository - append-only writer for ``security_events``."""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from uuid_extensions import uuid7

from src.core.errors import DomainError
from src.core.result import Result, Success
from src.domain.events.security_events import SecurityEvent
from src.infrastructure.persistence.models.security_event import SecurityEventModel
from src.infrastructure.persistence.repositories.store_errors import store_failure


class SecurityEventRepository:
    """SQLAlchemy implementation of SecurityEventRepository protocol.

    Rows get time-ordered UUIDv7 ids so the table reads in insertion order.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record(self, event: SecurityEvent) -> Result[None, DomainError]:
        """Insert one event."""
        try:
            async with self._session_factory() as session:
                session.add(
                    SecurityEventModel(
                        id=uuid7(),
                        event_type=event.event_type.value,
                        severity=event.severity.value,
                        identifier=event.identifier,
                        ip_address=event.ip_address,
                        user_agent=event.user_agent,
                        details=dict(event.details),
                        occurred_at=event.occurred_at,
                    )
                )
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            return store_failure("security_event_record", e)
        return Success(value=None)
