"""SessionRepository - SQLAlchemy implementation of SessionRepository protocol.

Adapter for hexagonal architecture.
Maps between domain SessionData DTOs and UserSessionModel rows.

Handles the session operations the defense layer needs:
- Creation on login
- Single revocation on logout
- Bulk revocation on administrative unlock
"""

from datetime import datetime
from typing import cast

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.clock import Clock, ensure_utc, utc_now
from src.core.errors import DomainError
from src.core.result import Result, Success
from src.domain.protocols.session_repository import SessionData
from src.infrastructure.persistence.models.user_session import UserSessionModel
from src.infrastructure.persistence.repositories.store_errors import store_failure


class SessionRepository:
    """SQLAlchemy implementation of SessionRepository protocol.

    This class does NOT inherit from SessionRepository protocol
    (Protocol uses structural typing).

    Example:
        >>> repo = SessionRepository(session_factory=database.session_factory)
        >>> await repo.revoke_all_for_identifier("alice@example.com", "admin_unlock")
        Success(value=['...'])
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        clock: Clock = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def create(self, session: SessionData) -> Result[None, DomainError]:
        """Persist a new session."""
        try:
            async with self._session_factory() as db_session:
                db_session.add(
                    UserSessionModel(
                        session_id=session.session_id,
                        identifier=session.identifier,
                        ip_address=session.ip_address,
                        user_agent=session.user_agent,
                        expires_at=session.expires_at,
                        is_revoked=session.is_revoked,
                    )
                )
                await db_session.commit()
        except (SQLAlchemyError, OSError) as e:
            return store_failure("session_create", e)
        return Success(value=None)

    async def find_active(
        self, session_id: str, *, now: datetime
    ) -> Result[SessionData | None, DomainError]:
        """Load a live session by its opaque id."""
        stmt = select(UserSessionModel).where(
            UserSessionModel.session_id == session_id,
            UserSessionModel.is_revoked.is_(False),
            UserSessionModel.expires_at > now,
        )
        try:
            async with self._session_factory() as db_session:
                model = (await db_session.execute(stmt)).scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            return store_failure("session_find_active", e)

        if model is None:
            return Success(value=None)
        return Success(value=self._to_dto(model))

    async def revoke(self, session_id: str, reason: str) -> Result[bool, DomainError]:
        """Revoke one session (logout)."""
        stmt = (
            update(UserSessionModel)
            .where(
                UserSessionModel.session_id == session_id,
                UserSessionModel.is_revoked.is_(False),
            )
            .values(is_revoked=True, revoked_at=self._clock(), revoked_reason=reason)
            .returning(UserSessionModel.session_id)
        )
        try:
            async with self._session_factory() as db_session:
                revoked = (await db_session.execute(stmt)).scalar_one_or_none()
                await db_session.commit()
        except (SQLAlchemyError, OSError) as e:
            return store_failure("session_revoke", e)
        return Success(value=revoked is not None)

    async def revoke_all_for_identifier(
        self, identifier: str, reason: str
    ) -> Result[list[str], DomainError]:
        """Revoke every live session of an account (administrative unlock)."""
        stmt = (
            update(UserSessionModel)
            .where(
                UserSessionModel.identifier == identifier,
                UserSessionModel.is_revoked.is_(False),
            )
            .values(is_revoked=True, revoked_at=self._clock(), revoked_reason=reason)
            .returning(UserSessionModel.session_id)
        )
        try:
            async with self._session_factory() as db_session:
                revoked = list((await db_session.execute(stmt)).scalars())
                await db_session.commit()
        except (SQLAlchemyError, OSError) as e:
            return store_failure("session_revoke_all", e)
        return Success(value=revoked)

    @staticmethod
    def _to_dto(model: UserSessionModel) -> SessionData:
        return SessionData(
            session_id=model.session_id,
            identifier=model.identifier,
            expires_at=cast(datetime, ensure_utc(model.expires_at)),
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            is_revoked=model.is_revoked,
        )
