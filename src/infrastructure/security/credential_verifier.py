"""Database credential verifier (adapter).

Implements CredentialVerifierProtocol against the ``users`` table. Bcrypt
runs in a worker thread so a slow hash never blocks the event loop.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.entities.lockout_record import normalize_identifier
from src.infrastructure.persistence.models.user import UserModel
from src.infrastructure.security.bcrypt_password_service import BcryptPasswordService

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol


class DatabaseCredentialVerifier:
    """Check an email/password pair against stored bcrypt hashes.

    Unknown and inactive accounts still pay for one bcrypt verification so
    timing does not reveal which accounts exist.

    Store exceptions propagate: the login handler treats them as a failed
    authentication attempt it cannot evaluate.
    """

    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        password_service: BcryptPasswordService,
        logger: LoggerProtocol,
    ) -> None:
        self._session_factory = session_factory
        self._password_service = password_service
        self._logger = logger

    async def verify(self, identifier: str, password: str) -> bool:
        email = normalize_identifier(identifier)
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserModel.password_hash, UserModel.is_active).where(
                    UserModel.email == email
                )
            )
            row = result.one_or_none()

        if row is None:
            await asyncio.to_thread(self._password_service.burn_verification, password)
            self._logger.debug("Credential check for unknown account")
            return False

        matches = await asyncio.to_thread(
            self._password_service.verify_password, password, row.password_hash
        )
        return matches and row.is_active
