"""Integration tests for session, security event and credential stores.

Tests cover:
- SessionRepository: create, find_active, revoke, revoke_all_for_identifier
- SecurityEventRepository: append-only insert
- DatabaseCredentialVerifier: bcrypt check against the users table
- Database.check_connection()
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from src.core.result import Success
from src.domain.enums import SecurityEventType, SecuritySeverity
from src.domain.events.security_events import SecurityEvent
from src.domain.protocols.session_repository import SessionData
from src.infrastructure.persistence.models import SecurityEventModel, UserModel
from src.infrastructure.persistence.repositories import (
    SecurityEventRepository,
    SessionRepository,
)
from src.infrastructure.security.bcrypt_password_service import BcryptPasswordService
from src.infrastructure.security.credential_verifier import DatabaseCredentialVerifier

IDENTIFIER = "alice@example.com"


@pytest.fixture
def sessions(session_factory, clock):
    return SessionRepository(session_factory, clock=clock)


def make_session(clock, session_id="sess-1", identifier=IDENTIFIER):
    return SessionData(
        session_id=session_id,
        identifier=identifier,
        expires_at=clock() + timedelta(hours=1),
        ip_address="203.0.113.7",
    )


@pytest.mark.integration
class TestSessionRepository:
    """Test SessionRepository."""

    async def test_create_and_find_active(self, sessions, clock):
        assert await sessions.create(make_session(clock)) == Success(value=None)

        found = (await sessions.find_active("sess-1", now=clock())).value

        assert found.identifier == IDENTIFIER
        assert found.ip_address == "203.0.113.7"
        assert found.is_revoked is False

    async def test_expired_session_not_active(self, sessions, clock):
        await sessions.create(make_session(clock))
        clock.advance(minutes=61)

        assert await sessions.find_active("sess-1", now=clock()) == Success(value=None)

    async def test_revoke(self, sessions, clock):
        """Revoking reports whether a live session ended."""
        await sessions.create(make_session(clock))

        first = await sessions.revoke("sess-1", "logout")
        second = await sessions.revoke("sess-1", "logout")

        assert (first, second) == (Success(value=True), Success(value=False))
        assert await sessions.find_active("sess-1", now=clock()) == Success(value=None)

    async def test_revoke_all_for_identifier(self, sessions, clock):
        """Only the account's live sessions are revoked."""
        await sessions.create(make_session(clock, "a-1"))
        await sessions.create(make_session(clock, "a-2"))
        await sessions.create(make_session(clock, "b-1", "bob@example.com"))
        await sessions.revoke("a-2", "logout")

        result = await sessions.revoke_all_for_identifier(IDENTIFIER, "account_unlocked")

        assert result == Success(value=["a-1"])
        assert (await sessions.find_active("b-1", now=clock())).value is not None


@pytest.mark.integration
class TestSecurityEventRepository:
    """Test SecurityEventRepository."""

    async def test_record_inserts_row(self, session_factory):
        repository = SecurityEventRepository(session_factory=session_factory)
        event = SecurityEvent(
            event_type=SecurityEventType.ACCOUNT_LOCKED,
            severity=SecuritySeverity.HIGH,
            identifier=IDENTIFIER,
            details={"failed_attempts": "5"},
        )

        assert await repository.record(event) == Success(value=None)

        async with session_factory() as session:
            rows = list((await session.execute(select(SecurityEventModel))).scalars())
        assert len(rows) == 1
        assert rows[0].event_type == "account_locked"
        assert rows[0].severity == "high"
        assert rows[0].details == {"failed_attempts": "5"}


@pytest.mark.integration
class TestDatabaseCredentialVerifier:
    """Test DatabaseCredentialVerifier."""

    @pytest.fixture
    def password_service(self):
        return BcryptPasswordService(cost_factor=10)

    @pytest.fixture
    async def verifier(self, session_factory, password_service, mock_logger):
        async with session_factory() as session:
            session.add(
                UserModel(
                    email=IDENTIFIER,
                    password_hash=password_service.hash_password("correct-horse"),
                )
            )
            session.add(
                UserModel(
                    email="inactive@example.com",
                    password_hash=password_service.hash_password("correct-horse"),
                    is_active=False,
                )
            )
            await session.commit()
        return DatabaseCredentialVerifier(
            session_factory=session_factory,
            password_service=password_service,
            logger=mock_logger,
        )

    async def test_correct_password(self, verifier):
        """The identifier is normalized before lookup."""
        assert await verifier.verify(" Alice@Example.com", "correct-horse") is True

    async def test_wrong_password(self, verifier):
        assert await verifier.verify(IDENTIFIER, "battery-staple") is False

    async def test_unknown_account(self, verifier):
        assert await verifier.verify("ghost@example.com", "correct-horse") is False

    async def test_inactive_account(self, verifier):
        assert await verifier.verify("inactive@example.com", "correct-horse") is False


@pytest.mark.integration
class TestDatabaseHealth:
    """Test Database.check_connection()."""

    async def test_check_connection(self, database):
        assert await database.check_connection() is True
