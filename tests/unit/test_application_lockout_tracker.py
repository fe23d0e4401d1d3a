"""Unit tests for LockoutTracker.

Tests cover:
- Identifier normalization before every store call
- Lock event emitted exactly when the threshold is reached
- Fail-closed behavior on store Failure and on timeout
- Administrative unlock (sessions revoked, critical event)

Architecture:
- Repositories mocked with AsyncMock
- Clock injected, no real time
"""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from src.application.services.lockout_tracker import (
    UNLOCK_SESSION_REASON,
    LockoutTracker,
)
from src.core.enums import ErrorCode
from src.core.errors import DomainError
from src.core.result import Failure, Success
from src.domain.entities.lockout_record import LockoutRecord
from src.domain.enums import SecurityEventType, SecuritySeverity
from src.domain.errors import LockoutError

STORE_DOWN = Failure(
    error=DomainError(code=ErrorCode.DURABLE_STORE_UNAVAILABLE, message="down")
)


@pytest.fixture
def repository():
    return AsyncMock()


@pytest.fixture
def session_repository():
    repo = AsyncMock()
    repo.revoke_all_for_identifier.return_value = Success(value=["s1", "s2"])
    return repo


@pytest.fixture
def events():
    return AsyncMock()


@pytest.fixture
def tracker(repository, session_repository, events, mock_logger, clock):
    return LockoutTracker(
        repository=repository,
        session_repository=session_repository,
        events=events,
        logger=mock_logger,
        threshold=3,
        lockout_duration_seconds=900,
        store_timeout_seconds=0.05,
        clock=clock,
    )


@pytest.mark.unit
class TestLockoutTrackerRecordFailure:
    """Test record_failure()."""

    async def test_passes_normalized_identifier_and_policy(
        self, tracker, repository, clock
    ):
        """Identifier is trimmed and lower-cased; policy comes from config."""
        repository.register_failure.return_value = Success(
            value=LockoutRecord(identifier="alice@example.com", failed_attempts=1)
        )

        await tracker.record_failure("  Alice@Example.COM ")

        repository.register_failure.assert_awaited_once_with(
            "alice@example.com",
            now=clock(),
            threshold=3,
            lockout_duration=timedelta(seconds=900),
        )

    async def test_emits_lock_event_at_threshold(self, tracker, repository, events, clock):
        """Reaching the threshold records one HIGH account_locked event."""
        repository.register_failure.return_value = Success(
            value=LockoutRecord(
                identifier="alice@example.com",
                failed_attempts=3,
                locked_until=clock() + timedelta(seconds=900),
            )
        )

        result = await tracker.record_failure("alice@example.com")

        assert isinstance(result, Success)
        event = events.record.await_args.args[0]
        assert event.event_type == SecurityEventType.ACCOUNT_LOCKED
        assert event.severity == SecuritySeverity.HIGH
        assert event.details["failed_attempts"] == "3"

    async def test_no_event_below_threshold(self, tracker, repository, events):
        """Failures below the threshold are silent."""
        repository.register_failure.return_value = Success(
            value=LockoutRecord(identifier="alice@example.com", failed_attempts=2)
        )

        await tracker.record_failure("alice@example.com")

        events.record.assert_not_awaited()

    async def test_store_failure_maps_to_lockout_error(self, tracker, repository):
        """Store errors become DURABLE_STORE_UNAVAILABLE."""
        repository.register_failure.return_value = STORE_DOWN

        result = await tracker.record_failure("alice@example.com")

        assert isinstance(result, Failure)
        assert isinstance(result.error, LockoutError)
        assert result.error.code == ErrorCode.DURABLE_STORE_UNAVAILABLE


@pytest.mark.unit
class TestLockoutTrackerIsLocked:
    """Test is_locked() including fail-closed."""

    async def test_unknown_account_is_not_locked(self, tracker, repository):
        """No record means no lock."""
        repository.find.return_value = Success(value=None)

        assert await tracker.is_locked("alice@example.com") is False

    async def test_future_lock_is_locked(self, tracker, repository, clock):
        """locked_until in the future locks the account."""
        repository.find.return_value = Success(
            value=LockoutRecord(
                identifier="alice@example.com",
                failed_attempts=3,
                locked_until=clock() + timedelta(seconds=1),
            )
        )

        assert await tracker.is_locked("alice@example.com") is True

    async def test_expired_lock_is_not_locked(self, tracker, repository, clock):
        """Lockout is temporal."""
        repository.find.return_value = Success(
            value=LockoutRecord(
                identifier="alice@example.com",
                failed_attempts=3,
                locked_until=clock() - timedelta(seconds=1),
            )
        )

        assert await tracker.is_locked("alice@example.com") is False

    async def test_store_failure_fails_closed(self, tracker, repository, mock_logger):
        """An unreachable store locks everyone out."""
        repository.find.return_value = STORE_DOWN

        assert await tracker.is_locked("alice@example.com") is True
        mock_logger.error.assert_called_once()

    async def test_store_timeout_fails_closed(self, tracker, repository, mock_logger):
        """A store slower than the timeout locks everyone out."""

        async def slow_find(identifier):
            await asyncio.sleep(1)
            return Success(value=None)

        repository.find.side_effect = slow_find

        assert await tracker.is_locked("alice@example.com") is True
        assert "timed out" in mock_logger.error.call_args.args[0]


@pytest.mark.unit
class TestLockoutTrackerSuccessAndStatus:
    """Test record_success() and get_status()."""

    async def test_record_success_resets(self, tracker, repository):
        """Success resets the normalized identifier."""
        repository.reset.return_value = Success(value=None)

        result = await tracker.record_success("ALICE@example.com")

        assert isinstance(result, Success)
        repository.reset.assert_awaited_once_with("alice@example.com")

    async def test_record_success_reports_store_failure(self, tracker, repository):
        """Reset failures are surfaced."""
        repository.reset.return_value = STORE_DOWN

        assert isinstance(await tracker.record_success("a@b.c"), Failure)

    async def test_get_status_returns_record(self, tracker, repository):
        """Status passes the stored record through."""
        record = LockoutRecord(identifier="alice@example.com", failed_attempts=2)
        repository.find.return_value = Success(value=record)

        result = await tracker.get_status("Alice@example.com")

        assert result == Success(value=record)


@pytest.mark.unit
class TestLockoutTrackerUnlock:
    """Test administrative unlock()."""

    async def test_unlock_clears_and_revokes_sessions(
        self, tracker, repository, session_repository, events
    ):
        """Counters cleared, sessions revoked, CRITICAL event recorded."""
        cleared = LockoutRecord(identifier="alice@example.com")
        repository.clear.return_value = Success(value=cleared)

        result = await tracker.unlock(
            "Alice@Example.com", performed_by="admin_api_key", ip_address="10.0.0.1"
        )

        assert result == Success(value=cleared)
        repository.clear.assert_awaited_once_with("alice@example.com")
        session_repository.revoke_all_for_identifier.assert_awaited_once_with(
            "alice@example.com", UNLOCK_SESSION_REASON
        )
        event = events.record.await_args.args[0]
        assert event.event_type == SecurityEventType.ACCOUNT_UNLOCKED
        assert event.severity == SecuritySeverity.CRITICAL
        assert event.details == {"performed_by": "admin_api_key", "sessions_revoked": "2"}

    async def test_unlock_unknown_account(self, tracker, repository):
        """Unlocking an account with no record succeeds with None."""
        repository.clear.return_value = Success(value=None)

        assert await tracker.unlock("ghost@example.com", performed_by="op") == Success(
            value=None
        )

    async def test_unlock_store_failure(
        self, tracker, repository, session_repository, events
    ):
        """Nothing else happens when clearing fails."""
        repository.clear.return_value = STORE_DOWN

        result = await tracker.unlock("alice@example.com", performed_by="op")

        assert isinstance(result, Failure)
        session_repository.revoke_all_for_identifier.assert_not_awaited()
        events.record.assert_not_awaited()

    async def test_unlock_reports_session_revocation_failure(
        self, tracker, repository, session_repository
    ):
        """A partial unlock is reported as a failure."""
        repository.clear.return_value = Success(value=None)
        session_repository.revoke_all_for_identifier.return_value = STORE_DOWN

        result = await tracker.unlock("alice@example.com", performed_by="op")

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.DURABLE_STORE_UNAVAILABLE


@pytest.mark.unit
class TestLockoutTrackerConfiguration:
    """Test constructor validation."""

    def test_rejects_non_positive_threshold(
        self, repository, session_repository, events, mock_logger
    ):
        with pytest.raises(ValueError):
            LockoutTracker(
                repository=repository,
                session_repository=session_repository,
                events=events,
                logger=mock_logger,
                threshold=0,
            )
