"""Integration tests for LockoutRepository.

Tests cover:
- First failure creates the row
- Counting up to the threshold locks the account
- A failure after an expired lock starts a fresh count
- reset() and clear() zero counters and lock

Architecture:
- Real SQLAlchemy against in-memory SQLite (aiosqlite)
"""

from datetime import timedelta

import pytest

from src.core.result import Success
from src.infrastructure.persistence.repositories import LockoutRepository

IDENTIFIER = "alice@example.com"
LOCKOUT = timedelta(minutes=15)


@pytest.fixture
def repository(session_factory):
    return LockoutRepository(session_factory=session_factory)


async def fail(repository, now, threshold=3):
    result = await repository.register_failure(
        IDENTIFIER, now=now, threshold=threshold, lockout_duration=LOCKOUT
    )
    assert isinstance(result, Success)
    return result.value


@pytest.mark.integration
class TestLockoutRepositoryRegisterFailure:
    """Test register_failure()."""

    async def test_first_failure_creates_row(self, repository, clock):
        record = await fail(repository, clock())

        assert record.failed_attempts == 1
        assert record.locked_until is None
        found = await repository.find(IDENTIFIER)
        assert found.value.failed_attempts == 1
        assert found.value.last_failed_at == clock()

    async def test_threshold_locks_account(self, repository, clock):
        """The failure that reaches the threshold sets locked_until."""
        await fail(repository, clock())
        await fail(repository, clock())
        record = await fail(repository, clock())

        assert record.failed_attempts == 3
        assert record.locked_until == clock() + LOCKOUT
        assert record.is_locked(clock())

    async def test_threshold_of_one_locks_immediately(self, repository, clock):
        record = await fail(repository, clock(), threshold=1)

        assert record.is_locked(clock())

    async def test_failure_after_expired_lock_restarts_count(self, repository, clock):
        """An expired lock does not carry its count forward."""
        for _ in range(3):
            await fail(repository, clock())
        clock.advance(minutes=16)

        record = await fail(repository, clock())

        assert record.failed_attempts == 1
        assert record.locked_until is None


@pytest.mark.integration
class TestLockoutRepositoryResetAndClear:
    """Test reset(), clear() and find()."""

    async def test_find_unknown(self, repository):
        assert await repository.find("ghost@example.com") == Success(value=None)

    async def test_reset_zeroes_counters(self, repository, clock):
        await fail(repository, clock())
        await fail(repository, clock())

        assert await repository.reset(IDENTIFIER) == Success(value=None)

        found = (await repository.find(IDENTIFIER)).value
        assert found.failed_attempts == 0
        assert found.last_failed_at is None

    async def test_clear_unlocks_and_returns_row(self, repository, clock):
        for _ in range(3):
            await fail(repository, clock())

        result = await repository.clear(IDENTIFIER)

        assert result.value.failed_attempts == 0
        assert result.value.locked_until is None
        assert not (await repository.find(IDENTIFIER)).value.is_locked(clock())

    async def test_clear_unknown_returns_none(self, repository):
        assert await repository.clear("ghost@example.com") == Success(value=None)

    async def test_lockout_never_deactivates(self, repository, clock):
        """Lockout is temporal; is_active is untouched."""
        for _ in range(3):
            await fail(repository, clock())

        assert (await repository.find(IDENTIFIER)).value.is_active is True
