"""Unit tests for IdempotencyGuard.

Tests cover:
- First execution stored, retries replayed byte-for-byte
- Concurrent calls for one key coalesced (handler runs once)
- Lost insert race replays the winner's response
- 5xx responses never stored
- Fail-open lookup (Failure and timeout)
- Handler exceptions propagate and store nothing
- Derived keys
- Batched sweep

Architecture:
- In-process fake repository honoring the uniqueness rule
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.application.services.idempotency_guard import (
    DERIVED_KEY_PREFIX,
    IdempotencyGuard,
    request_fingerprint,
)
from src.core.enums import ErrorCode
from src.core.errors import DomainError
from src.core.result import Failure, Success
from src.domain.value_objects import IdempotentResponse

SCOPE = "tenant:default|principal:sess-1"
STORE_DOWN = Failure(
    error=DomainError(code=ErrorCode.DURABLE_STORE_UNAVAILABLE, message="down")
)


class FakeIdempotencyRepository:
    """Dict-backed store with the (key, caller_scope) uniqueness rule."""

    def __init__(self) -> None:
        self.records = {}

    async def find(self, key, caller_scope, *, now):
        record = self.records.get((key, caller_scope))
        if record is not None and record.is_expired(now):
            record = None
        return Success(value=record)

    async def insert(self, record):
        slot = (record.key, record.caller_scope)
        existing = self.records.get(slot)
        if existing is not None and not existing.is_expired(record.created_at):
            return Success(value=False)
        self.records[slot] = record
        return Success(value=True)

    async def delete_expired(self, *, now, batch_size):
        expired = [s for s, r in self.records.items() if r.is_expired(now)][:batch_size]
        for slot in expired:
            del self.records[slot]
        return Success(value=len(expired))


class CountingHandler:
    """Handler that counts executions and yields once before answering."""

    def __init__(self, status_code: int = 201, body: bytes = b'{"id": 1}') -> None:
        self.calls = 0
        self.status_code = status_code
        self.body = body

    async def __call__(self) -> IdempotentResponse:
        self.calls += 1
        await asyncio.sleep(0)
        return IdempotentResponse(status_code=self.status_code, body=self.body)


@pytest.fixture
def repository():
    return FakeIdempotencyRepository()


@pytest.fixture
def guard(repository, mock_logger, clock):
    return IdempotencyGuard(
        repository=repository,
        logger=mock_logger,
        secret="test-secret",
        ttl_seconds=3600,
        store_timeout_seconds=0.05,
        clock=clock,
    )


@pytest.mark.unit
class TestIdempotencyGuardExecute:
    """Test execute() replay semantics."""

    async def test_first_call_runs_handler_and_stores(self, guard, repository):
        """A new key runs the handler once and stores the response."""
        handler = CountingHandler()

        outcome = await guard.execute(key="k1", caller_scope=SCOPE, handler=handler)

        assert outcome.replayed is False
        assert outcome.status_code == 201
        assert handler.calls == 1
        assert ("k1", SCOPE) in repository.records

    async def test_retry_replays_stored_response(self, guard):
        """A retry returns the first body without running the handler."""
        first = CountingHandler(body=b'{"id": 1}')
        retry = CountingHandler(body=b'{"id": 2}')

        await guard.execute(key="k1", caller_scope=SCOPE, handler=first)
        outcome = await guard.execute(key="k1", caller_scope=SCOPE, handler=retry)

        assert outcome.replayed is True
        assert outcome.body == b'{"id": 1}'
        assert retry.calls == 0

    async def test_scopes_are_isolated(self, guard):
        """The same key under another scope is a new request."""
        handler = CountingHandler()

        await guard.execute(key="k1", caller_scope=SCOPE, handler=handler)
        outcome = await guard.execute(
            key="k1", caller_scope="tenant:default|principal:sess-2", handler=handler
        )

        assert outcome.replayed is False
        assert handler.calls == 2

    async def test_concurrent_calls_run_handler_once(self, guard):
        """Parallel calls for one key observe a single execution."""
        handler = CountingHandler()

        outcomes = await asyncio.gather(
            *(
                guard.execute(key="k1", caller_scope=SCOPE, handler=handler)
                for _ in range(10)
            )
        )

        assert handler.calls == 1
        assert sum(not o.replayed for o in outcomes) == 1
        assert {o.body for o in outcomes} == {b'{"id": 1}'}

    async def test_server_errors_are_not_stored(self, guard, repository):
        """A 5xx can be retried for real."""
        failing = CountingHandler(status_code=503)
        recovering = CountingHandler(status_code=201)

        first = await guard.execute(key="k1", caller_scope=SCOPE, handler=failing)
        second = await guard.execute(key="k1", caller_scope=SCOPE, handler=recovering)

        assert first.status_code == 503
        assert second.replayed is False
        assert recovering.calls == 1

    async def test_oversized_bodies_are_not_stored(self, repository, mock_logger, clock):
        """Responses above the body cap are returned but never replayed."""
        guard = IdempotencyGuard(
            repository=repository,
            logger=mock_logger,
            secret="s",
            max_body_bytes=4,
            clock=clock,
        )
        handler = CountingHandler(body=b"0123456789")

        outcome = await guard.execute(key="k1", caller_scope=SCOPE, handler=handler)

        assert outcome.body == b"0123456789"
        assert repository.records == {}

    async def test_client_errors_are_stored(self, guard):
        """A 4xx is the observed response and is replayed."""
        handler = CountingHandler(status_code=422, body=b'{"detail": "bad"}')

        await guard.execute(key="k1", caller_scope=SCOPE, handler=handler)
        outcome = await guard.execute(key="k1", caller_scope=SCOPE, handler=handler)

        assert outcome.replayed is True
        assert outcome.status_code == 422
        assert handler.calls == 1

    async def test_expired_record_runs_again(self, guard, clock):
        """After the TTL the key is fresh."""
        handler = CountingHandler()

        await guard.execute(key="k1", caller_scope=SCOPE, handler=handler)
        clock.advance(seconds=3600)
        outcome = await guard.execute(key="k1", caller_scope=SCOPE, handler=handler)

        assert outcome.replayed is False
        assert handler.calls == 2

    async def test_handler_exception_propagates(self, guard, repository):
        """Nothing is stored when the handler raises."""

        async def broken() -> IdempotentResponse:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await guard.execute(key="k1", caller_scope=SCOPE, handler=broken)

        assert repository.records == {}

    async def test_reused_key_with_different_body_warns(self, guard, mock_logger):
        """The stored response still wins; the mismatch is logged."""
        handler = CountingHandler()

        await guard.execute(
            key="k1", caller_scope=SCOPE, handler=handler, request_params="a"
        )
        outcome = await guard.execute(
            key="k1", caller_scope=SCOPE, handler=handler, request_params="b"
        )

        assert outcome.replayed is True
        mock_logger.warning.assert_called_once()


@pytest.mark.unit
class TestIdempotencyGuardStoreFailures:
    """Test fail-open behavior and insert races."""

    async def test_lost_insert_race_replays_winner(
        self, guard, repository, mock_logger, clock
    ):
        """Another process stored first: its response is returned."""
        winner = CountingHandler(body=b'{"id": "winner"}')
        loser = CountingHandler(body=b'{"id": "loser"}')
        original_find = repository.find
        lookups = 0

        async def find_after_race(key, caller_scope, *, now):
            nonlocal lookups
            lookups += 1
            if lookups == 1:
                # Simulate the other process finishing between lookup and insert.
                other = IdempotencyGuard(
                    repository=repository,
                    logger=mock_logger,
                    secret="test-secret",
                    clock=clock,
                )
                await other.execute(key=key, caller_scope=caller_scope, handler=winner)
                return Success(value=None)
            return await original_find(key, caller_scope, now=now)

        repository.find = find_after_race

        outcome = await guard.execute(key="k1", caller_scope=SCOPE, handler=loser)

        assert outcome.replayed is True
        assert outcome.body == b'{"id": "winner"}'
        assert loser.calls == 1

    async def test_lookup_failure_executes_unprotected(self, mock_logger, clock):
        """A failing store still lets the handler run."""
        repository = AsyncMock()
        repository.find.return_value = STORE_DOWN
        repository.insert.return_value = STORE_DOWN
        guard = IdempotencyGuard(
            repository=repository, logger=mock_logger, secret="s", clock=clock
        )
        handler = CountingHandler()

        outcome = await guard.execute(key="k1", caller_scope=SCOPE, handler=handler)

        assert outcome.replayed is False
        assert handler.calls == 1
        mock_logger.warning.assert_called_once()
        mock_logger.error.assert_called_once()

    async def test_lookup_timeout_executes_unprotected(self, mock_logger, clock):
        """A slow store is treated as unavailable."""

        async def slow_find(key, caller_scope, *, now):
            await asyncio.sleep(1)
            return Success(value=None)

        repository = AsyncMock()
        repository.find.side_effect = slow_find
        repository.insert.return_value = Success(value=True)
        guard = IdempotencyGuard(
            repository=repository,
            logger=mock_logger,
            secret="s",
            store_timeout_seconds=0.05,
            clock=clock,
        )
        handler = CountingHandler()

        outcome = await guard.execute(key="k1", caller_scope=SCOPE, handler=handler)

        assert outcome.replayed is False
        assert handler.calls == 1


@pytest.mark.unit
class TestIdempotencyGuardKeysAndSweep:
    """Test derive_key() and sweep()."""

    def test_derived_key_is_deterministic(self, guard):
        """Same request, same key."""
        args = {
            "method": "post",
            "path": "/api/v1/payments",
            "body": b'{"amount_cents": 100}',
            "caller_scope": SCOPE,
        }

        key = guard.derive_key(**args)

        assert key == guard.derive_key(**{**args, "method": "POST"})
        assert key.startswith(DERIVED_KEY_PREFIX)

    def test_derived_key_changes_with_body_and_scope(self, guard):
        """Different body or caller derives a different key."""
        base = guard.derive_key(
            method="POST", path="/p", body=b"a", caller_scope=SCOPE
        )

        assert base != guard.derive_key(
            method="POST", path="/p", body=b"b", caller_scope=SCOPE
        )
        assert base != guard.derive_key(
            method="POST", path="/p", body=b"a", caller_scope="tenant:x|principal:y"
        )

    def test_request_fingerprint_is_sha256(self):
        assert request_fingerprint(b"") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    async def test_sweep_deletes_in_batches(self, guard, repository, clock):
        """Sweep loops until a short batch."""
        for index in range(5):
            await guard.execute(
                key=f"k{index}", caller_scope=SCOPE, handler=CountingHandler()
            )
        clock.advance(seconds=3601)

        assert await guard.sweep(batch_size=2) == 5
        assert repository.records == {}

    async def test_sweep_stops_on_failure(self, mock_logger, clock):
        """A store failure ends the sweep and is logged."""
        repository = AsyncMock()
        repository.delete_expired.return_value = STORE_DOWN
        guard = IdempotencyGuard(
            repository=repository, logger=mock_logger, secret="s", clock=clock
        )

        assert await guard.sweep() == 0
        mock_logger.error.assert_called_once()

    async def test_sweep_stops_on_timeout(self, mock_logger, clock):
        """A hung batch ends the sweep with the count deleted so far."""
        calls = 0

        async def delete_expired(*, now, batch_size):
            nonlocal calls
            calls += 1
            if calls == 1:
                return Success(value=batch_size)
            await asyncio.sleep(60)

        repository = AsyncMock()
        repository.delete_expired.side_effect = delete_expired
        guard = IdempotencyGuard(
            repository=repository,
            logger=mock_logger,
            secret="s",
            clock=clock,
            store_timeout_seconds=0.01,
        )

        assert await guard.sweep(batch_size=2) == 2
        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.args[0] == "Idempotency sweep timed out"
