"""Integration tests for RedisRateLimiter.

Tests cover:
- Five recorded login failures block the client for the policy block length
- A block outliving its window; a fresh window once the block ends
- Login success deleting the record
- A concurrent burst never getting more than max_attempts through
- Repeat offenders blocked client-wide

Architecture:
- Real Redis at REDIS_URL running the Lua script; time from the test clock
"""

import asyncio
from datetime import timedelta
from uuid import uuid4

import pytest
import pytest_asyncio
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from src.core.config import settings
from src.core.result import Success
from src.domain.enums import RateLimitAction
from src.domain.value_objects import EscalationPolicy, RateLimitPolicy
from src.infrastructure.rate_limit import RedisRateLimiter

LOGIN = RateLimitAction.LOGIN


@pytest_asyncio.fixture
async def redis_client():
    """Redis client for REDIS_URL; skips the test when Redis is down."""
    pool = ConnectionPool.from_url(settings.redis_url, max_connections=64)
    client = Redis(connection_pool=pool)
    try:
        await client.ping()
    except (RedisError, OSError) as exc:
        await pool.disconnect()
        pytest.skip(f"Redis unavailable at {settings.redis_url}: {exc}")
    yield client
    keys = await client.keys("rate_limit:*")
    if keys:
        await client.delete(*keys)
    await client.aclose()
    await pool.disconnect()


@pytest.fixture
def client_key():
    """Unique client key so runs never share records."""
    return f"test-{uuid4().hex}"


@pytest.fixture
def limiter(redis_client, mock_logger, clock):
    policies = {
        action: RateLimitPolicy(
            max_attempts=5, window_seconds=900, block_duration_seconds=1800
        )
        for action in RateLimitAction
    }
    return RedisRateLimiter(
        redis_client=redis_client,
        policies=policies,
        logger=mock_logger,
        clock=clock,
        escalation=EscalationPolicy(threshold=2, multiplier=8, window_seconds=86400),
    )


async def fail(limiter, client_key, times):
    for _ in range(times):
        result = await limiter.record(client_key=client_key, action=LOGIN, success=False)
        assert isinstance(result, Success)


async def decision(limiter, client_key):
    result = await limiter.check(client_key=client_key, action=LOGIN)
    assert isinstance(result, Success)
    return result.value


@pytest.mark.integration
class TestRedisRateLimiterScript:
    """Test the window-with-block script in Redis."""

    async def test_five_failures_block_login(self, limiter, client_key, clock):
        await fail(limiter, client_key, 5)

        result = await decision(limiter, client_key)

        assert result.allowed is False
        assert result.remaining_attempts == 0
        assert result.blocked_until == clock() + timedelta(milliseconds=1_800_000)

    async def test_failures_below_max_leave_budget(self, limiter, client_key):
        await fail(limiter, client_key, 3)

        result = await decision(limiter, client_key)

        assert result.allowed is True
        assert result.remaining_attempts == 2

    async def test_block_outlives_window(self, limiter, client_key, clock):
        """The record survives its window while the block runs."""
        await fail(limiter, client_key, 5)

        clock.advance(seconds=1000)
        result = await decision(limiter, client_key)

        assert result.allowed is False
        assert result.retry_after_seconds(clock()) == 800

    async def test_ended_block_starts_fresh_window(self, limiter, client_key, clock):
        await fail(limiter, client_key, 5)

        clock.advance(seconds=1801)
        result = await decision(limiter, client_key)

        assert result.allowed is True
        assert result.remaining_attempts == 5

    async def test_login_success_deletes_record(
        self, limiter, redis_client, client_key
    ):
        await fail(limiter, client_key, 4)

        await limiter.record(client_key=client_key, action=LOGIN, success=True)

        assert await redis_client.exists(f"rate_limit:login:{client_key}") == 0
        assert (await decision(limiter, client_key)).remaining_attempts == 5

    async def test_concurrent_burst_stays_within_budget(self, limiter, client_key):
        """Checks racing ahead of their records never exceed max_attempts."""

        async def attempt():
            result = await decision(limiter, client_key)
            await asyncio.sleep(0)
            if result.allowed:
                await limiter.record(client_key=client_key, action=LOGIN, success=False)
            return result.allowed

        allowed = await asyncio.gather(*(attempt() for _ in range(50)))

        assert sum(allowed) == 5
        assert (await decision(limiter, client_key)).blocked_until is not None


@pytest.mark.integration
class TestRedisRateLimiterEscalation:
    """Test client-wide blocks in Redis."""

    async def test_second_block_escalates(self, limiter, client_key, clock):
        await fail(limiter, client_key, 5)
        assert (await limiter.blocked_until(client_key=client_key)).value is None

        clock.advance(seconds=1801)
        await fail(limiter, client_key, 5)

        result = await limiter.blocked_until(client_key=client_key)
        assert result.value == clock() + timedelta(seconds=1800 * 8)

    async def test_unknown_client_not_blocked(self, limiter, client_key):
        assert (await limiter.blocked_until(client_key=client_key)).value is None
