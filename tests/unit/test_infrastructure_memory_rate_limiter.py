"""Unit tests for InMemoryRateLimiter.

Tests cover:
- check() reserves an attempt that record() settles; bursts never exceed the budget
- Blocking as soon as max_attempts have been recorded
- Block outlives the window; an ended block starts a fresh window
- Login success clears the record; other actions keep counting
- Whitelisted clients
- Per-key isolation and concurrent recording
- Repeat offenders blocked on every endpoint
- sweep() eviction rules
"""

import asyncio
from datetime import timedelta

import pytest

from src.core.result import Success
from src.domain.enums import RateLimitAction
from src.domain.value_objects import EscalationPolicy, RateLimitPolicy
from src.infrastructure.rate_limit import InMemoryRateLimiter

CLIENT = "203.0.113.7"


@pytest.fixture
def policies():
    login = RateLimitPolicy(max_attempts=3, window_seconds=60, block_duration_seconds=300)
    return {
        action: login
        if action is RateLimitAction.LOGIN
        else RateLimitPolicy(
            max_attempts=2,
            window_seconds=60,
            block_duration_seconds=120,
            whitelist=frozenset({"127.0.0.1"}),
        )
        for action in RateLimitAction
    }


@pytest.fixture
def limiter(policies, mock_logger, clock):
    return InMemoryRateLimiter(policies=policies, logger=mock_logger, clock=clock)


async def fail(limiter, times, *, action=RateLimitAction.LOGIN, client=CLIENT):
    for _ in range(times):
        await limiter.record(client_key=client, action=action, success=False)


async def decision(limiter, *, action=RateLimitAction.LOGIN, client=CLIENT):
    result = await limiter.check(client_key=client, action=action)
    assert isinstance(result, Success)
    return result.value


@pytest.mark.unit
class TestInMemoryRateLimiterCheck:
    """Test check() decisions."""

    async def test_unknown_client_gets_full_budget(self, limiter, clock):
        """A client with no record is allowed with every attempt left."""
        result = await decision(limiter)

        assert result.allowed is True
        assert result.remaining_attempts == 3
        assert result.limit == 3
        assert result.reset_at == clock() + timedelta(seconds=60)

    async def test_check_reserves_without_counting(self, limiter, clock):
        """Unsettled checks hold the budget but never start a block."""
        for _ in range(3):
            assert (await decision(limiter)).allowed

        result = await decision(limiter)

        assert result.allowed is False
        assert result.blocked_until is None
        assert result.retry_after_seconds(clock()) == 60

    async def test_record_releases_reservation(self, limiter):
        """A check followed by its record spends exactly one attempt."""
        for _ in range(2):
            await decision(limiter)
            await fail(limiter, 1)

        result = await decision(limiter)
        assert result.allowed is True
        assert result.remaining_attempts == 1

    async def test_reservations_expire_with_window(self, limiter, clock):
        """A check never followed by a record is forgotten with its window."""
        for _ in range(3):
            await decision(limiter)

        clock.advance(seconds=61)

        assert (await decision(limiter)).remaining_attempts == 3

    async def test_remaining_tracks_recorded_attempts(self, limiter):
        """Each recorded failure reduces the remaining attempts."""
        await fail(limiter, 2)

        result = await decision(limiter)
        assert result.allowed is True
        assert result.remaining_attempts == 1

    async def test_blocks_after_max_attempts(self, limiter, clock):
        """The check after the last allowed attempt is denied until the block ends."""
        await fail(limiter, 3)

        result = await decision(limiter)

        assert result.allowed is False
        assert result.remaining_attempts == 0
        assert result.blocked_until == clock() + timedelta(seconds=300)
        assert result.retry_after_seconds(clock()) == 300

    async def test_block_outlives_window(self, limiter, clock):
        """Still blocked after the window ends, until the block ends."""
        await fail(limiter, 3)
        await decision(limiter)

        clock.advance(seconds=120)
        result = await decision(limiter)

        assert result.allowed is False
        assert result.retry_after_seconds(clock()) == 180

    async def test_block_is_not_extended_by_checks(self, limiter, clock):
        """Checks during a block keep the original end."""
        await fail(limiter, 3)
        first = await decision(limiter)

        clock.advance(seconds=100)
        second = await decision(limiter)

        assert second.blocked_until == first.blocked_until

    async def test_ended_block_starts_fresh_window(self, limiter, clock):
        """Once the block ends the client has its full budget again."""
        await fail(limiter, 3)
        await decision(limiter)

        clock.advance(seconds=301)
        result = await decision(limiter)

        assert result.allowed is True
        assert result.remaining_attempts == 3

    async def test_expired_window_resets_budget(self, limiter, clock):
        """Attempts from a closed window are forgotten."""
        await fail(limiter, 2)

        clock.advance(seconds=61)
        result = await decision(limiter)

        assert result.remaining_attempts == 3

    async def test_actions_have_separate_budgets(self, limiter):
        """Login failures never touch the payment budget."""
        await fail(limiter, 3)

        assert (await decision(limiter, action=RateLimitAction.PAYMENT)).allowed
        assert not (await decision(limiter)).allowed

    async def test_clients_have_separate_budgets(self, limiter):
        """One client's failures never block another."""
        await fail(limiter, 3)

        assert (await decision(limiter, client="198.51.100.1")).allowed

    async def test_logs_warning_when_blocking(self, limiter, mock_logger):
        """Entering a block is logged at warning level."""
        await fail(limiter, 3)
        await decision(limiter)

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["action"] == "login"


@pytest.mark.unit
class TestInMemoryRateLimiterRecord:
    """Test record() outcomes."""

    async def test_login_success_clears_record(self, limiter):
        """A successful login is a fresh start."""
        await fail(limiter, 2)

        await limiter.record(
            client_key=CLIENT, action=RateLimitAction.LOGIN, success=True
        )

        assert len(limiter) == 0
        assert (await decision(limiter)).remaining_attempts == 3

    async def test_success_counts_for_other_actions(self, limiter):
        """Payments count successes against the budget."""
        for _ in range(2):
            await limiter.record(
                client_key=CLIENT, action=RateLimitAction.PAYMENT, success=True
            )

        result = await decision(limiter, action=RateLimitAction.PAYMENT)
        assert result.allowed is False

    async def test_whitelisted_client_is_never_counted(self, limiter):
        """Whitelisted keys bypass both record and check."""
        await fail(limiter, 5, action=RateLimitAction.ADMIN, client="127.0.0.1")

        result = await decision(limiter, action=RateLimitAction.ADMIN, client="127.0.0.1")
        assert result.allowed is True
        assert len(limiter) == 0

    async def test_concurrent_records_are_all_counted(
        self, policies, mock_logger, clock
    ):
        """Parallel records for one key are linearized."""
        policies[RateLimitAction.API] = RateLimitPolicy(
            max_attempts=100, window_seconds=60, block_duration_seconds=60
        )
        limiter = InMemoryRateLimiter(policies=policies, logger=mock_logger, clock=clock)

        await asyncio.gather(
            *(
                limiter.record(
                    client_key=CLIENT, action=RateLimitAction.API, success=False
                )
                for _ in range(50)
            )
        )

        result = await decision(limiter, action=RateLimitAction.API)
        assert result.remaining_attempts == 50

    async def test_reaching_max_attempts_blocks_immediately(self, limiter, clock):
        """The failure that spends the budget sets the block end."""
        await fail(limiter, 3)

        record = limiter._records[(RateLimitAction.LOGIN, CLIENT)]
        assert record.attempts == 3
        assert record.blocked_until == clock() + timedelta(seconds=300)

    async def test_attempts_past_max_keep_block(self, limiter, clock):
        """Counting beyond the maximum only ever happens mid-block."""
        await fail(limiter, 8)

        record = limiter._records[(RateLimitAction.LOGIN, CLIENT)]
        assert record.attempts == 8
        assert record.is_blocked(clock())

    async def test_concurrent_burst_stays_within_budget(
        self, policies, mock_logger, clock
    ):
        """Checks racing ahead of their records never exceed max_attempts."""
        policies[RateLimitAction.LOGIN] = RateLimitPolicy(
            max_attempts=5, window_seconds=900, block_duration_seconds=1800
        )
        limiter = InMemoryRateLimiter(policies=policies, logger=mock_logger, clock=clock)

        async def attempt():
            result = await decision(limiter)
            await asyncio.sleep(0)
            if result.allowed:
                await limiter.record(
                    client_key=CLIENT, action=RateLimitAction.LOGIN, success=False
                )
            return result.allowed

        allowed = await asyncio.gather(*(attempt() for _ in range(50)))

        assert sum(allowed) == 5
        assert (await decision(limiter)).blocked_until == clock() + timedelta(
            seconds=1800
        )


@pytest.mark.unit
class TestInMemoryRateLimiterEscalation:
    """Test client-wide blocks for repeat offenders."""

    @pytest.fixture
    def limiter(self, policies, mock_logger, clock):
        return InMemoryRateLimiter(
            policies=policies,
            logger=mock_logger,
            clock=clock,
            escalation=EscalationPolicy(threshold=2, multiplier=8, window_seconds=3600),
        )

    async def trip(self, limiter, clock):
        await fail(limiter, 3)
        clock.advance(seconds=301)

    async def test_single_block_is_not_escalated(self, limiter, clock):
        """One tripped block stays scoped to its action."""
        await fail(limiter, 3)

        assert (await limiter.blocked_until(client_key=CLIENT)).value is None

    async def test_threshold_blocks_client_everywhere(self, limiter, clock):
        """Repeat blocks earn a longer block covering every action."""
        await self.trip(limiter, clock)
        await fail(limiter, 3)

        result = await limiter.blocked_until(client_key=CLIENT)

        assert isinstance(result, Success)
        assert result.value == clock() + timedelta(seconds=300 * 8)

    async def test_other_clients_unaffected(self, limiter, clock):
        await self.trip(limiter, clock)
        await fail(limiter, 3)

        assert (await limiter.blocked_until(client_key="198.51.100.1")).value is None

    async def test_blocks_on_different_actions_add_up(self, limiter, clock):
        """Offenses are counted per client, not per action."""
        await fail(limiter, 3)
        await fail(limiter, 2, action=RateLimitAction.PAYMENT)

        result = await limiter.blocked_until(client_key=CLIENT)
        assert result.value == clock() + timedelta(seconds=120 * 8)

    async def test_offenses_forgotten_after_window(self, limiter, clock):
        await self.trip(limiter, clock)
        clock.advance(seconds=3600)
        await fail(limiter, 3)

        assert (await limiter.blocked_until(client_key=CLIENT)).value is None

    async def test_client_block_ends(self, limiter, clock):
        await self.trip(limiter, clock)
        await fail(limiter, 3)

        clock.advance(seconds=300 * 8)

        assert (await limiter.blocked_until(client_key=CLIENT)).value is None

    async def test_whitelisted_client_never_escalates(self, limiter, clock):
        """Keys exempt from any policy are never blocked client-wide."""
        for _ in range(3):
            await fail(limiter, 3, client="127.0.0.1")
            clock.advance(seconds=301)

        assert (await limiter.blocked_until(client_key="127.0.0.1")).value is None

    async def test_escalation_is_logged(self, limiter, clock, mock_logger):
        await self.trip(limiter, clock)
        await fail(limiter, 3)

        messages = [c.args[0] for c in mock_logger.warning.call_args_list]
        assert "Repeat offender blocked on every endpoint" in messages


@pytest.mark.unit
class TestInMemoryRateLimiterSweep:
    """Test sweep() eviction."""

    async def test_sweep_evicts_expired_windows(self, limiter, clock):
        """Records whose window closed are evicted."""
        await fail(limiter, 1)
        await fail(limiter, 1, client="198.51.100.1")

        clock.advance(seconds=61)
        evicted = await limiter.sweep(batch_size=1)

        assert evicted == 2
        assert len(limiter) == 0

    async def test_sweep_keeps_blocked_records(self, limiter, clock):
        """A record mid-block survives the end of its window."""
        await fail(limiter, 3)
        await decision(limiter)

        clock.advance(seconds=120)
        assert await limiter.sweep() == 0
        assert len(limiter) == 1

        clock.advance(seconds=200)
        assert await limiter.sweep() == 1

    async def test_sweep_keeps_open_windows(self, limiter, clock):
        """Records still inside their window are kept."""
        await fail(limiter, 1)

        clock.advance(seconds=30)

        assert await limiter.sweep() == 0
        assert len(limiter) == 1

    async def test_sweep_forgets_stale_offenders(self, limiter, clock):
        """Offense history older than the escalation window is dropped."""
        await fail(limiter, 3)
        assert CLIENT in limiter._offenders

        clock.advance(seconds=86400)
        await limiter.sweep()

        assert CLIENT not in limiter._offenders
