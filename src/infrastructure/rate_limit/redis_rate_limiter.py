"""Redis-backed rate limiter using one atomic Lua script.

Same window-with-block semantics as InMemoryRateLimiter, shared by every
serving instance. Each ``(action, client_key)`` is a Redis hash
(``attempts``, ``in_flight``, ``window_start``, ``blocked_until`` in epoch
milliseconds) whose TTL is ``max(window, block)``, so Redis itself evicts
idle records. Offense counts for repeat offenders live in a second hash per
client key, updated by the same script when a block starts.

Fail-open policy:
    ``check`` returns Success(allowed=True) on any Redis failure. ``record``
    reports Failure(RateLimitError) so callers can log it; the request is
    never rejected because the store is down.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from redis.exceptions import NoScriptError, RedisError

from src.core.clock import Clock, utc_now
from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.domain.enums import RateLimitAction
from src.domain.errors import RateLimitError
from src.domain.value_objects.rate_limit_policy import (
    EscalationPolicy,
    RateLimitDecision,
    RateLimitPolicy,
)

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol

KEY_PREFIX = "rate_limit"
OFFENDER_SEGMENT = "offender"

# KEYS[1]: record hash, KEYS[2]: offender hash
# ARGV: mode ("check" | "record" | "reset"), now_ms, max_attempts,
#       window_ms, block_ms, ttl_seconds, escalation_threshold,
#       escalation_multiplier, escalation_window_ms, exempt (0 | 1)
# Returns: {allowed, remaining, reset_at_ms, blocked_until_ms, block_started,
#           escalated_until_ms}
WINDOW_BLOCK_SCRIPT = """
local key = KEYS[1]
local offender_key = KEYS[2]
local mode = ARGV[1]
local now = tonumber(ARGV[2])
local max_attempts = tonumber(ARGV[3])
local window = tonumber(ARGV[4])
local block = tonumber(ARGV[5])
local ttl = tonumber(ARGV[6])
local threshold = tonumber(ARGV[7])
local multiplier = tonumber(ARGV[8])
local offense_window = tonumber(ARGV[9])
local exempt = ARGV[10] == '1'

local exists = redis.call('EXISTS', key) == 1
local attempts = tonumber(redis.call('HGET', key, 'attempts') or '0')
local in_flight = tonumber(redis.call('HGET', key, 'in_flight') or '0')
local window_start = tonumber(redis.call('HGET', key, 'window_start') or tostring(now))
local blocked_until = tonumber(redis.call('HGET', key, 'blocked_until') or '0')

if exists then
  local blocked = blocked_until > now
  local block_ended = blocked_until > 0 and not blocked
  if (now >= window_start + window and not blocked) or block_ended then
    redis.call('DEL', key)
    exists = false
    attempts = 0
    in_flight = 0
    window_start = now
    blocked_until = 0
  end
end

local function start_block()
  blocked_until = now + block
  redis.call('HSET', key, 'blocked_until', blocked_until)
  redis.call('EXPIRE', key, ttl)
  if exempt then
    return 0
  end
  local first = tonumber(redis.call('HGET', offender_key, 'first_offense') or '0')
  local client_until = tonumber(redis.call('HGET', offender_key, 'blocked_until') or '0')
  if first > 0 and now >= first + offense_window and client_until <= now then
    redis.call('DEL', offender_key)
    first = 0
    client_until = 0
  end
  if first == 0 then
    first = now
    redis.call('HSET', offender_key, 'first_offense', first)
  end
  local offenses = redis.call('HINCRBY', offender_key, 'offenses', 1)
  local escalated = 0
  if offenses >= threshold then
    escalated = math.max(client_until, now + block * multiplier)
    client_until = escalated
    redis.call('HSET', offender_key, 'blocked_until', client_until)
  end
  redis.call('PEXPIRE', offender_key, math.max(first + offense_window, client_until) - now)
  return escalated
end

if mode == 'reset' then
  redis.call('DEL', key)
  return {1, max_attempts, now + window, 0, 0, 0}
end

if mode == 'record' then
  if not exists then
    redis.call('HSET', key, 'window_start', window_start)
  end
  if in_flight > 0 then
    redis.call('HINCRBY', key, 'in_flight', -1)
  end
  attempts = redis.call('HINCRBY', key, 'attempts', 1)
  redis.call('EXPIRE', key, ttl)
  if attempts >= max_attempts and blocked_until <= now then
    local escalated = start_block()
    return {0, 0, window_start + window, blocked_until, 1, escalated}
  end
  return {1, math.max(0, max_attempts - attempts), window_start + window, blocked_until, 0, 0}
end

if blocked_until > now then
  return {0, 0, window_start + window, blocked_until, 0, 0}
end
if attempts >= max_attempts then
  local escalated = start_block()
  return {0, 0, window_start + window, blocked_until, 1, escalated}
end
if attempts + in_flight >= max_attempts then
  return {0, 0, window_start + window, 0, 0, 0}
end
if not exists then
  redis.call('HSET', key, 'window_start', window_start)
  redis.call('EXPIRE', key, ttl)
end
redis.call('HINCRBY', key, 'in_flight', 1)
return {1, max_attempts - attempts - in_flight, window_start + window, 0, 0, 0}
"""


@dataclass(slots=True)
class _LuaRefs:
    """Holds the loaded script SHA."""

    window_block_sha: str | None = None


def _to_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def _from_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=UTC)


class RedisRateLimiter:
    """Shared-store rate limiter implementing RateLimitProtocol.

    Args:
        redis_client: An async Redis client (redis.asyncio.Redis compatible).
        policies: One policy per action.
        logger: Structured logger.
        clock: Time source (injectable for tests).
        escalation: Repeat offender rules.
    """

    def __init__(
        self,
        *,
        redis_client: Any,
        policies: Mapping[RateLimitAction, RateLimitPolicy],
        logger: LoggerProtocol,
        clock: Clock = utc_now,
        escalation: EscalationPolicy | None = None,
    ) -> None:
        self.redis = redis_client
        self._policies = dict(policies)
        self._logger = logger
        self._clock = clock
        self._escalation = escalation or EscalationPolicy()
        self._exempt = frozenset().union(*(p.whitelist for p in self._policies.values()))
        self._lua = _LuaRefs()
        self._script_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # RateLimitProtocol implementation
    # -------------------------------------------------------------------------
    async def check(
        self,
        *,
        client_key: str,
        action: RateLimitAction,
    ) -> Result[RateLimitDecision, RateLimitError]:
        """Decide whether the client may attempt ``action`` now.

        Fail-open:
            On Redis errors, returns Success(allowed=True, full budget).
        """
        policy = self._policies[action]
        now = self._clock()
        if policy.is_whitelisted(client_key):
            return Success(value=self._open_decision(now, policy))

        try:
            reply = await self._run(
                "check", client_key=client_key, action=action, policy=policy, now=now
            )
        except (RedisError, OSError) as exc:
            self._logger.warning(
                "Rate limit check failed, allowing request",
                action=action.value,
                client_key=client_key,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return Success(value=self._open_decision(now, policy))

        allowed, remaining, reset_at_ms, blocked_until_ms, _, _ = reply
        blocked_until = _from_ms(blocked_until_ms) if blocked_until_ms else None
        return Success(
            value=RateLimitDecision(
                allowed=bool(allowed),
                remaining_attempts=int(remaining),
                reset_at=_from_ms(reset_at_ms),
                limit=policy.max_attempts,
                blocked_until=blocked_until,
            )
        )

    async def record(
        self,
        *,
        client_key: str,
        action: RateLimitAction,
        success: bool,
    ) -> Result[None, RateLimitError]:
        """Count one attempt, or delete the record on a login success."""
        policy = self._policies[action]
        if policy.is_whitelisted(client_key):
            return Success(value=None)

        mode = "reset" if success and action.resets_on_success else "record"
        try:
            await self._run(
                mode,
                client_key=client_key,
                action=action,
                policy=policy,
                now=self._clock(),
            )
        except (RedisError, OSError) as exc:
            return Failure(
                error=RateLimitError(
                    code=ErrorCode.RATE_LIMIT_RECORD_FAILED,
                    message=f"Failed to record rate limit attempt: {exc}",
                    details={"action": action.value, "client_key": client_key},
                )
            )
        return Success(value=None)

    async def blocked_until(
        self, *, client_key: str
    ) -> Result[datetime | None, RateLimitError]:
        """End of the client-wide repeat offender block, if one is active.

        Fail-open:
            On Redis errors, reports no block.
        """
        now = self._clock()
        try:
            raw = await self.redis.hget(self._offender_key(client_key), "blocked_until")
        except (RedisError, OSError) as exc:
            self._logger.warning(
                "Offender lookup failed, allowing request",
                client_key=client_key,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return Success(value=None)

        if not raw:
            return Success(value=None)
        until = _from_ms(int(raw))
        return Success(value=until if until > now else None)

    async def sweep(self, *, batch_size: int = 500) -> int:
        """Redis expires idle records through key TTLs; nothing to sweep."""
        return 0

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    @staticmethod
    def _offender_key(client_key: str) -> str:
        return f"{KEY_PREFIX}:{OFFENDER_SEGMENT}:{client_key}"

    async def _run(
        self,
        mode: str,
        *,
        client_key: str,
        action: RateLimitAction,
        policy: RateLimitPolicy,
        now: datetime,
    ) -> list[int]:
        args = (
            mode,
            _to_ms(now),
            policy.max_attempts,
            policy.window_seconds * 1000,
            policy.block_duration_seconds * 1000,
            policy.ttl_seconds,
            self._escalation.threshold,
            self._escalation.multiplier,
            self._escalation.window_seconds * 1000,
            1 if client_key in self._exempt else 0,
        )
        keys = (f"{KEY_PREFIX}:{action.value}:{client_key}", self._offender_key(client_key))
        sha = await self._ensure_script()
        try:
            resp = await self.redis.evalsha(sha, len(keys), *keys, *args)
        except NoScriptError:
            # Script cache flushed (restart/failover); load it again.
            self._lua.window_block_sha = None
            sha = await self._ensure_script()
            resp = await self.redis.evalsha(sha, len(keys), *keys, *args)

        reply = [int(item) for item in resp]
        _, _, _, blocked_until_ms, block_started, escalated_until_ms = reply
        if block_started:
            self._logger.warning(
                "Rate limit exceeded, client blocked",
                action=action.value,
                client_key=client_key,
                blocked_until=_from_ms(blocked_until_ms).isoformat(),
            )
        if escalated_until_ms:
            self._logger.warning(
                "Repeat offender blocked on every endpoint",
                client_key=client_key,
                blocked_until=_from_ms(escalated_until_ms).isoformat(),
            )
        return reply

    async def _ensure_script(self) -> str:
        """Load the Lua script into Redis once and cache the SHA."""
        if self._lua.window_block_sha:
            return self._lua.window_block_sha
        async with self._script_lock:
            if self._lua.window_block_sha:
                return self._lua.window_block_sha
            sha: str = await self.redis.script_load(WINDOW_BLOCK_SCRIPT)
            self._lua.window_block_sha = sha
            return sha

    @staticmethod
    def _open_decision(now: datetime, policy: RateLimitPolicy) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=True,
            remaining_attempts=policy.max_attempts,
            reset_at=now + timedelta(seconds=policy.window_seconds),
            limit=policy.max_attempts,
        )
