"""In-memory rate limiter implementing RateLimitProtocol.

Process-local attempt counters with escalating blocks. The default backend
for a single serving instance; use RedisRateLimiter when several instances
must share counters.

Locking model:
    - ``_guard`` protects the key → lock map only
    - each ``(action, client_key)`` has its own ``asyncio.Lock`` so calls for
      the same key are linearized and different keys never contend
    - critical sections contain no awaits besides lock acquisition
    - the offender map is only touched in await-free sections

Usage:
    limiter = InMemoryRateLimiter(policies=build_policies(settings), logger=logger)
    result = await limiter.check(client_key="203.0.113.7", action=RateLimitAction.LOGIN)
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING

from src.core.clock import Clock, utc_now
from src.core.result import Result, Success
from src.domain.entities.offender_record import OffenderRecord
from src.domain.entities.rate_limit_record import RateLimitRecord
from src.domain.enums import RateLimitAction
from src.domain.errors import RateLimitError
from src.domain.value_objects.rate_limit_policy import (
    EscalationPolicy,
    RateLimitDecision,
    RateLimitPolicy,
)

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol

type _Key = tuple[RateLimitAction, str]


class InMemoryRateLimiter:
    """Window-with-block rate limiter over a process-local map.

    An allowed ``check`` reserves one attempt; the matching ``record``
    settles it. A burst of concurrent checks therefore never gets more than
    ``max_attempts`` through. Recording the last attempt of the budget
    starts the block. A recorded login success deletes the client's record
    outright.

    Args:
        policies: One policy per action.
        logger: Structured logger.
        clock: Time source (injectable for tests).
        escalation: Repeat offender rules.
    """

    def __init__(
        self,
        *,
        policies: Mapping[RateLimitAction, RateLimitPolicy],
        logger: LoggerProtocol,
        clock: Clock = utc_now,
        escalation: EscalationPolicy | None = None,
    ) -> None:
        self._policies = dict(policies)
        self._logger = logger
        self._clock = clock
        self._escalation = escalation or EscalationPolicy()
        self._exempt = frozenset().union(*(p.whitelist for p in self._policies.values()))
        self._records: dict[_Key, RateLimitRecord] = {}
        self._offenders: dict[str, OffenderRecord] = {}
        self._locks: dict[_Key, asyncio.Lock] = {}
        self._guard = asyncio.Lock()

    # -------------------------------------------------------------------------
    # RateLimitProtocol implementation
    # -------------------------------------------------------------------------
    async def check(
        self,
        *,
        client_key: str,
        action: RateLimitAction,
    ) -> Result[RateLimitDecision, RateLimitError]:
        """Decide whether the client may attempt ``action`` now."""
        policy = self._policies[action]
        now = self._clock()

        if policy.is_whitelisted(client_key):
            return Success(value=self._fresh_decision(now, policy))

        key = (action, client_key)
        async with await self._lock_for(key):
            record = self._live_record(key, now, policy)
            if record is None:
                record = self._records[key] = RateLimitRecord(
                    action=action, client_key=client_key, window_start=now
                )

            if record.is_blocked(now):
                return Success(value=self._denied(record, policy))

            if record.remaining(policy) == 0:
                self._start_block(record, now, policy)
                return Success(value=self._denied(record, policy))

            available = record.available(policy)
            if available == 0:
                # Budget fully reserved by requests still running.
                return Success(value=self._denied(record, policy))

            record.in_flight += 1
            return Success(
                value=RateLimitDecision(
                    allowed=True,
                    remaining_attempts=available,
                    reset_at=record.window_end(policy),
                    limit=policy.max_attempts,
                )
            )

    async def record(
        self,
        *,
        client_key: str,
        action: RateLimitAction,
        success: bool,
    ) -> Result[None, RateLimitError]:
        """Count one attempt, or clear the record on a login success.

        Releases the reservation taken by ``check`` and blocks the client as
        soon as the attempts reach the policy maximum.
        """
        policy = self._policies[action]
        if policy.is_whitelisted(client_key):
            return Success(value=None)

        now = self._clock()
        key = (action, client_key)
        async with await self._lock_for(key):
            if success and action.resets_on_success:
                if self._records.pop(key, None) is not None:
                    self._logger.debug(
                        "Rate limit record cleared after success",
                        action=action.value,
                        client_key=client_key,
                    )
                return Success(value=None)

            record = self._live_record(key, now, policy)
            if record is None:
                record = self._records[key] = RateLimitRecord(
                    action=action, client_key=client_key, window_start=now
                )
            record.in_flight = max(0, record.in_flight - 1)
            record.attempts += 1
            if record.remaining(policy) == 0 and not record.is_blocked(now):
                self._start_block(record, now, policy)

        return Success(value=None)

    async def blocked_until(
        self, *, client_key: str
    ) -> Result[datetime | None, RateLimitError]:
        """End of the client-wide repeat offender block, if one is active."""
        now = self._clock()
        offender = self._live_offender(client_key, now)
        if offender is None or not offender.is_blocked(now):
            return Success(value=None)
        return Success(value=offender.blocked_until)

    async def sweep(self, *, batch_size: int = 500) -> int:
        """Evict records whose window and block have both elapsed.

        Walks a snapshot of keys in batches; each key's lock is held only
        while that key is examined. Stale offender records go too.
        """
        keys = list(self._records)
        evicted = 0
        for start in range(0, len(keys), batch_size):
            now = self._clock()
            for key in keys[start : start + batch_size]:
                async with await self._lock_for(key):
                    record = self._records.get(key)
                    if record is not None and record.is_purgeable(
                        now, self._policies[key[0]]
                    ):
                        del self._records[key]
                        evicted += 1
            # Yield between batches.
            await asyncio.sleep(0)

        now = self._clock()
        for client_key in list(self._offenders):
            self._live_offender(client_key, now)

        await self._drop_idle_locks()

        if evicted:
            self._logger.debug("Rate limit sweep complete", evicted=evicted)
        return evicted

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._records)

    async def _lock_for(self, key: _Key) -> asyncio.Lock:
        async with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = asyncio.Lock()
            return lock

    async def _drop_idle_locks(self) -> None:
        async with self._guard:
            idle = [
                key
                for key, lock in self._locks.items()
                if key not in self._records and not lock.locked()
            ]
            for key in idle:
                del self._locks[key]

    def _live_record(
        self, key: _Key, now: datetime, policy: RateLimitPolicy
    ) -> RateLimitRecord | None:
        """Current record, dropping it first if purgeable or its block ended.

        A client whose block has run out starts a fresh window.
        Caller must hold the key's lock.
        """
        record = self._records.get(key)
        if record is None:
            return None
        block_ended = record.blocked_until is not None and not record.is_blocked(now)
        if record.is_purgeable(now, policy) or block_ended:
            del self._records[key]
            return None
        return record

    def _live_offender(self, client_key: str, now: datetime) -> OffenderRecord | None:
        offender = self._offenders.get(client_key)
        if offender is not None and offender.is_stale(now, self._escalation):
            del self._offenders[client_key]
            return None
        return offender

    def _start_block(
        self, record: RateLimitRecord, now: datetime, policy: RateLimitPolicy
    ) -> None:
        """Block the record and count the offense against its client."""
        blocked_until = record.block(now, policy)
        self._logger.warning(
            "Rate limit exceeded, client blocked",
            action=record.action.value,
            client_key=record.client_key,
            attempts=record.attempts,
            blocked_until=blocked_until.isoformat(),
        )
        if record.client_key in self._exempt:
            return

        offender = self._live_offender(record.client_key, now)
        if offender is None:
            offender = self._offenders[record.client_key] = OffenderRecord(
                client_key=record.client_key, first_offense_at=now
            )
        escalated_until = offender.add_offense(now, policy, self._escalation)
        if escalated_until is not None:
            self._logger.warning(
                "Repeat offender blocked on every endpoint",
                client_key=record.client_key,
                offenses=offender.offenses,
                blocked_until=escalated_until.isoformat(),
            )

    @staticmethod
    def _fresh_decision(now: datetime, policy: RateLimitPolicy) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=True,
            remaining_attempts=policy.max_attempts,
            reset_at=now + policy.window,
            limit=policy.max_attempts,
        )

    @staticmethod
    def _denied(record: RateLimitRecord, policy: RateLimitPolicy) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=False,
            remaining_attempts=0,
            reset_at=record.window_end(policy),
            limit=policy.max_attempts,
            blocked_until=record.blocked_until,
        )
