"""Idempotency guard (application service).

Gives retried mutations exactly one observed response per
``(key, caller_scope)``. The first successful execution is stored in the
durable store; later calls with the same key replay it byte-for-byte
without running the handler again.

Guarantees:
    - Within one process, concurrent calls for the same key are coalesced
      on a per-key lock: the handler runs once.
    - Across processes, the store's uniqueness constraint decides the
      winner; a loser discards its own result and replays the winner's.
      Both handlers may have run, so side effects that leave the process
      (payment charges) must also carry the key to the provider.
    - 5xx responses are never stored, so clients can retry them.

Failure policy (fail open):
    A store failure or timeout during lookup runs the handler unprotected.
    A failure during insert is logged and the handler's own response is
    returned.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from src.core.clock import Clock, utc_now
from src.core.constants import IDEMPOTENCY_BODY_CAP_BYTES
from src.core.result import Failure, Success
from src.domain.entities.idempotency_record import IdempotencyRecord
from src.domain.value_objects.idempotency import IdempotencyOutcome, IdempotentResponse

if TYPE_CHECKING:
    from src.domain.protocols.idempotency_repository import IdempotencyRepository
    from src.domain.protocols.logger_protocol import LoggerProtocol

type IdempotentHandler = Callable[[], Awaitable[IdempotentResponse]]

DERIVED_KEY_PREFIX = "derived:"


@dataclass(slots=True)
class _InFlight:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    waiters: int = 0


def request_fingerprint(body: bytes) -> str:
    """SHA-256 hex digest of a request body."""
    return hashlib.sha256(body).hexdigest()


class IdempotencyGuard:
    """Execute-once wrapper around mutation handlers.

    Args:
        repository: Durable idempotency store.
        logger: Structured logger.
        secret: HMAC key for server-derived keys.
        ttl_seconds: How long a stored response stays replayable.
        store_timeout_seconds: Upper bound on each store call.
        max_body_bytes: Larger response bodies are returned but not stored.
        clock: Time source (injectable for tests).

    Example:
        >>> outcome = await guard.execute(
        ...     key="order-123",
        ...     caller_scope="tenant:acme|principal:sess-1",
        ...     handler=charge_card,
        ... )
        >>> outcome.replayed
        False
    """

    def __init__(
        self,
        *,
        repository: IdempotencyRepository,
        logger: LoggerProtocol,
        secret: str,
        ttl_seconds: int = 86400,
        max_body_bytes: int = IDEMPOTENCY_BODY_CAP_BYTES,
        store_timeout_seconds: float = 2.0,
        clock: Clock = utc_now,
    ) -> None:
        self._repository = repository
        self._logger = logger
        self._secret = secret.encode("utf-8")
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_body_bytes = max_body_bytes
        self._timeout = store_timeout_seconds
        self._clock = clock
        self._inflight: dict[tuple[str, str], _InFlight] = {}

    def derive_key(
        self,
        *,
        method: str,
        path: str,
        body: bytes,
        caller_scope: str,
    ) -> str:
        """Server-side key for requests without an ``Idempotency-Key`` header.

        Identical method, path, scope and body always derive the same key.
        """
        message = "\n".join(
            (method.upper(), path, caller_scope, request_fingerprint(body))
        ).encode("utf-8")
        digest = hmac.new(self._secret, message, hashlib.sha256).hexdigest()
        return f"{DERIVED_KEY_PREFIX}{digest}"

    async def execute(
        self,
        *,
        key: str,
        caller_scope: str,
        handler: IdempotentHandler,
        request_method: str = "",
        request_path: str = "",
        request_params: str = "",
    ) -> IdempotencyOutcome:
        """Run ``handler`` at most once per key, replaying the stored response.

        Exceptions raised by ``handler`` propagate and nothing is stored.
        """
        async with self._coalesced((key, caller_scope)):
            stored = await self._lookup(key, caller_scope)
            if stored is not None:
                if request_params and stored.request_params != request_params:
                    self._logger.warning(
                        "Idempotency key reused with a different request",
                        key=key,
                        caller_scope=caller_scope,
                        request_path=request_path,
                    )
                self._logger.debug(
                    "Idempotent response replayed", key=key, caller_scope=caller_scope
                )
                return IdempotencyOutcome(response=stored.response, replayed=True)

            response = await handler()
            if not response.is_cacheable or len(response.body) > self._max_body_bytes:
                return IdempotencyOutcome(response=response, replayed=False)

            now = self._clock()
            record = IdempotencyRecord(
                key=key,
                caller_scope=caller_scope,
                request_method=request_method,
                request_path=request_path,
                request_params=request_params,
                response=response,
                created_at=now,
                expires_at=now + self._ttl,
            )
            if await self._insert(record):
                return IdempotencyOutcome(response=response, replayed=False)

            # Another process stored a response first; its response wins.
            winner = await self._lookup(key, caller_scope)
            if winner is None:
                return IdempotencyOutcome(response=response, replayed=False)
            self._logger.info(
                "Idempotency race lost, replaying stored response",
                key=key,
                caller_scope=caller_scope,
            )
            return IdempotencyOutcome(response=winner.response, replayed=True)

    async def sweep(self, *, batch_size: int = 500) -> int:
        """Delete expired records batch by batch until none remain.

        A failed or timed-out batch ends the pass; the next pass resumes.
        """
        deleted = 0
        while True:
            now = self._clock()
            try:
                result = await asyncio.wait_for(
                    self._repository.delete_expired(now=now, batch_size=batch_size),
                    timeout=self._timeout,
                )
            except TimeoutError:
                self._logger.error(
                    "Idempotency sweep timed out",
                    timeout_seconds=self._timeout,
                    deleted=deleted,
                )
                break
            match result:
                case Success(value=count):
                    deleted += count
                    if count < batch_size:
                        break
                case Failure(error=error):
                    self._logger.error(
                        "Idempotency sweep failed",
                        error_code=error.code.value,
                        error_message=error.message,
                        deleted=deleted,
                    )
                    break

        if deleted:
            self._logger.debug("Idempotency sweep complete", deleted=deleted)
        return deleted

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    @asynccontextmanager
    async def _coalesced(self, slot: tuple[str, str]) -> AsyncIterator[None]:
        entry = self._inflight.get(slot)
        if entry is None:
            entry = self._inflight[slot] = _InFlight()
        entry.waiters += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.waiters -= 1
            if entry.waiters == 0:
                del self._inflight[slot]

    async def _lookup(self, key: str, caller_scope: str) -> IdempotencyRecord | None:
        """Stored record, or None on miss or store failure (fail open)."""
        try:
            result = await asyncio.wait_for(
                self._repository.find(key, caller_scope, now=self._clock()),
                timeout=self._timeout,
            )
        except TimeoutError:
            self._logger.warning(
                "Idempotency lookup timed out, executing unprotected",
                key=key,
                caller_scope=caller_scope,
            )
            return None

        match result:
            case Success(value=record):
                return record
            case Failure(error=error):
                self._logger.warning(
                    "Idempotency lookup failed, executing unprotected",
                    key=key,
                    caller_scope=caller_scope,
                    error_code=error.code.value,
                    error_message=error.message,
                )
                return None

    async def _insert(self, record: IdempotencyRecord) -> bool:
        """Store the record; False only when another writer already did."""
        try:
            result = await asyncio.wait_for(
                self._repository.insert(record), timeout=self._timeout
            )
        except TimeoutError:
            self._logger.error(
                "Idempotency store timed out, response not stored",
                key=record.key,
                caller_scope=record.caller_scope,
            )
            return True

        match result:
            case Success(value=inserted):
                return inserted
            case Failure(error=error):
                self._logger.error(
                    "Idempotency store failed, response not stored",
                    key=record.key,
                    caller_scope=record.caller_scope,
                    error_code=error.code.value,
                    error_message=error.message,
                )
                return True
