"""CSRF token service (adapter) implementing CSRFProtocol.

Issues opaque random tokens bound to session identifiers and verifies them
on state-changing requests.

Storage:
    Process-local map. Tokens do not survive restarts and are not shared
    between serving instances; a client whose token is gone fetches a new
    one from ``GET /api/v1/csrf-tokens``.

Locking model:
    Methods are synchronous and may be called from FastAPI's threadpool, so
    a ``threading.Lock`` guards the session → lock map and each session has
    its own lock. Different sessions never contend beyond the map lookup.
"""

from __future__ import annotations

import hmac
import secrets
import threading
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from src.core.clock import Clock, utc_now
from src.core.constants import SAFE_HTTP_METHODS, TOKEN_BYTES
from src.domain.entities.csrf_token_record import CSRFTokenRecord
from src.domain.enums import CSRFFailureReason
from src.domain.value_objects.csrf_validation import CSRFValidation

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol


class CSRFTokenService:
    """Session-bound CSRF token issuance and verification.

    Args:
        logger: Structured logger.
        token_ttl_seconds: Token lifetime.
        header_name: Request header carrying the token.
        exempt_paths: Paths that bypass validation. An entry ending in "/"
            exempts everything under it; any other entry is an exact path.
        trusted_origins: Allowed ``Origin`` values; empty disables the check.
        clock: Time source (injectable for tests).

    Example:
        >>> service = CSRFTokenService(logger=logger)
        >>> token = service.issue("sess-1")
        >>> service.verify("sess-1", token)
        True
    """

    def __init__(
        self,
        *,
        logger: LoggerProtocol,
        token_ttl_seconds: int = 3600,
        header_name: str = "X-CSRF-Token",
        exempt_paths: Iterable[str] = (),
        trusted_origins: Iterable[str] = (),
        clock: Clock = utc_now,
    ) -> None:
        self._logger = logger
        self._ttl = timedelta(seconds=token_ttl_seconds)
        self._header_name = header_name.lower()
        self._exempt_paths = tuple(exempt_paths)
        self._trusted_origins = frozenset(o.rstrip("/") for o in trusted_origins)
        self._clock = clock
        self._tokens: dict[str, CSRFTokenRecord] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    # -------------------------------------------------------------------------
    # CSRFProtocol implementation
    # -------------------------------------------------------------------------
    def issue(self, session_id: str) -> str:
        """Generate a token, replacing the session's previous one."""
        with self._lock_for(session_id):
            return self._issue_locked(session_id, self._clock())

    def get_or_issue(self, session_id: str) -> str:
        """Return the live token, issuing a fresh one if missing or expired."""
        now = self._clock()
        with self._lock_for(session_id):
            record = self._tokens.get(session_id)
            if record is not None and not record.is_expired(now):
                return record.token
            return self._issue_locked(session_id, now)

    def verify(self, session_id: str, token: str) -> bool:
        """Constant-time comparison against the session's live token."""
        now = self._clock()
        with self._lock_for(session_id):
            record = self._tokens.get(session_id)
            if record is None:
                return False
            if record.is_expired(now):
                del self._tokens[session_id]
                return False
            expected = record.token

        return hmac.compare_digest(expected.encode("utf-8"), token.encode("utf-8"))

    def validate(
        self,
        *,
        method: str,
        path: str,
        headers: Mapping[str, str],
        session_id: str | None,
    ) -> CSRFValidation:
        """Validate one request.

        Order of checks: safe method / exempt path (bypass), session present,
        Origin trusted, token present, token matches.
        """
        if method.upper() in SAFE_HTTP_METHODS or self.is_exempt(path):
            return CSRFValidation.bypassed()

        if not session_id:
            return CSRFValidation.rejected(CSRFFailureReason.MISSING_SESSION)

        lowered = {name.lower(): value for name, value in headers.items()}

        origin = lowered.get("origin")
        if (
            self._trusted_origins
            and origin is not None
            and origin.rstrip("/") not in self._trusted_origins
        ):
            return CSRFValidation.rejected(CSRFFailureReason.ORIGIN_MISMATCH)

        token = lowered.get(self._header_name)
        if not token:
            return CSRFValidation.rejected(CSRFFailureReason.MISSING_TOKEN)

        if not self.verify(session_id, token):
            return CSRFValidation.rejected(CSRFFailureReason.INVALID_TOKEN)

        return CSRFValidation.passed()

    def revoke(self, session_id: str) -> None:
        """Drop the session's token (logout)."""
        with self._lock_for(session_id):
            self._tokens.pop(session_id, None)

    def sweep(self, *, batch_size: int = 500) -> int:
        """Evict expired tokens in batches of ``batch_size`` sessions."""
        session_ids = list(self._tokens)
        evicted = 0
        for start in range(0, len(session_ids), batch_size):
            now = self._clock()
            for session_id in session_ids[start : start + batch_size]:
                with self._lock_for(session_id):
                    record = self._tokens.get(session_id)
                    if record is not None and record.is_expired(now):
                        del self._tokens[session_id]
                        evicted += 1

        with self._guard:
            idle = [
                session_id
                for session_id, lock in self._locks.items()
                if session_id not in self._tokens and not lock.locked()
            ]
            for session_id in idle:
                del self._locks[session_id]

        if evicted:
            self._logger.debug("CSRF token sweep complete", evicted=evicted)
        return evicted

    def is_exempt(self, path: str) -> bool:
        """Whether ``path`` bypasses CSRF validation."""
        return any(
            path.startswith(exempt) if exempt.endswith("/") else path == exempt
            for exempt in self._exempt_paths
        )

    def __len__(self) -> int:
        return len(self._tokens)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = self._locks[session_id] = threading.Lock()
            return lock

    def _issue_locked(self, session_id: str, now: datetime) -> str:
        token = secrets.token_urlsafe(TOKEN_BYTES)
        self._tokens[session_id] = CSRFTokenRecord(
            session_id=session_id,
            token=token,
            expires_at=now + self._ttl,
        )
        self._logger.debug("CSRF token issued", session_id=session_id)
        return token
