"""Fixtures for HTTP tests through the FastAPI application.

Every container factory the routes and middleware use is overridden with
in-process doubles, so these tests need neither PostgreSQL nor Redis.

Note: These are synchronous tests using FastAPI's TestClient. The client is
not used as a context manager, so the lifespan (scheduler, table creation)
does not run.
"""

from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from src.application.commands.handlers import (
    AuthenticateUserHandler,
    CreateSessionHandler,
    RevokeSessionHandler,
    UnlockAccountHandler,
)
from src.application.queries.handlers import GetLockoutStatusHandler
from src.application.services.idempotency_guard import IdempotencyGuard
from src.core.config import settings
from src.core.container import (
    get_authenticate_user_handler,
    get_create_session_handler,
    get_csrf_service,
    get_database,
    get_get_lockout_status_handler,
    get_idempotency_guard,
    get_logger,
    get_payment_gateway,
    get_rate_limiter,
    get_revoke_session_handler,
    get_security_event_recorder,
    get_session_repository,
    get_unlock_account_handler,
)
from src.core.result import Success
from src.domain.enums import RateLimitAction
from src.domain.value_objects import RateLimitPolicy
from src.infrastructure.payments import StubPaymentGateway
from src.infrastructure.rate_limit import InMemoryRateLimiter
from src.infrastructure.security.csrf_token_service import CSRFTokenService
from src.main import create_app

PASSWORD = "correct-horse"
IDENTIFIER = "alice@example.com"
LOGIN_ATTEMPTS = 3
LOGIN_BLOCK_SECONDS = 300


class InMemorySessionRepository:
    """Session store double keyed by session id."""

    def __init__(self) -> None:
        self.sessions = {}

    async def create(self, session):
        self.sessions[session.session_id] = session
        return Success(value=None)

    async def find_active(self, session_id, *, now):
        session = self.sessions.get(session_id)
        if session is None or session.is_revoked or session.expires_at <= now:
            return Success(value=None)
        return Success(value=session)

    async def revoke(self, session_id, reason):
        session = self.sessions.get(session_id)
        if session is None or session.is_revoked:
            return Success(value=False)
        self.sessions[session_id] = replace(session, is_revoked=True)
        return Success(value=True)

    async def revoke_all_for_identifier(self, identifier, reason):
        revoked = []
        for session_id, session in self.sessions.items():
            if session.identifier == identifier and not session.is_revoked:
                self.sessions[session_id] = replace(session, is_revoked=True)
                revoked.append(session_id)
        return Success(value=revoked)


class InMemoryIdempotencyRepository:
    """Idempotency store double honoring the (key, caller_scope) rule."""

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
        return Success(value=0)


class FakeDatabase:
    """Health-check double."""

    def __init__(self) -> None:
        self.healthy = True

    async def check_connection(self) -> bool:
        return self.healthy


async def verify_password(identifier: str, password: str) -> bool:
    return identifier == IDENTIFIER and password == PASSWORD


@pytest.fixture
def logger():
    return MagicMock()


@pytest.fixture
def events():
    return AsyncMock()


@pytest.fixture
def lockout_tracker():
    tracker = AsyncMock()
    tracker.is_locked.return_value = False
    return tracker


@pytest.fixture
def verifier():
    verifier = AsyncMock()
    verifier.verify.side_effect = verify_password
    return verifier


@pytest.fixture
def rate_limiter(logger):
    policies = {
        action: RateLimitPolicy(
            max_attempts=10, window_seconds=60, block_duration_seconds=120
        )
        for action in RateLimitAction
    }
    policies[RateLimitAction.LOGIN] = RateLimitPolicy(
        max_attempts=LOGIN_ATTEMPTS,
        window_seconds=60,
        block_duration_seconds=LOGIN_BLOCK_SECONDS,
    )
    return InMemoryRateLimiter(policies=policies, logger=logger)


@pytest.fixture
def csrf(logger):
    return CSRFTokenService(
        logger=logger,
        header_name=settings.csrf_header_name,
        exempt_paths=settings.csrf_exempt_paths,
    )


@pytest.fixture
def session_repository():
    return InMemorySessionRepository()


@pytest.fixture
def gateway(logger):
    return StubPaymentGateway(logger=logger)


@pytest.fixture
def database():
    return FakeDatabase()


@pytest.fixture
def app(
    logger,
    events,
    lockout_tracker,
    verifier,
    rate_limiter,
    csrf,
    session_repository,
    gateway,
    database,
):
    """Application with every guard wired to in-process doubles."""
    application = create_app()
    idempotency_guard = IdempotencyGuard(
        repository=InMemoryIdempotencyRepository(), logger=logger, secret="test-secret"
    )
    application.dependency_overrides.update(
        {
            get_logger: lambda: logger,
            get_database: lambda: database,
            get_rate_limiter: lambda: rate_limiter,
            get_csrf_service: lambda: csrf,
            get_idempotency_guard: lambda: idempotency_guard,
            get_security_event_recorder: lambda: events,
            get_session_repository: lambda: session_repository,
            get_payment_gateway: lambda: gateway,
            get_authenticate_user_handler: lambda: AuthenticateUserHandler(
                lockout_tracker=lockout_tracker,
                credential_verifier=verifier,
                events=events,
            ),
            get_create_session_handler: lambda: CreateSessionHandler(
                session_repository=session_repository
            ),
            get_revoke_session_handler: lambda: RevokeSessionHandler(
                session_repository=session_repository, csrf=csrf, events=events
            ),
            get_unlock_account_handler: lambda: UnlockAccountHandler(
                lockout_tracker=lockout_tracker
            ),
            get_get_lockout_status_handler: lambda: GetLockoutStatusHandler(
                lockout_tracker=lockout_tracker
            ),
        }
    )
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


def login(client: TestClient, password: str = PASSWORD):
    return client.post(
        "/api/v1/sessions", json={"identifier": IDENTIFIER, "password": password}
    )


@pytest.fixture
def signed_in(client):
    """Session id and CSRF token of a fresh login."""
    response = login(client)
    assert response.status_code == 201
    data = response.json()
    return {"session_id": data["session_id"], "csrf_token": data["csrf_token"]}
