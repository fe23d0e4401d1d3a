"""Infrastructure dependency factories.

Application-scoped singletons for core infrastructure services:
- Logging (structlog console adapter)
- Database (async engine + session factory)
- Redis client (only when the rate limiter runs on Redis)
- Rate limiting (in-memory or Redis sliding window)
- CSRF token service
- Password hashing and credential verification (bcrypt)
- Payment gateway

Every factory is cached with ``lru_cache``; tests replace them through
``app.dependency_overrides`` or by calling ``cache_clear()``.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.config import settings
from src.infrastructure.persistence.database import Database

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from src.domain.protocols.credential_verifier_protocol import (
        CredentialVerifierProtocol,
    )
    from src.domain.protocols.csrf_protocol import CSRFProtocol
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.domain.protocols.payment_gateway_protocol import PaymentGatewayProtocol
    from src.domain.protocols.rate_limit_protocol import RateLimitProtocol
    from src.infrastructure.security.bcrypt_password_service import (
        BcryptPasswordService,
    )


# ============================================================================
# Logging
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    - development: human-readable console output
    - testing/ci/production: one JSON object per line
    """
    from src.infrastructure.logging.console_adapter import ConsoleAdapter

    return ConsoleAdapter(
        use_json=not settings.is_development,
        level=settings.log_level,
        service=settings.app_name,
    )


# ============================================================================
# Storage
# ============================================================================


@lru_cache()
def get_database() -> Database:
    """Get database manager singleton (app-scoped).

    Repositories receive ``get_database().session_factory`` and open one
    short session per operation.
    """
    return Database(
        database_url=settings.database_url,
        echo=settings.db_echo,
    )


@lru_cache()
def get_redis() -> "Redis":
    """Get the shared Redis client (app-scoped, pooled)."""
    from redis.asyncio import ConnectionPool, Redis

    pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=20,
        decode_responses=False,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
    )
    return Redis(connection_pool=pool)


# ============================================================================
# Security Services (Application-Scoped)
# ============================================================================


@lru_cache()
def get_rate_limiter() -> "RateLimitProtocol":
    """Get rate limiter singleton (app-scoped).

    Backend follows RATE_LIMIT_BACKEND:
        - 'memory': InMemoryRateLimiter (single instance, swept periodically)
        - 'redis': RedisRateLimiter (shared across instances, TTL-expired)

    Fail-Open Design:
        Store failures never reject requests; the Redis backend answers
        allowed=True and logs a warning.
    """
    from src.infrastructure.rate_limit import (
        InMemoryRateLimiter,
        RedisRateLimiter,
        build_escalation,
        build_policies,
    )

    policies = build_policies(settings)
    escalation = build_escalation(settings)
    if settings.rate_limit_backend == "redis":
        return RedisRateLimiter(
            redis_client=get_redis(),
            policies=policies,
            logger=get_logger(),
            escalation=escalation,
        )
    return InMemoryRateLimiter(
        policies=policies, logger=get_logger(), escalation=escalation
    )


@lru_cache()
def get_csrf_service() -> "CSRFProtocol":
    """Get CSRF token service singleton (app-scoped)."""
    from src.infrastructure.security.csrf_token_service import CSRFTokenService

    return CSRFTokenService(
        logger=get_logger(),
        token_ttl_seconds=settings.csrf_token_ttl_seconds,
        header_name=settings.csrf_header_name,
        exempt_paths=settings.csrf_exempt_paths,
        trusted_origins=settings.csrf_trusted_origins,
    )


@lru_cache()
def get_password_service() -> "BcryptPasswordService":
    """Get password hashing service singleton (app-scoped)."""
    from src.infrastructure.security.bcrypt_password_service import (
        BcryptPasswordService,
    )

    return BcryptPasswordService(cost_factor=settings.bcrypt_rounds)


@lru_cache()
def get_credential_verifier() -> "CredentialVerifierProtocol":
    """Get credential verifier singleton (app-scoped)."""
    from src.infrastructure.security.credential_verifier import (
        DatabaseCredentialVerifier,
    )

    return DatabaseCredentialVerifier(
        session_factory=get_database().session_factory,
        password_service=get_password_service(),
        logger=get_logger(),
    )


@lru_cache()
def get_payment_gateway() -> "PaymentGatewayProtocol":
    """Get payment gateway singleton (app-scoped)."""
    from src.infrastructure.payments import StubPaymentGateway

    return StubPaymentGateway(logger=get_logger())
