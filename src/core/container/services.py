"""Application service factories (app-scoped singletons)."""

import asyncio
from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.config import settings
from src.core.container.infrastructure import (
    get_csrf_service,
    get_logger,
    get_rate_limiter,
)
from src.core.container.repositories import (
    get_idempotency_repository,
    get_lockout_repository,
    get_security_event_repository,
    get_session_repository,
)

if TYPE_CHECKING:
    from src.application.services import (
        IdempotencyGuard,
        LockoutTracker,
        SecurityEventRecorder,
    )
    from src.infrastructure.maintenance import MaintenanceScheduler


@lru_cache()
def get_security_event_recorder() -> "SecurityEventRecorder":
    from src.application.services import SecurityEventRecorder

    return SecurityEventRecorder(
        repository=get_security_event_repository(),
        logger=get_logger(),
        store_timeout_seconds=settings.durable_store_timeout_seconds,
    )


@lru_cache()
def get_lockout_tracker() -> "LockoutTracker":
    """Get lockout tracker singleton, configured from settings."""
    from src.application.services import LockoutTracker

    return LockoutTracker(
        repository=get_lockout_repository(),
        session_repository=get_session_repository(),
        events=get_security_event_recorder(),
        logger=get_logger(),
        threshold=settings.lockout_threshold,
        lockout_duration_seconds=settings.lockout_duration_seconds,
        store_timeout_seconds=settings.durable_store_timeout_seconds,
    )


@lru_cache()
def get_idempotency_guard() -> "IdempotencyGuard":
    """Get idempotency guard singleton, configured from settings."""
    from src.application.services import IdempotencyGuard

    return IdempotencyGuard(
        repository=get_idempotency_repository(),
        logger=get_logger(),
        secret=settings.idempotency_secret,
        ttl_seconds=settings.idempotency_ttl_seconds,
        store_timeout_seconds=settings.durable_store_timeout_seconds,
    )


@lru_cache()
def get_maintenance_scheduler() -> "MaintenanceScheduler":
    """Get the scheduler with every expiring store registered.

    The lifespan starts and stops it; nothing runs until then.
    """
    from src.infrastructure.maintenance import MaintenanceScheduler

    batch_size = settings.sweep_batch_size
    rate_limiter = get_rate_limiter()
    csrf = get_csrf_service()
    guard = get_idempotency_guard()

    scheduler = MaintenanceScheduler(
        interval_seconds=settings.sweep_interval_seconds,
        logger=get_logger(),
    )
    scheduler.register("rate_limit", lambda: rate_limiter.sweep(batch_size=batch_size))
    scheduler.register(
        "csrf", lambda: asyncio.to_thread(csrf.sweep, batch_size=batch_size)
    )
    scheduler.register("idempotency", lambda: guard.sweep(batch_size=batch_size))
    return scheduler
