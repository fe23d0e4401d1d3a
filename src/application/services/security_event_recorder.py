"""Security event recorder.

Writes security events to the durable audit trail and mirrors them to the
structured log. Recording is best effort: a store failure or a store call
that outlives ``store_timeout_seconds`` is logged and the caller's flow
continues unchanged.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from src.core.result import Failure
from src.domain.enums import SecuritySeverity
from src.domain.events.security_events import SecurityEvent

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.domain.protocols.security_event_repository import (
        SecurityEventRepository,
    )


class SecurityEventRecorder:
    """Persist and log security events.

    Args:
        repository: Durable audit trail.
        logger: Structured logger.
        store_timeout_seconds: Upper bound on each store call.
    """

    def __init__(
        self,
        *,
        repository: SecurityEventRepository,
        logger: LoggerProtocol,
        store_timeout_seconds: float = 2.0,
    ) -> None:
        self._repository = repository
        self._logger = logger
        self._timeout = store_timeout_seconds

    async def record(self, event: SecurityEvent) -> None:
        context = {
            "event_type": event.event_type.value,
            "severity": event.severity.value,
            "identifier": event.identifier,
            "ip_address": event.ip_address,
            **event.details,
        }
        if event.severity in (SecuritySeverity.HIGH, SecuritySeverity.CRITICAL):
            self._logger.warning("Security event", **context)
        else:
            self._logger.info("Security event", **context)

        try:
            result = await asyncio.wait_for(
                self._repository.record(event), timeout=self._timeout
            )
        except TimeoutError:
            self._logger.error(
                "Security event store timed out",
                event_type=event.event_type.value,
                timeout_seconds=self._timeout,
            )
            return

        if isinstance(result, Failure):
            self._logger.error(
                "Security event not persisted",
                event_type=event.event_type.value,
                error_code=result.error.code.value,
                error_message=result.error.message,
            )
