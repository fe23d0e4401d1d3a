"""Maintenance scheduler for expired-record sweeps.

Explicitly constructed and owned by the FastAPI lifespan: ``start()`` on
startup, ``stop()`` on shutdown. Tests call ``run_once()`` directly instead
of waiting for the interval.

Usage:
    scheduler = MaintenanceScheduler(interval_seconds=300, logger=logger)
    scheduler.register("rate_limit", lambda: rate_limiter.sweep(batch_size=500))
    await scheduler.start()
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol

type SweepJob = Callable[[], Awaitable[int]]


class MaintenanceScheduler:
    """Run every registered sweep on a fixed interval.

    A failing sweep is logged and never stops the others or the loop.

    Args:
        interval_seconds: Seconds between runs.
        logger: Structured logger.
    """

    def __init__(self, *, interval_seconds: float, logger: LoggerProtocol) -> None:
        self._interval = interval_seconds
        self._logger = logger
        self._jobs: dict[str, SweepJob] = {}
        self._task: asyncio.Task[None] | None = None

    def register(self, name: str, job: SweepJob) -> None:
        """Add a sweep; a second registration under ``name`` replaces the first."""
        self._jobs[name] = job

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background loop (no-op if already running)."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop(), name="maintenance-scheduler")
        self._logger.info(
            "Maintenance scheduler started",
            interval_seconds=self._interval,
            jobs=sorted(self._jobs),
        )

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self._logger.info("Maintenance scheduler stopped")

    async def run_once(self) -> dict[str, int]:
        """Run every sweep once.

        Returns:
            Records evicted per job name; failed jobs report -1.
        """
        results: dict[str, int] = {}
        for name, job in self._jobs.items():
            try:
                results[name] = await job()
            except Exception as e:
                # One broken store must not stop the remaining sweeps.
                self._logger.error("Maintenance sweep failed", error=e, job=name)
                results[name] = -1

        evicted = sum(count for count in results.values() if count > 0)
        if evicted:
            self._logger.info("Maintenance sweep complete", evicted=evicted, jobs=results)
        return results

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.run_once()
