"""Periodic maintenance (expired-record sweeps)."""

from src.infrastructure.maintenance.scheduler import MaintenanceScheduler

__all__ = ["MaintenanceScheduler"]
