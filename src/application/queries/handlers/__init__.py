"""Query handlers."""

from src.application.queries.handlers.get_lockout_status_handler import (
    GetLockoutStatusHandler,
)

__all__ = ["GetLockoutStatusHandler"]
