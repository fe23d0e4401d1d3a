"""Application services.

Stateful collaborators shared by command handlers and middleware.
"""

from src.application.services.idempotency_guard import IdempotencyGuard
from src.application.services.lockout_tracker import LockoutTracker
from src.application.services.security_event_recorder import SecurityEventRecorder

__all__ = [
    "IdempotencyGuard",
    "LockoutTracker",
    "SecurityEventRecorder",
]
