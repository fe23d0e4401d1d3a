"""Commands - Write operations that change state.

Commands represent intent to perform an action. They are immutable
dataclasses with imperative names (AuthenticateUser, UnlockAccount).

Each command has a corresponding handler under ``handlers/``.
"""

from src.application.commands.security_commands import (
    AuthenticatedUser,
    AuthenticateUser,
    CreatedSession,
    CreateSession,
    RevokeSession,
    UnlockAccount,
)

__all__ = [
    "AuthenticateUser",
    "AuthenticatedUser",
    "CreateSession",
    "CreatedSession",
    "RevokeSession",
    "UnlockAccount",
]
