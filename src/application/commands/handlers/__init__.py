"""Command handlers."""

from src.application.commands.handlers.authenticate_user_handler import (
    AuthenticateUserHandler,
    AuthenticationFailure,
)
from src.application.commands.handlers.create_session_handler import (
    CreateSessionHandler,
)
from src.application.commands.handlers.revoke_session_handler import (
    RevokeSessionHandler,
)
from src.application.commands.handlers.unlock_account_handler import (
    UnlockAccountHandler,
)

__all__ = [
    "AuthenticateUserHandler",
    "AuthenticationFailure",
    "CreateSessionHandler",
    "RevokeSessionHandler",
    "UnlockAccountHandler",
]
