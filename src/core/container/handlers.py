"""Handler dependency factories.

Handlers are stateless wrappers over app-scoped services, so a new instance
per request is cheap. Presentation code injects them with ``Depends``.
"""

from typing import TYPE_CHECKING

from src.core.config import settings
from src.core.container.infrastructure import (
    get_credential_verifier,
    get_csrf_service,
)
from src.core.container.repositories import get_session_repository
from src.core.container.services import (
    get_lockout_tracker,
    get_security_event_recorder,
)

if TYPE_CHECKING:
    from src.application.commands.handlers import (
        AuthenticateUserHandler,
        CreateSessionHandler,
        RevokeSessionHandler,
        UnlockAccountHandler,
    )
    from src.application.queries.handlers import GetLockoutStatusHandler


def get_authenticate_user_handler() -> "AuthenticateUserHandler":
    from src.application.commands.handlers import AuthenticateUserHandler

    return AuthenticateUserHandler(
        lockout_tracker=get_lockout_tracker(),
        credential_verifier=get_credential_verifier(),
        events=get_security_event_recorder(),
    )


def get_create_session_handler() -> "CreateSessionHandler":
    from src.application.commands.handlers import CreateSessionHandler

    return CreateSessionHandler(
        session_repository=get_session_repository(),
        session_ttl_seconds=settings.session_ttl_seconds,
    )


def get_revoke_session_handler() -> "RevokeSessionHandler":
    from src.application.commands.handlers import RevokeSessionHandler

    return RevokeSessionHandler(
        session_repository=get_session_repository(),
        csrf=get_csrf_service(),
        events=get_security_event_recorder(),
    )


def get_unlock_account_handler() -> "UnlockAccountHandler":
    from src.application.commands.handlers import UnlockAccountHandler

    return UnlockAccountHandler(lockout_tracker=get_lockout_tracker())


def get_get_lockout_status_handler() -> "GetLockoutStatusHandler":
    from src.application.queries.handlers import GetLockoutStatusHandler

    return GetLockoutStatusHandler(lockout_tracker=get_lockout_tracker())
