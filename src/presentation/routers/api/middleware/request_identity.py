"""Who is making this request.

Helpers shared by the defense middleware and the routers:

- ``client_key``: rate-limit key for the caller (an IP address)
- ``session_id_from``: platform session id (cookie, then header)
- ``caller_scope``: idempotency scope (tenant + verified principal)
- ``resolve``: container lookup that honors ``app.dependency_overrides``,
  so tests can swap the services middleware uses the same way they swap
  route dependencies

Proxy headers:
    ``X-Forwarded-For`` and ``X-Real-IP`` are client-controlled. They are
    honored only while ``settings.trust_proxy_headers`` is true, which is
    correct only when every request arrives through a reverse proxy that
    overwrites them. Exposed directly, any caller could pick its own rate
    limit key by sending a fresh address per request.

Tenant header:
    ``X-Tenant-ID`` is client-supplied and only partitions a principal's
    own records. It never widens access: the principal half of the scope
    comes from a session the store has confirmed, so a caller cannot name
    another caller's principal by sending a session id it does not hold.
"""

import ipaddress
from collections.abc import Callable
from typing import TypeVar

from starlette.requests import Request

from src.core.config import settings
from src.core.constants import SESSION_HEADER, TENANT_HEADER
from src.domain.protocols.session_repository import SessionData

T = TypeVar("T")

DEFAULT_TENANT = "default"
UNKNOWN_CLIENT = "unknown"
MAX_TENANT_LENGTH = 100
MAX_SESSION_ID_LENGTH = 128


def _valid_ip(value: str | None) -> str | None:
    if not value:
        return None
    candidate = value.strip()
    try:
        ipaddress.ip_address(candidate)
    except ValueError:
        return None
    return candidate


def client_key(request: Request, *, trust_proxy_headers: bool | None = None) -> str:
    """Derive the rate-limit key for the caller.

    Order: first ``X-Forwarded-For`` address, ``X-Real-IP``, the connection
    address, then ``"unknown"``. Header values that are not IP addresses are
    ignored.

    Args:
        request: Incoming request.
        trust_proxy_headers: Override for ``settings.trust_proxy_headers``.

    Returns:
        str: Client key.
    """
    trusted = (
        settings.trust_proxy_headers
        if trust_proxy_headers is None
        else trust_proxy_headers
    )
    if trusted:
        forwarded_for = request.headers.get("X-Forwarded-For", "")
        address = _valid_ip(forwarded_for.split(",")[0]) or _valid_ip(
            request.headers.get("X-Real-IP")
        )
        if address:
            return address

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT


def session_id_from(request: Request) -> str | None:
    """Session id from the session cookie, falling back to ``X-Session-ID``.

    Values longer than any issued id are ignored.
    """
    session_id = request.cookies.get(settings.session_cookie_name) or request.headers.get(
        SESSION_HEADER
    )
    if not session_id or len(session_id) > MAX_SESSION_ID_LENGTH:
        return None
    return session_id


def caller_scope(request: Request, *, session: SessionData | None = None) -> str:
    """Idempotency scope: ``tenant:{tenant}|principal:{account or client}``.

    Args:
        request: Incoming request.
        session: The caller's session, already confirmed active by the
            session store. Without one the caller is scoped by client key;
            a session id merely presented in a cookie or header is ignored.

    Returns:
        str: Caller scope.
    """
    tenant = (request.headers.get(TENANT_HEADER) or DEFAULT_TENANT)[:MAX_TENANT_LENGTH]
    principal = session.identifier if session is not None else client_key(request)
    return f"tenant:{tenant}|principal:{principal}"


def resolve(request: Request, factory: Callable[[], T]) -> T:
    """Call ``factory`` or its registered override."""
    override = request.app.dependency_overrides.get(factory, factory)
    return override()
