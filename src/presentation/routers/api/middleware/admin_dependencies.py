"""Administrative access dependency.

The unlock and lockout-status endpoints are the only privileged operations.
Callers present ``settings.admin_api_key`` in ``X-Admin-Key``; the compare
is constant-time. Any mismatch is a 403 "Forbidden".

Usage:
    @router.delete("/{identifier}", dependencies=[Depends(require_admin_key)])
    async def unlock(...): ...
"""

import hmac
from typing import Annotated

from fastapi import Header, HTTPException, status

from src.core.config import settings
from src.core.constants import ADMIN_KEY_HEADER


async def require_admin_key(
    x_admin_key: Annotated[str | None, Header(alias=ADMIN_KEY_HEADER)] = None,
) -> str:
    """Reject the request unless it carries the admin key.

    Returns:
        str: Audit label for the caller (never the key itself).

    Raises:
        HTTPException: 403 when the key is missing or wrong.
    """
    if x_admin_key is None or not hmac.compare_digest(
        x_admin_key.encode("utf-8"), settings.admin_api_key.encode("utf-8")
    ):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return "admin_api_key"
