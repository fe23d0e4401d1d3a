"""Time source shared by the guard components.

All guards read "now" through an injected ``Clock`` so tests can drive
window expiry, block expiry and token expiry without sleeping or patching
the interpreter clock.

Usage:
    from src.core.clock import Clock, utc_now

    class Guard:
        def __init__(self, *, clock: Clock = utc_now) -> None:
            self._clock = clock
"""

from collections.abc import Callable
from datetime import UTC, datetime

type Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from the store.

    SQLite drops timezone information on round trip; PostgreSQL keeps it.

    Args:
        value: Datetime from a database row (may be naive or None).

    Returns:
        Timezone-aware datetime in UTC, or None.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
