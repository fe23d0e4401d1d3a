"""Idempotency value objects.

``IdempotentResponse`` is what a wrapped handler produces and what the
store keeps; ``IdempotencyOutcome`` is what the guard hands back, tagged
with whether it was replayed.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class IdempotentResponse:
    """A handler response captured for replay.

    Attributes:
        status_code: HTTP status of the first execution.
        body: Raw response bytes, replayed byte-for-byte.
        content_type: Media type of the body.
    """

    status_code: int
    body: bytes
    content_type: str = "application/json"

    @property
    def is_cacheable(self) -> bool:
        """Server errors are never stored so the client can retry them."""
        return self.status_code < 500


@dataclass(frozen=True, slots=True, kw_only=True)
class IdempotencyOutcome:
    """Outcome of ``IdempotencyGuard.execute``.

    Attributes:
        response: The single observed response for this key.
        replayed: True when the response came from the store rather than
            from this call's own handler execution.
    """

    response: IdempotentResponse
    replayed: bool

    @property
    def status_code(self) -> int:
        """Shortcut to the response status."""
        return self.response.status_code

    @property
    def body(self) -> bytes:
        """Shortcut to the response body."""
        return self.response.body
