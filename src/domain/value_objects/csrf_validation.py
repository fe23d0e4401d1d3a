"""CSRF validation result value object."""

from dataclasses import dataclass

from src.domain.enums import CSRFFailureReason


@dataclass(frozen=True, slots=True, kw_only=True)
class CSRFValidation:
    """Result of validating one request.

    Attributes:
        valid: Whether the request may proceed.
        error: Failure reason when ``valid`` is False.
        checked: False when the request bypassed verification entirely
            (safe method or exempt path).
    """

    valid: bool
    error: CSRFFailureReason | None = None
    checked: bool = True

    @classmethod
    def bypassed(cls) -> "CSRFValidation":
        """Validation skipped (safe method or exempt endpoint)."""
        return cls(valid=True, checked=False)

    @classmethod
    def passed(cls) -> "CSRFValidation":
        """Token verified."""
        return cls(valid=True)

    @classmethod
    def rejected(cls, reason: CSRFFailureReason) -> "CSRFValidation":
        """Validation failed for ``reason``."""
        return cls(valid=False, error=reason)
