"""LoggerProtocol definition for structured logging.

Every guard logs through this port so the backend (structlog console/JSON)
stays swappable. Implementations MUST emit structured key-value context.

Log Levels:
    - DEBUG: per-request guard decisions (allowed checks, cache hits)
    - INFO: normal security events (token issued, record stored)
    - WARNING: rejections and fail-open degradations
    - ERROR: store failures, fail-closed decisions
    - CRITICAL: failures that disable a defense entirely

Security:
    - NEVER log passwords, CSRF tokens, admin keys or idempotency bodies
    - Identifiers and client keys are acceptable context

Usage:
    from src.core.container import get_logger

    logger = get_logger()
    logger.warning("Rate limit exceeded", action="login", client_key=client_key)

    request_logger = logger.bind(path=request.url.path)
    request_logger.info("CSRF token issued")
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters.

    All logging calls MUST be structured: message + key-value context.
    """

    def debug(self, message: str, /, **context: Any) -> None:
        """Log a debug-level message.

        Args:
            message: Human-readable message (avoid f-strings; use context).
            **context: Structured key-value context fields.
        """
        ...

    def info(self, message: str, /, **context: Any) -> None:
        """Log an info-level message.

        Args:
            message: Human-readable message (avoid f-strings; use context).
            **context: Structured key-value context fields.
        """
        ...

    def warning(self, message: str, /, **context: Any) -> None:
        """Log a warning-level message.

        Args:
            message: Human-readable message (avoid f-strings; use context).
            **context: Structured key-value context fields.
        """
        ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error-level message with optional exception details.

        Args:
            message: Human-readable message.
            error: Optional exception; adapters add error_type/error_message.
            **context: Structured key-value context fields.
        """
        ...

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log a critical-level message.

        Args:
            message: Human-readable message.
            error: Optional exception; adapters add error_type/error_message.
            **context: Structured key-value context fields.
        """
        ...

    def bind(self, **context: Any) -> LoggerProtocol:
        """Return new logger with permanently bound context.

        Args:
            **context: Context to bind to all future logs.

        Returns:
            New logger instance; the original is unchanged.
        """
        ...

    def with_context(self, **context: Any) -> LoggerProtocol:
        """Alias for bind().

        Args:
            **context: Context to bind to all future logs.

        Returns:
            New logger instance with bound context.
        """
        ...
