"""Centralized constants for internal implementation details.

This module contains constants that are internal implementation details,
NOT environment-specific configuration. For environment-specific settings,
use `src/core/config.py` instead.

Example:
    >>> from src.core.constants import TOKEN_BYTES
    >>> token = secrets.token_urlsafe(TOKEN_BYTES)
"""

# =============================================================================
# Token Lengths
# =============================================================================

TOKEN_BYTES: int = 32
"""Number of random bytes behind CSRF tokens and session identifiers (256 bits)."""


# =============================================================================
# HTTP
# =============================================================================

SAFE_HTTP_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "OPTIONS"})
"""Methods that never change state and therefore bypass CSRF validation."""

MUTATING_HTTP_METHODS: frozenset[str] = frozenset({"POST", "PUT", "PATCH", "DELETE"})
"""Methods that are rate limited and eligible for idempotent replay."""

IDEMPOTENCY_KEY_HEADER: str = "Idempotency-Key"
"""Request header carrying a client-supplied idempotency key."""

IDEMPOTENT_REPLAY_HEADER: str = "Idempotent-Replayed"
"""Response header marking a replayed response (observability only)."""

ADMIN_KEY_HEADER: str = "X-Admin-Key"
"""Request header carrying the administrative API key."""

TENANT_HEADER: str = "X-Tenant-ID"
"""Request header naming the tenant a request acts for."""

SESSION_HEADER: str = "X-Session-ID"
"""Fallback header for the session identifier when cookies are unavailable."""

WEBHOOK_SIGNATURE_HEADER: str = "X-Webhook-Signature"
"""HMAC-SHA256 hex signature sent by the payment provider."""

SKIPPED_PATH_PREFIXES: tuple[str, ...] = (
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
)
"""Paths that no guard inspects."""


# =============================================================================
# Limits
# =============================================================================

MAX_IDEMPOTENCY_KEY_LENGTH: int = 255
"""Longest client-supplied idempotency key accepted."""

IDEMPOTENCY_BODY_CAP_BYTES: int = 1_048_576
"""Largest response body stored for replay (1 MiB); larger responses are not cached."""
