"""Request/response schemas for API endpoints.

All Pydantic models for HTTP request validation and response serialization.
Schemas are kept separate from domain entities (HTTP-layer concerns only).

Usage:
    from src.schemas import SessionCreateRequest, PaymentResponse
"""

from src.schemas.security_schemas import (
    CSRFTokenResponse,
    LockoutStatusResponse,
    PaymentCreateRequest,
    PaymentResponse,
    SessionCreateRequest,
    SessionCreateResponse,
    WebhookAcknowledgement,
)

__all__ = [
    "CSRFTokenResponse",
    "LockoutStatusResponse",
    "PaymentCreateRequest",
    "PaymentResponse",
    "SessionCreateRequest",
    "SessionCreateResponse",
    "WebhookAcknowledgement",
]
