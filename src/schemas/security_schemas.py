"""Request/response schemas for the defense-layer endpoints.

Pydantic models for API request validation and response serialization.
Kept separate from domain entities - these are HTTP-layer concerns.

RESTful Endpoints:
    POST   /api/v1/sessions                      - Create session (login)
    DELETE /api/v1/sessions/current              - Delete session (logout)
    GET    /api/v1/csrf-tokens                   - Get CSRF token
    POST   /api/v1/payments                      - Create payment (idempotent)
    POST   /api/v1/webhooks/payments             - Payment provider webhook
    GET    /api/v1/admin/lockouts/{identifier}   - Lockout status
    DELETE /api/v1/admin/lockouts/{identifier}   - Unlock account
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Sessions
# =============================================================================


class SessionCreateRequest(BaseModel):
    """Request schema for session creation (login).

    POST /api/v1/sessions
    Returns: 201 Created
    """

    identifier: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Account identifier (email address)",
        examples=["user@example.com"],
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Account password",
        examples=["SecurePass123!"],
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "identifier": "user@example.com",
                "password": "SecurePass123!",
            }
        }
    )


class SessionCreateResponse(BaseModel):
    """Response schema for session creation (201 Created).

    The session id is also set as an HttpOnly cookie. The CSRF token must be
    echoed in ``X-CSRF-Token`` on every state-changing request.
    """

    session_id: str = Field(..., description="Opaque session identifier")
    csrf_token: str = Field(..., description="CSRF token bound to the session")
    expires_at: datetime = Field(..., description="Session expiry")


# =============================================================================
# CSRF tokens
# =============================================================================


class CSRFTokenResponse(BaseModel):
    """Response schema for GET /api/v1/csrf-tokens."""

    csrf_token: str = Field(..., description="Current CSRF token for the session")
    header_name: str = Field(
        ...,
        description="Header the token must be sent in",
        examples=["X-CSRF-Token"],
    )


# =============================================================================
# Payments
# =============================================================================


class PaymentCreateRequest(BaseModel):
    """Request schema for payment submission.

    POST /api/v1/payments
    Returns: 201 Created (replays carry ``Idempotent-Replayed: true``)
    """

    amount_cents: int = Field(..., gt=0, description="Amount in minor units")
    currency: str = Field(
        ...,
        min_length=3,
        max_length=3,
        description="ISO 4217 currency code",
        examples=["usd"],
    )
    customer_id: str = Field(..., min_length=1, max_length=255)
    invoice_id: str = Field(..., min_length=1, max_length=255)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "amount_cents": 12500,
                "currency": "usd",
                "customer_id": "cus_123",
                "invoice_id": "inv_456",
            }
        }
    )


class PaymentResponse(BaseModel):
    """Response schema for a processed payment."""

    payment_id: str
    status: str
    amount_cents: int
    currency: str


# =============================================================================
# Webhooks
# =============================================================================


class WebhookAcknowledgement(BaseModel):
    """Response schema for accepted provider webhooks."""

    received: bool = True


# =============================================================================
# Admin lockouts
# =============================================================================


class LockoutStatusResponse(BaseModel):
    """Lockout state of one account identifier (admin only)."""

    identifier: str
    failed_attempts: int
    is_locked: bool
    locked_until: datetime | None = None
    last_failed_at: datetime | None = None
