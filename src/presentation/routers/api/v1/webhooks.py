"""Webhooks resource router.

Endpoints:
    POST /api/v1/webhooks/payments - Payment provider callback

Webhooks are CSRF-exempt (no browser session); authenticity comes from the
HMAC-SHA256 signature over the raw body in ``X-Webhook-Signature``
(hex, optionally prefixed ``sha256=``), keyed with
``settings.webhook_secret``.
"""

import hashlib
import hmac
import json

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.constants import WEBHOOK_SIGNATURE_HEADER
from src.core.container import get_logger
from src.domain.protocols import LoggerProtocol
from src.presentation.routers.api.v1.errors import ErrorResponseBuilder, ProblemDetails
from src.schemas.security_schemas import WebhookAcknowledgement

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


def sign_payload(body: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of ``body``."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def signature_matches(body: bytes, signature: str | None, secret: str) -> bool:
    """Constant-time check of a webhook signature."""
    if not signature:
        return False
    provided = signature.strip().removeprefix("sha256=")
    return hmac.compare_digest(
        sign_payload(body, secret).encode("utf-8"), provided.encode("utf-8")
    )


@router.post(
    "/payments",
    response_model=WebhookAcknowledgement,
    responses={
        400: {"description": "Malformed payload", "model": ProblemDetails},
        401: {"description": "Bad signature", "model": ProblemDetails},
    },
    summary="Receive payment webhook",
)
async def receive_payment_webhook(
    request: Request,
    logger: LoggerProtocol = Depends(get_logger),
) -> WebhookAcknowledgement | JSONResponse:
    body = await request.body()
    if not signature_matches(
        body, request.headers.get(WEBHOOK_SIGNATURE_HEADER), settings.webhook_secret
    ):
        logger.warning("Webhook signature rejected", path=request.url.path)
        return ErrorResponseBuilder.from_status(
            request=request,
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid signature",
        )

    try:
        payload = json.loads(body)
    except ValueError:
        return ErrorResponseBuilder.from_status(
            request=request,
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Malformed payload",
        )

    event_type = payload.get("type") if isinstance(payload, dict) else None
    logger.info("Payment webhook received", event_type=event_type)
    return WebhookAcknowledgement()
