"""Payments resource router.

Endpoints:
    POST /api/v1/payments - Submit a payment (idempotent)

Runs behind the CSRF, payment rate limit and idempotency middleware. The
idempotency key chosen by the middleware is forwarded to the payment
provider so a charge is deduplicated even when two instances race.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from uuid_extensions import uuid7

from src.application.errors import ApplicationError, ApplicationErrorCode
from src.core.container import get_logger, get_payment_gateway
from src.core.result import Failure, Success
from src.domain.protocols import LoggerProtocol, PaymentGatewayProtocol
from src.domain.protocols.session_repository import SessionData
from src.presentation.routers.api.middleware.session_dependencies import (
    require_session,
)
from src.presentation.routers.api.v1.errors import ErrorResponseBuilder, ProblemDetails
from src.schemas.security_schemas import PaymentCreateRequest, PaymentResponse

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=PaymentResponse,
    responses={
        401: {"description": "No live session", "model": ProblemDetails},
        403: {"description": "CSRF validation failed", "model": ProblemDetails},
        429: {"description": "Too many attempts", "model": ProblemDetails},
        502: {"description": "Payment provider rejected the charge", "model": ProblemDetails},
    },
    summary="Create payment",
    description="Charge a customer. Retries with the same Idempotency-Key replay the first response.",
)
async def create_payment(
    request: Request,
    data: PaymentCreateRequest,
    session: SessionData = Depends(require_session),
    gateway: PaymentGatewayProtocol = Depends(get_payment_gateway),
    logger: LoggerProtocol = Depends(get_logger),
) -> PaymentResponse | JSONResponse:
    """Create a payment.

    POST /api/v1/payments → 201 Created
    """
    idempotency_key = getattr(request.state, "idempotency_key", None) or (
        f"payment:{uuid7().hex}"
    )

    match await gateway.charge(
        amount_cents=data.amount_cents,
        currency=data.currency,
        customer_id=data.customer_id,
        invoice_id=data.invoice_id,
        idempotency_key=idempotency_key,
    ):
        case Failure(error=error):
            logger.warning(
                "Payment charge failed",
                invoice_id=data.invoice_id,
                error_code=error.code.value,
            )
            return ErrorResponseBuilder.from_application_error(
                ApplicationError(
                    code=ApplicationErrorCode.EXTERNAL_SERVICE_ERROR,
                    message=error.message,
                    domain_error=error,
                ),
                request,
            )
        case Success(value=receipt):
            logger.info(
                "Payment created",
                payment_id=receipt.payment_id,
                identifier=session.identifier,
                invoice_id=data.invoice_id,
            )
            return PaymentResponse(
                payment_id=receipt.payment_id,
                status=receipt.status,
                amount_cents=receipt.amount_cents,
                currency=receipt.currency,
            )
