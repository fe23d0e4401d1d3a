"""Stub payment gateway (adapter) implementing PaymentGatewayProtocol.

Stands in for the real provider in development and tests. Like a real
provider, it honors the idempotency key: a repeated key returns the first
receipt instead of charging again.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from uuid_extensions import uuid7

from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.domain.protocols.payment_gateway_protocol import ChargeReceipt
from src.infrastructure.enums import InfrastructureErrorCode
from src.infrastructure.errors import ExternalServiceError

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol


class StubPaymentGateway:
    """In-process payment gateway.

    Attributes:
        charges: Receipts by idempotency key (inspected by tests).
    """

    def __init__(self, *, logger: LoggerProtocol) -> None:
        self._logger = logger
        self.charges: dict[str, ChargeReceipt] = {}

    async def charge(
        self,
        *,
        amount_cents: int,
        currency: str,
        customer_id: str,
        invoice_id: str | None,
        idempotency_key: str,
    ) -> Result[ChargeReceipt, ExternalServiceError]:
        existing = self.charges.get(idempotency_key)
        if existing is not None:
            return Success(value=existing)

        if amount_cents <= 0:
            return Failure(
                error=ExternalServiceError(
                    code=ErrorCode.PAYMENT_FAILED,
                    infrastructure_code=InfrastructureErrorCode.EXTERNAL_SERVICE_ERROR,
                    message="Charge amount must be positive",
                    service_name="stub_payments",
                    details={"amount_cents": amount_cents},
                )
            )

        receipt = ChargeReceipt(
            payment_id=f"pay_{uuid7().hex}",
            status="succeeded",
            amount_cents=amount_cents,
            currency=currency.lower(),
        )
        self.charges[idempotency_key] = receipt
        self._logger.info(
            "Payment charged",
            payment_id=receipt.payment_id,
            customer_id=customer_id,
            invoice_id=invoice_id,
            amount_cents=amount_cents,
            currency=receipt.currency,
        )
        return Success(value=receipt)
