"""Payment gateway protocol (port).

The gateway is an external collaborator. The idempotency key travels with
every charge so the provider's own deduplication covers requests that race
across serving processes.
"""

from dataclasses import dataclass
from typing import Protocol

from src.core.errors import DomainError
from src.core.result import Result


@dataclass(frozen=True, kw_only=True)
class ChargeReceipt:
    """Gateway confirmation of a charge.

    Attributes:
        payment_id: Gateway-side payment identifier.
        status: Gateway status string ("succeeded", "pending").
        amount_cents: Charged amount in minor units.
        currency: ISO 4217 code, lower-case.
    """

    payment_id: str
    status: str
    amount_cents: int
    currency: str


class PaymentGatewayProtocol(Protocol):
    """Charge customers through the payment provider."""

    async def charge(
        self,
        *,
        amount_cents: int,
        currency: str,
        customer_id: str,
        invoice_id: str | None,
        idempotency_key: str,
    ) -> Result[ChargeReceipt, DomainError]:
        """Create a charge.

        Args:
            amount_cents: Amount in minor units.
            currency: ISO 4217 code.
            customer_id: Provider customer reference.
            invoice_id: Platform invoice being paid, if any.
            idempotency_key: Forwarded to the provider's idempotency support.

        Returns:
            Success(ChargeReceipt) or Failure(ExternalServiceError).
        """
        ...
