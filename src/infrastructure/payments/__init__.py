"""Payment gateway adapters."""

from src.infrastructure.payments.stub_payment_gateway import StubPaymentGateway

__all__ = ["StubPaymentGateway"]
