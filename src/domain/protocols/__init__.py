"""Domain protocols (ports).

Infrastructure adapters implement these structurally (PEP 544); none of
them inherit from the protocol classes.

Usage:
    from src.domain.protocols import LockoutRepository, RateLimitProtocol
"""

from src.domain.protocols.credential_verifier_protocol import CredentialVerifierProtocol
from src.domain.protocols.csrf_protocol import CSRFProtocol
from src.domain.protocols.idempotency_repository import IdempotencyRepository
from src.domain.protocols.lockout_repository import LockoutRepository
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.password_hashing_protocol import PasswordHashingProtocol
from src.domain.protocols.payment_gateway_protocol import (
    ChargeReceipt,
    PaymentGatewayProtocol,
)
from src.domain.protocols.rate_limit_protocol import RateLimitProtocol
from src.domain.protocols.security_event_repository import SecurityEventRepository
from src.domain.protocols.session_repository import SessionData, SessionRepository

__all__ = [
    "CSRFProtocol",
    "ChargeReceipt",
    "CredentialVerifierProtocol",
    "IdempotencyRepository",
    "LockoutRepository",
    "LoggerProtocol",
    "PasswordHashingProtocol",
    "PaymentGatewayProtocol",
    "RateLimitProtocol",
    "SecurityEventRepository",
    "SessionData",
    "SessionRepository",
]
