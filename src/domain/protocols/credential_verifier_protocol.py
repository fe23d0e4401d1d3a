"""Credential verifier protocol (port).

Authentication itself is external to the defense layer. The login flow
only needs a yes/no answer for an identifier and a password.
"""

from typing import Protocol


class CredentialVerifierProtocol(Protocol):
    """Verify an identifier/password pair.

    Implementations MUST take comparable time whether or not the identifier
    exists, so response timing does not reveal account existence.

    Implementations:
        - DatabaseCredentialVerifier: ``users`` table + bcrypt
    """

    async def verify(self, identifier: str, password: str) -> bool:
        """Return True when the credentials are correct and the account is active."""
        ...
