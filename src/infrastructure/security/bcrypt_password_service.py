"""Bcrypt password hashing service (adapter).

Implements PasswordHashingProtocol (no inheritance required). Used by the
credential verifier behind the login endpoint and by seeding scripts.

Security:
    - Cost factor 12 by default (``settings.bcrypt_rounds``)
    - Random salt per hash
    - ``checkpw`` compares in constant time
"""

import bcrypt


class BcryptPasswordService:
    """Bcrypt password hashing service.

    Usage:
        from src.core.container import get_password_service

        password_service = get_password_service()
        password_hash = password_service.hash_password("SecurePass123!")
        password_service.verify_password("SecurePass123!", password_hash)  # True
    """

    def __init__(self, cost_factor: int = 12) -> None:
        """Initialize bcrypt password service.

        Args:
            cost_factor: Bcrypt cost factor (logarithmic; each +1 doubles time).

        Raises:
            ValueError: If cost_factor is outside 10-20.
        """
        if cost_factor < 10:
            msg = "Cost factor must be at least 10 for security"
            raise ValueError(msg)
        if cost_factor > 20:
            msg = "Cost factor above 20 is impractically slow"
            raise ValueError(msg)

        self._cost_factor = cost_factor
        self._dummy_hash: str | None = None

    def hash_password(self, password: str) -> str:
        """Hash a plaintext password (60-character ``$2b$`` string)."""
        salt = bcrypt.gensalt(rounds=self._cost_factor)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify a plaintext password against a bcrypt hash.

        Returns False for malformed hashes instead of raising.
        """
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"), password_hash.encode("utf-8")
            )
        except (ValueError, AttributeError):
            return False

    def burn_verification(self, password: str) -> None:
        """Spend one verification's worth of time against a throwaway hash.

        Called when the account does not exist so the response takes as
        long as a real password check.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash_password("fieldguard-unknown-account")
        self.verify_password(password, self._dummy_hash)
