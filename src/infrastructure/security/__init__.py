"""Security infrastructure adapters.

- Password hashing (bcrypt)
- Credential verification against the users table
- Session-bound CSRF tokens
"""

from src.infrastructure.security.bcrypt_password_service import BcryptPasswordService
from src.infrastructure.security.credential_verifier import DatabaseCredentialVerifier
from src.infrastructure.security.csrf_token_service import CSRFTokenService

__all__ = [
    "BcryptPasswordService",
    "CSRFTokenService",
    "DatabaseCredentialVerifier",
]
