"""User credential model.

Minimal credential store read by DatabaseCredentialVerifier. Account
management (registration, verification, roles) belongs to the platform;
the defense layer only reads ``email``, ``password_hash`` and ``is_active``.
"""

from sqlalchemy import Boolean, String, true
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseMutableModel


class UserModel(BaseMutableModel):
    """Platform account credentials.

    Fields:
        email: Login identifier, stored lower-case (unique)
        password_hash: bcrypt hash (never plaintext)
        is_active: Deactivated accounts never authenticate
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="Lower-cased login identifier",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash with embedded salt and cost",
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default=true(),
        nullable=False,
    )
