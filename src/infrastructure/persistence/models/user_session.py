"""User session database model.

Platform sessions created on login. The defense layer binds CSRF tokens
and idempotency scopes to ``session_id`` and revokes every session of an
account on administrative unlock.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseMutableModel


class UserSessionModel(BaseMutableModel):
    """Authenticated session.

    Session Lifecycle:
        1. Created on successful login
        2. Revoked on logout or administrative unlock
        3. Expires naturally after ``session_ttl_seconds``

    Indexes:
        - ix_user_sessions_session_id: cookie lookup (unique)
        - idx_user_sessions_identifier_active: (identifier, is_revoked) for
          revoke-all on unlock
    """

    __tablename__ = "user_sessions"
    __table_args__ = (
        Index("idx_user_sessions_identifier_active", "identifier", "is_revoked"),
    )

    session_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        unique=True,
        index=True,
        comment="Opaque session identifier (cookie value)",
    )

    identifier: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Normalized account identifier",
    )

    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)

    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    is_revoked: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    revoked_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
