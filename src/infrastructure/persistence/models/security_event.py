"""Security event database model (append-only audit trail)."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseModel


class SecurityEventModel(BaseModel):
    """One security-relevant event.

    Immutable: repositories only ever INSERT into this table.

    Indexes:
        - idx_security_events_identifier_time: (identifier, occurred_at)
          for per-account investigation
    """

    __tablename__ = "security_events"
    __table_args__ = (
        Index("idx_security_events_identifier_time", "identifier", "occurred_at"),
    )

    event_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    severity: Mapped[str] = mapped_column(String(16), nullable=False)

    identifier: Mapped[str | None] = mapped_column(String(255), nullable=True)

    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)

    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    details: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
