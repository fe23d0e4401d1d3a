"""Idempotency record database model.

Write-once rows holding the first observed response for an idempotency
key. The ``(key, caller_scope)`` unique constraint is the cross-process
arbiter: a losing insert re-reads the winner's row.
"""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    Integer,
    LargeBinary,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseModel


class IdempotencyRecordModel(BaseModel):
    """Stored first response for one ``(key, caller_scope)``.

    Indexes:
        - uq_idempotency_records_key_scope: (key, caller_scope) unique
        - ix_idempotency_records_expires_at: batched expiry sweep
    """

    __tablename__ = "idempotency_records"
    __table_args__ = (
        UniqueConstraint("key", "caller_scope", name="uq_idempotency_records_key_scope"),
    )

    key: Mapped[str] = mapped_column(String(255), nullable=False)

    caller_scope: Mapped[str] = mapped_column(String(255), nullable=False)

    request_method: Mapped[str] = mapped_column(String(10), nullable=False)

    request_path: Mapped[str] = mapped_column(String(2048), nullable=False)

    request_params: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Fingerprint of the first request body",
    )

    response_status: Mapped[int] = mapped_column(Integer, nullable=False)

    response_body: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    response_content_type: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="application/json",
    )

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
