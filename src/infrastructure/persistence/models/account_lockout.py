"""Account lockout database model.

One row per normalized account identifier. Rows are only ever changed by
single atomic UPDATE statements issued from LockoutRepository, so
concurrent failures from different serving processes never lose counts.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, true
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseMutableModel


class AccountLockoutModel(BaseMutableModel):
    """Durable failed-authentication state.

    Fields:
        identifier: Normalized account identifier (unique)
        failed_attempts: Consecutive failed credential checks
        last_failed_at: Time of the most recent failure
        locked_until: End of the current lockout (NULL when unlocked)
        is_active: Account activation flag, never touched by lockout

    Indexes:
        - ix_account_lockouts_identifier: unique lookup
        - ix_account_lockouts_locked_until: active-lock queries
    """

    __tablename__ = "account_lockouts"

    identifier: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Normalized (lower-case) account identifier",
    )

    failed_attempts: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        comment="Consecutive failed credential checks",
    )

    last_failed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    locked_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        index=True,
        comment="Lockout end; authentication rejected while in the future",
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=true(),
    )
