"""create_defense_tables

Revision ID: 7c2f4a91d3e5
Revises:
Create Date: 2026-10-18 09:00:00.000000+00:00

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "7c2f4a91d3e5"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(*, mutable: bool) -> list[sa.Column]:
    columns = [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]
    if mutable:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.text("now()"),
                nullable=False,
            )
        )
    return columns


def upgrade() -> None:
    """Create lockout, idempotency, session, user and security event tables."""
    op.create_table(
        "account_lockouts",
        *_timestamps(mutable=True),
        sa.Column(
            "identifier",
            sa.String(length=255),
            nullable=False,
            comment="Normalized (lower-case) account identifier",
        ),
        sa.Column(
            "failed_attempts",
            sa.Integer(),
            server_default="0",
            nullable=False,
            comment="Consecutive failed credential checks",
        ),
        sa.Column("last_failed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "locked_until",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="Lockout end; authentication rejected while in the future",
        ),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_account_lockouts_identifier",
        "account_lockouts",
        ["identifier"],
        unique=True,
    )
    op.create_index(
        "ix_account_lockouts_locked_until",
        "account_lockouts",
        ["locked_until"],
    )

    op.create_table(
        "idempotency_records",
        *_timestamps(mutable=False),
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("caller_scope", sa.String(length=255), nullable=False),
        sa.Column("request_method", sa.String(length=10), nullable=False),
        sa.Column("request_path", sa.String(length=2048), nullable=False),
        sa.Column(
            "request_params",
            sa.Text(),
            nullable=False,
            comment="Fingerprint of the first request body",
        ),
        sa.Column("response_status", sa.Integer(), nullable=False),
        sa.Column("response_body", sa.LargeBinary(), nullable=False),
        sa.Column("response_content_type", sa.String(length=255), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "key", "caller_scope", name="uq_idempotency_records_key_scope"
        ),
    )
    op.create_index(
        "ix_idempotency_records_expires_at",
        "idempotency_records",
        ["expires_at"],
    )

    op.create_table(
        "user_sessions",
        *_timestamps(mutable=True),
        sa.Column(
            "session_id",
            sa.String(length=128),
            nullable=False,
            comment="Opaque session identifier (cookie value)",
        ),
        sa.Column(
            "identifier",
            sa.String(length=255),
            nullable=False,
            comment="Normalized account identifier",
        ),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_revoked", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_reason", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_user_sessions_session_id", "user_sessions", ["session_id"], unique=True
    )
    op.create_index(
        "idx_user_sessions_identifier_active",
        "user_sessions",
        ["identifier", "is_revoked"],
    )

    op.create_table(
        "users",
        *_timestamps(mutable=True),
        sa.Column(
            "email",
            sa.String(length=255),
            nullable=False,
            comment="Lower-cased login identifier",
        ),
        sa.Column(
            "password_hash",
            sa.String(length=255),
            nullable=False,
            comment="bcrypt hash with embedded salt and cost",
        ),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "security_events",
        *_timestamps(mutable=False),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("severity", sa.String(length=16), nullable=False),
        sa.Column("identifier", sa.String(length=255), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_security_events_event_type", "security_events", ["event_type"]
    )
    op.create_index(
        "idx_security_events_identifier_time",
        "security_events",
        ["identifier", "occurred_at"],
    )


def downgrade() -> None:
    """Drop all defense tables."""
    op.drop_index("idx_security_events_identifier_time", table_name="security_events")
    op.drop_index("ix_security_events_event_type", table_name="security_events")
    op.drop_table("security_events")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("idx_user_sessions_identifier_active", table_name="user_sessions")
    op.drop_index("ix_user_sessions_session_id", table_name="user_sessions")
    op.drop_table("user_sessions")
    op.drop_index("ix_idempotency_records_expires_at", table_name="idempotency_records")
    op.drop_table("idempotency_records")
    op.drop_index("ix_account_lockouts_locked_until", table_name="account_lockouts")
    op.drop_index("ix_account_lockouts_identifier", table_name="account_lockouts")
    op.drop_table("account_lockouts")
