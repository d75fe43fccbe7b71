"""Create users and appointments tables

Revision ID: 001
Revises: None
Create Date: 2025-01-10 00:00:00.000000+00:00

What:  Initial schema: one `users` table for every role and the
       `appointments` table that links a client to a counselor.
How:   Portable column types (sa.Uuid, sa.JSON) so the same revision runs
       on PostgreSQL and on SQLite for local demos.

Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column(
            "email",
            sa.String(254),
            nullable=False,
            comment="Stored lowercase; unique index below",
        ),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column(
            "role",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'client'"),
            comment="client, counselor or admin",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("bio", sa.String(500), nullable=True),
        sa.Column("specializations", sa.JSON(), nullable=False),
        sa.Column("license_number", sa.String(64), nullable=True),
        sa.Column("email_notifications", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("client_id", sa.Uuid(), nullable=False),
        sa.Column("counselor_id", sa.Uuid(), nullable=False),
        sa.Column("service_type", sa.String(40), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False, comment="HH:MM, 24-hour"),
        sa.Column("end_time", sa.String(5), nullable=False, comment="HH:MM, 24-hour"),
        sa.Column("duration", sa.Integer(), nullable=False, server_default=sa.text("60")),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'scheduled'"),
            comment="scheduled, confirmed, in-progress, completed, cancelled, no-show",
        ),
        sa.Column(
            "session_type",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'in-person'"),
        ),
        sa.Column(
            "location",
            sa.String(120),
            nullable=False,
            server_default=sa.text("'SHRM Office'"),
        ),
        sa.Column("client_notes", sa.String(500), nullable=True),
        sa.Column("counselor_notes", sa.String(1000), nullable=True),
        sa.Column("admin_notes", sa.String(500), nullable=True),
        sa.Column("cancel_reason", sa.String(200), nullable=True),
        sa.Column("reminder_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("recurrence_frequency", sa.String(20), nullable=True),
        sa.Column("recurrence_end_date", sa.Date(), nullable=True),
        sa.Column("recurrence_occurrences", sa.Integer(), nullable=True),
        sa.Column("fee_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("fee_currency", sa.String(3), nullable=False, server_default=sa.text("'USD'")),
        sa.Column(
            "payment_status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["client_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["counselor_id"], ["users.id"]),
        sa.CheckConstraint("duration BETWEEN 30 AND 180", name="ck_appointments_duration"),
        sa.CheckConstraint("fee_amount IS NULL OR fee_amount >= 0", name="ck_appointments_fee"),
    )
    op.create_index(
        "ix_appointments_client_date", "appointments", ["client_id", "appointment_date"]
    )
    op.create_index(
        "ix_appointments_counselor_date", "appointments", ["counselor_id", "appointment_date"]
    )
    op.create_index(
        "ix_appointments_date_status", "appointments", ["appointment_date", "status"]
    )
    op.create_index("ix_appointments_status", "appointments", ["status"])


def downgrade() -> None:
    """Drops both tables. All appointment history is lost."""
    op.drop_index("ix_appointments_status", table_name="appointments")
    op.drop_index("ix_appointments_date_status", table_name="appointments")
    op.drop_index("ix_appointments_counselor_date", table_name="appointments")
    op.drop_index("ix_appointments_client_date", table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
