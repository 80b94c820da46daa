# backend/alembic/versions/001_scheduling_schema.py
"""Scheduling schema: establishments, courts, bookings, blocks, monthly passes

Revision ID: 001_scheduling_schema
Revises:
Create Date: 2026-10-01 00:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_scheduling_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _ulid_pk() -> sa.Column:
    return sa.Column("id", sa.String(length=26), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True
    )


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True)


def upgrade() -> None:
    """Create the scheduling tables."""
    print("Creating scheduling tables...")

    op.create_table(
        "users",
        _ulid_pk(),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="CUSTOMER"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.CheckConstraint("role IN ('CUSTOMER', 'ADMIN', 'SYSADMIN')", name="ck_users_role"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "establishments",
        _ulid_pk(),
        sa.Column("owner_id", sa.String(length=26), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("open_weekdays", sa.JSON(), nullable=False),
        sa.Column("opening_time", sa.String(length=5), nullable=False, server_default="08:00"),
        sa.Column("closing_time", sa.String(length=5), nullable=False, server_default="23:00"),
        sa.Column("opening_time_by_weekday", sa.JSON(), nullable=True),
        sa.Column("closing_time_by_weekday", sa.JSON(), nullable=True),
        sa.Column("booking_buffer_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "requires_booking_confirmation", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("online_payments_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("cancel_min_hours", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("booking_buffer_minutes >= 0", name="ck_establishments_buffer"),
        sa.CheckConstraint("cancel_min_hours >= 0", name="ck_establishments_cancel_min_hours"),
    )
    op.create_index("ix_establishments_owner_id", "establishments", ["owner_id"])

    op.create_table(
        "establishment_holidays",
        _ulid_pk(),
        sa.Column(
            "establishment_id",
            sa.String(length=26),
            sa.ForeignKey("establishments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_open", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("opening_time", sa.String(length=5), nullable=True),
        sa.Column("closing_time", sa.String(length=5), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("establishment_id", "date", name="uq_establishment_holidays_date"),
    )

    op.create_table(
        "courts",
        _ulid_pk(),
        sa.Column(
            "establishment_id", sa.String(length=26), sa.ForeignKey("establishments.id"), nullable=False
        ),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("sport_type", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("price_per_hour_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("discount_percent_over_90min", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("monthly_price_cents", sa.Integer(), nullable=True),
        sa.Column("monthly_terms", sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("price_per_hour_cents >= 0", name="ck_courts_price_non_negative"),
        sa.CheckConstraint(
            "discount_percent_over_90min >= 0 AND discount_percent_over_90min <= 100",
            name="ck_courts_discount_range",
        ),
    )
    op.create_index("ix_courts_establishment_id", "courts", ["establishment_id"])

    op.create_table(
        "monthly_passes",
        _ulid_pk(),
        sa.Column("court_id", sa.String(length=26), sa.ForeignKey("courts.id"), nullable=False),
        sa.Column("customer_id", sa.String(length=26), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("weekday", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("terms_snapshot", sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "court_id", "customer_id", "month", name="uq_monthly_passes_court_customer_month"
        ),
        sa.CheckConstraint(
            "status IN ('PENDING', 'ACTIVE', 'CANCELLED')", name="ck_monthly_passes_status"
        ),
        sa.CheckConstraint("weekday >= 0 AND weekday <= 6", name="ck_monthly_passes_weekday"),
        sa.CheckConstraint("price_cents > 0", name="ck_monthly_passes_price_positive"),
    )
    op.create_index("ix_monthly_passes_court_id", "monthly_passes", ["court_id"])
    op.create_index("ix_monthly_passes_customer_id", "monthly_passes", ["customer_id"])

    op.create_table(
        "bookings",
        _ulid_pk(),
        sa.Column("court_id", sa.String(length=26), sa.ForeignKey("courts.id"), nullable=False),
        sa.Column("customer_id", sa.String(length=26), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("customer_name", sa.String(length=200), nullable=True),
        sa.Column("customer_email", sa.String(length=255), nullable=True),
        sa.Column("customer_phone", sa.String(length=40), nullable=True),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("total_price_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pay_at_court", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by_id", sa.String(length=26), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("requested_at", sa.DateTime(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_by_id", sa.String(length=26), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("cancel_reason", sa.Text(), nullable=True),
        sa.Column(
            "rescheduled_from_id",
            sa.String(length=26),
            sa.ForeignKey("bookings.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.UniqueConstraint("rescheduled_from_id", name="uq_bookings_rescheduled_from_id"),
        sa.CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'CANCELLED')", name="ck_bookings_status"
        ),
        sa.CheckConstraint("end_time > start_time", name="ck_bookings_time_order"),
        sa.CheckConstraint("total_price_cents >= 0", name="ck_bookings_price_non_negative"),
    )
    op.create_index("ix_bookings_court_window", "bookings", ["court_id", "start_time", "end_time"])
    op.create_index("ix_bookings_customer_id", "bookings", ["customer_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_requested_at", "bookings", ["requested_at"])

    op.create_table(
        "court_blocks",
        _ulid_pk(),
        sa.Column("court_id", sa.String(length=26), sa.ForeignKey("courts.id"), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_by_id", sa.String(length=26), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "monthly_pass_id",
            sa.String(length=26),
            sa.ForeignKey("monthly_passes.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _created_at(),
        sa.CheckConstraint("end_time > start_time", name="ck_court_blocks_time_order"),
    )
    op.create_index(
        "ix_court_blocks_court_window", "court_blocks", ["court_id", "start_time", "end_time"]
    )
    op.create_index("ix_court_blocks_monthly_pass_id", "court_blocks", ["monthly_pass_id"])

    op.create_table(
        "availability_alerts",
        _ulid_pk(),
        sa.Column("user_id", sa.String(length=26), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("court_id", sa.String(length=26), sa.ForeignKey("courts.id"), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notified_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint(
            "user_id", "court_id", "start_time", "end_time", name="uq_availability_alerts_window"
        ),
    )
    op.create_index("ix_availability_alerts_user_id", "availability_alerts", ["user_id"])
    op.create_index("ix_availability_alerts_court_id", "availability_alerts", ["court_id"])

    op.create_table(
        "notifications",
        _ulid_pk(),
        sa.Column("user_id", sa.String(length=26), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("kind", sa.String(length=40), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "background_jobs",
        _ulid_pk(),
        sa.Column("type", sa.String(length=80), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("dedupe_key", sa.String(length=255), nullable=True, unique=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="queued"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "available_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )

    op.create_table(
        "audit_logs",
        _ulid_pk(),
        sa.Column("actor_id", sa.String(length=26), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity_type", sa.String(length=40), nullable=False),
        sa.Column("entity_id", sa.String(length=26), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])

    print("Scheduling tables created")


def downgrade() -> None:
    """Drop the scheduling tables."""
    print("Dropping scheduling tables...")

    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_index("ix_audit_logs_actor_id", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_table("background_jobs")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_availability_alerts_court_id", table_name="availability_alerts")
    op.drop_index("ix_availability_alerts_user_id", table_name="availability_alerts")
    op.drop_table("availability_alerts")
    op.drop_index("ix_court_blocks_monthly_pass_id", table_name="court_blocks")
    op.drop_index("ix_court_blocks_court_window", table_name="court_blocks")
    op.drop_table("court_blocks")
    op.drop_index("ix_bookings_requested_at", table_name="bookings")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_customer_id", table_name="bookings")
    op.drop_index("ix_bookings_court_window", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_monthly_passes_customer_id", table_name="monthly_passes")
    op.drop_index("ix_monthly_passes_court_id", table_name="monthly_passes")
    op.drop_table("monthly_passes")
    op.drop_index("ix_courts_establishment_id", table_name="courts")
    op.drop_table("courts")
    op.drop_table("establishment_holidays")
    op.drop_index("ix_establishments_owner_id", table_name="establishments")
    op.drop_table("establishments")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
