# backend/alembic/versions/001_wedding_core.py
"""Wedding core - catalog, bookings, earnings and the webhook ledger

Revision ID: 001_wedding_core
Revises:
Create Date: 2025-01-10 00:00:00.000000

Bookings hold one photographer for one date. The partial unique index
uq_bookings_active_slot allows at most one non-cancelled booking per
(photographer, date); cancelled rows stay for history.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_wedding_core"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_JSON = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade() -> None:
    """Create catalog, booking, earnings and webhook ledger tables."""
    print("Creating WeddingLens core tables...")

    # ======== CATALOG ========
    op.create_table(
        "photographers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("bio", sa.Text(), nullable=False),
        sa.Column("profile_image", sa.String(500), nullable=True),
        sa.Column("specialties", sa.JSON(), nullable=False),
        sa.Column("experience", sa.Integer(), nullable=False),
        sa.Column("location", sa.String(120), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "service_categories",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(80), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "services",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("duration_hours", sa.Integer(), nullable=False),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.ForeignKeyConstraint(["category_id"], ["service_categories.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_services_category_id", "services", ["category_id"])
    op.create_table(
        "packages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(80), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("service_ids", sa.JSON(), nullable=False),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("features", sa.JSON(), nullable=False),
        sa.Column("popular", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "portfolio_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("photographer_id", sa.Integer(), nullable=False),
        sa.Column("image_url", sa.String(500), nullable=False),
        sa.Column("title", sa.String(120), nullable=False),
        sa.Column("category", sa.String(40), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["photographer_id"], ["photographers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_portfolio_items_photographer_id", "portfolio_items", ["photographer_id"])
    op.create_table(
        "testimonials",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("photographer_id", sa.Integer(), nullable=False),
        sa.Column("client_name", sa.String(120), nullable=False),
        sa.Column("client_image", sa.String(500), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("event_type", sa.String(40), nullable=False),
        sa.ForeignKeyConstraint(["photographer_id"], ["photographers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_testimonials_photographer_id", "testimonials", ["photographer_id"])

    # ======== BOOKINGS ========
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("photographer_id", sa.Integer(), nullable=False),
        sa.Column("package_id", sa.Integer(), nullable=True),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("event_type", sa.String(20), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("services", sa.JSON(), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("payment_intent_id", sa.String(255), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["photographer_id"], ["photographers.id"]),
        sa.ForeignKeyConstraint(["package_id"], ["packages.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("total_amount > 0", name="ck_bookings_total_amount_positive"),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled')",
            name="ck_bookings_status",
        ),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'processing', 'paid', 'refunded', 'failed')",
            name="ck_bookings_payment_status",
        ),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_payment_intent_id", "bookings", ["payment_intent_id"])
    op.create_index("ix_bookings_photographer_date", "bookings", ["photographer_id", "event_date"])
    op.create_index(
        "uq_bookings_active_slot",
        "bookings",
        ["photographer_id", "event_date"],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
        sqlite_where=sa.text("status <> 'cancelled'"),
    )

    # ======== EARNINGS ========
    op.create_table(
        "earnings_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("photographer_id", sa.Integer(), nullable=False),
        sa.Column("booking_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("commission_rate", sa.Numeric(5, 4), nullable=False),
        sa.Column("platform_earnings", sa.Numeric(12, 2), nullable=False),
        sa.Column("photographer_earnings", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("earned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["photographer_id"], ["photographers.id"]),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("booking_id", name="uq_earnings_records_booking_id"),
        sa.CheckConstraint(
            "status IN ('pending', 'paid', 'cancelled')", name="ck_earnings_records_status"
        ),
    )
    op.create_index(
        "ix_earnings_records_photographer_status",
        "earnings_records",
        ["photographer_id", "status"],
    )
    op.create_index("ix_earnings_records_earned_at", "earnings_records", ["earned_at"])

    # ======== WEBHOOK LEDGER ========
    op.create_table(
        "webhook_events",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("event_id", sa.String(255), nullable=False),
        sa.Column("payload", _JSON, nullable=False),
        sa.Column("headers", _JSON, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="received"),
        sa.Column("processing_error", sa.Text(), nullable=True),
        sa.Column("processing_duration_ms", sa.Integer(), nullable=True),
        sa.Column("related_booking_id", sa.Integer(), nullable=True),
        sa.Column("retry_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_retry_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "received_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source", "event_id", name="uq_webhook_events_source_event_id"),
    )
    op.create_index("ix_webhook_events_event_type", "webhook_events", ["event_type"])
    op.create_index("ix_webhook_events_status", "webhook_events", ["status"])
    op.create_index("ix_webhook_events_received_at", "webhook_events", ["received_at"])
    op.create_index("ix_webhook_events_related_booking", "webhook_events", ["related_booking_id"])

    print("WeddingLens core tables created")


def downgrade() -> None:
    """Drop all WeddingLens core tables."""
    print("Dropping WeddingLens core tables...")

    op.drop_index("ix_webhook_events_related_booking", table_name="webhook_events")
    op.drop_index("ix_webhook_events_received_at", table_name="webhook_events")
    op.drop_index("ix_webhook_events_status", table_name="webhook_events")
    op.drop_index("ix_webhook_events_event_type", table_name="webhook_events")
    op.drop_table("webhook_events")

    op.drop_index("ix_earnings_records_earned_at", table_name="earnings_records")
    op.drop_index("ix_earnings_records_photographer_status", table_name="earnings_records")
    op.drop_table("earnings_records")

    op.drop_index("uq_bookings_active_slot", table_name="bookings")
    op.drop_index("ix_bookings_photographer_date", table_name="bookings")
    op.drop_index("ix_bookings_payment_intent_id", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")

    op.drop_index("ix_testimonials_photographer_id", table_name="testimonials")
    op.drop_table("testimonials")
    op.drop_index("ix_portfolio_items_photographer_id", table_name="portfolio_items")
    op.drop_table("portfolio_items")
    op.drop_table("packages")
    op.drop_index("ix_services_category_id", table_name="services")
    op.drop_table("services")
    op.drop_table("service_categories")
    op.drop_table("photographers")
