"""Initial schema: catalog, registrants, orders with indexes and constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "venues",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_venues_id", "venues", ["id"])

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_name", sa.String(255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id"), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("start_date <= end_date", name="check_event_dates_ordered"),
    )
    op.create_index("ix_events_id", "events", ["id"])

    op.create_table(
        "event_sessions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("session_name", sa.String(255), nullable=False),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("session_balance_capacity", sa.Integer(), nullable=False),
        sa.Column("session_detail", sa.String(1000), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.CheckConstraint("session_balance_capacity >= 0", name="check_session_capacity_non_negative"),
    )
    op.create_index("ix_event_sessions_id", "event_sessions", ["id"])
    op.create_index("ix_event_sessions_event_id", "event_sessions", ["event_id"])
    # Listings filter by event and upcoming date, ordered by date
    op.create_index("ix_event_sessions_event_date", "event_sessions", ["event_id", "session_date"])

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("product_code", sa.String(50), nullable=False, unique=True),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column("product_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'ACTIVE'")),
        *_timestamps(),
        sa.CheckConstraint("product_type IN ('Entry', 'Food')", name="check_product_type"),
        sa.CheckConstraint("status IN ('ACTIVE', 'INACTIVE')", name="check_product_status"),
    )
    op.create_index("ix_products_id", "products", ["id"])

    op.create_table(
        "product_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("product_size", sa.String(20), nullable=False),
        sa.Column("product_choice", sa.String(20), nullable=False, server_default=sa.text("'NONE'")),
        sa.Column("product_pref", sa.String(20), nullable=False, server_default=sa.text("'NONE'")),
        sa.Column("product_subtype", sa.String(20), nullable=False, server_default=sa.text("'NONE'")),
        sa.Column("product_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'ACTIVE'")),
        *_timestamps(),
        sa.CheckConstraint("product_price >= 0", name="check_product_price_non_negative"),
        sa.CheckConstraint("product_size IN ('Adult', 'Children', 'Elder')", name="check_product_size"),
        sa.CheckConstraint("product_choice IN ('VEG', 'NON-VEG', 'NONE')", name="check_product_choice"),
        sa.CheckConstraint(
            "product_pref IN ('CHICKEN', 'MUTTON', 'FISH', 'NONE')", name="check_product_pref"
        ),
        sa.CheckConstraint(
            "product_subtype IN ('PACKET', 'DINE-IN', 'NONE')", name="check_product_subtype"
        ),
    )
    op.create_index("ix_product_types_id", "product_types", ["id"])
    op.create_index("ix_product_types_product_id", "product_types", ["product_id"])

    op.create_table(
        "product_session_maps",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("session_id", sa.Integer(), sa.ForeignKey("event_sessions.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("session_id", "product_id", name="uq_session_product"),
    )
    op.create_index("ix_product_session_maps_id", "product_session_maps", ["id"])
    op.create_index("ix_product_session_maps_session_id", "product_session_maps", ["session_id"])
    op.create_index("ix_product_session_maps_product_id", "product_session_maps", ["product_id"])

    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("member_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("adults", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("children", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("infants", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("elder", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
    )
    op.create_index("ix_members_id", "members", ["id"])
    op.create_index("ix_members_email", "members", ["email"])

    op.create_table(
        "guests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id"), nullable=False),
        sa.Column("guest_name", sa.String(255), nullable=False),
        sa.Column("guest_email", sa.String(255), nullable=True),
        sa.Column("guest_phone", sa.String(50), nullable=True),
        sa.Column("guest_location", sa.String(255), nullable=True),
        sa.Column("adults", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("children", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("infants", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("elder", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint(
            "adults >= 0 AND children >= 0 AND infants >= 0 AND elder >= 0",
            name="check_guest_headcounts_non_negative",
        ),
    )
    op.create_index("ix_guests_id", "guests", ["id"])
    op.create_index("ix_guests_member_id", "guests", ["member_id"])

    op.create_table(
        "order_masters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("registrant_kind", sa.String(10), nullable=False),
        sa.Column("guest_id", sa.Integer(), sa.ForeignKey("guests.id"), nullable=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id"), nullable=True),
        sa.Column("total_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("transaction_id", sa.String(64), nullable=False, unique=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'PENDING'")),
        *_timestamps(),
        # Exactly one registrant per order
        sa.CheckConstraint(
            "(registrant_kind = 'GUEST' AND guest_id IS NOT NULL AND member_id IS NULL) OR "
            "(registrant_kind = 'MEMBER' AND member_id IS NOT NULL AND guest_id IS NULL)",
            name="check_order_single_registrant",
        ),
        sa.CheckConstraint("total_cost >= 0", name="check_order_total_non_negative"),
        sa.CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED', 'REFUNDED')",
            name="check_order_status",
        ),
    )
    op.create_index("ix_order_masters_id", "order_masters", ["id"])
    op.create_index("ix_order_masters_guest_id", "order_masters", ["guest_id"])
    op.create_index("ix_order_masters_member_id", "order_masters", ["member_id"])

    op.create_table(
        "order_lines",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("order_masters.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("product_type_id", sa.Integer(), sa.ForeignKey("product_types.id"), nullable=False),
        sa.Column("session_id", sa.Integer(), sa.ForeignKey("event_sessions.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("quantity >= 0", name="check_order_line_quantity_non_negative"),
    )
    op.create_index("ix_order_lines_id", "order_lines", ["id"])
    op.create_index("ix_order_lines_order_id", "order_lines", ["order_id"])
    # Capacity accounting sums Entry quantities per session on every registration
    op.create_index("ix_order_lines_session_product", "order_lines", ["session_id", "product_id"])


def downgrade() -> None:
    op.drop_table("order_lines")
    op.drop_table("order_masters")
    op.drop_table("guests")
    op.drop_table("members")
    op.drop_table("product_session_maps")
    op.drop_table("product_types")
    op.drop_table("products")
    op.drop_table("event_sessions")
    op.drop_table("events")
    op.drop_table("venues")
