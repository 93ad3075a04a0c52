"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Creates all tables for the venue booking service:
users, venues, bookings, booking_mutations.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BOOKING_STATUS = sa.Enum(
    "pending", "confirmed", "cancellation_requested", "cancelled", "completed", name="bookingstatus"
)
CHANGE_REQUEST_STATUS = sa.Enum("none", "pending", "payment_pending", name="changerequeststatus")
CHANGE_PAYMENT_STATUS = sa.Enum("not_required", "pending", "paid", name="changepaymentstatus")
ACTION_TYPE = sa.Enum(
    "create", "change_requested", "change_approved", "change_rejected", "change_paid",
    "cancellation_requested", "status_changed", name="actiontype",
)


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("display_name", sa.String(100), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- venues ---
    op.create_table(
        "venues",
        sa.Column("venue_id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("price_per_hour", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("timezone", sa.String(50), nullable=False, server_default="UTC"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- bookings ---
    op.create_table(
        "bookings",
        sa.Column("booking_id", sa.String(36), primary_key=True),
        sa.Column("venue_id", sa.String(36), sa.ForeignKey("venues.venue_id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("event_date", sa.Date, nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("status", BOOKING_STATUS, nullable=False, server_default="pending"),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("change_request_status", CHANGE_REQUEST_STATUS, nullable=False, server_default="none"),
        sa.Column("change_request_payment_status", CHANGE_PAYMENT_STATUS, nullable=True),
        sa.Column("requested_event_date", sa.Date, nullable=True),
        sa.Column("requested_start_time", sa.String(5), nullable=True),
        sa.Column("requested_end_time", sa.String(5), nullable=True),
        sa.Column("change_request_reason", sa.Text, nullable=True),
        sa.Column("additional_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("cancellation_reason", sa.Text, nullable=True),
        sa.Column("cancellation_requested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refund_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_venue_id", "bookings", ["venue_id"])

    # --- booking_mutations ---
    op.create_table(
        "booking_mutations",
        sa.Column("mutation_id", sa.String(36), primary_key=True),
        sa.Column("booking_id", sa.String(36), sa.ForeignKey("bookings.booking_id"), nullable=False),
        sa.Column("actor_user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("action_type", ACTION_TYPE, nullable=False),
        sa.Column("before_snapshot", sa.JSON, nullable=True),
        sa.Column("after_snapshot", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_booking_mutations_booking_id", "booking_mutations", ["booking_id"])


def downgrade() -> None:
    op.drop_index("ix_booking_mutations_booking_id", table_name="booking_mutations")
    op.drop_table("booking_mutations")
    op.drop_index("ix_bookings_venue_id", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("venues")
    op.drop_table("users")
    for enum_type in (ACTION_TYPE, CHANGE_PAYMENT_STATUS, CHANGE_REQUEST_STATUS, BOOKING_STATUS):
        enum_type.drop(op.get_bind(), checkfirst=True)
