"""Initial schema: users, events, seat categories, event dates, available seats.

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


def upgrade() -> None:
    # Users table
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Events table
    op.create_table(
        "events",
        sa.Column("event_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("picture", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        # Authoritative duplicate-title guard; the service pre-check can race
        sa.UniqueConstraint("title", name="uq_events_title"),
    )
    # The listing is always ORDER BY created_at DESC
    op.create_index("ix_events_created_at", "events", ["created_at"])

    # Seat categories
    op.create_table(
        "seat_categories",
        sa.Column("seat_category_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "event_id", sa.Integer(),
            sa.ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("seat_limit", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.CheckConstraint("price >= 0", name="check_seat_category_price_non_negative"),
        sa.CheckConstraint("seat_limit >= 0", name="check_seat_limit_non_negative"),
    )
    # Covers both the seeding re-read and the MIN(price) join in the listing
    op.create_index("ix_seat_categories_event_id", "seat_categories", ["event_id"])

    # Event dates
    op.create_table(
        "event_dates",
        sa.Column("event_date_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "event_id", sa.Integer(),
            sa.ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
    )
    op.create_index("ix_event_dates_event_id", "event_dates", ["event_id"])

    # Available seats per (category, date)
    op.create_table(
        "available_seats",
        sa.Column(
            "seat_category_id", sa.Integer(),
            sa.ForeignKey("seat_categories.seat_category_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "event_date_id", sa.Integer(),
            sa.ForeignKey("event_dates.event_date_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("available_seats", sa.Integer(), nullable=False),
        sa.CheckConstraint("available_seats >= 0", name="check_available_seats_non_negative"),
    )
    op.create_index("ix_available_seats_event_date_id", "available_seats", ["event_date_id"])


def downgrade() -> None:
    op.drop_table("available_seats")
    op.drop_table("event_dates")
    op.drop_table("seat_categories")
    op.drop_table("events")
    op.drop_table("users")
