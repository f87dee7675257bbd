"""stores, store hours, services, bookings

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "stores",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("owner_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("address", sa.Text()),
        sa.Column("created_at", sa.Text(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_stores_owner_id", "stores", ["owner_id"])

    op.create_table(
        "store_hours",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("store_id", sa.Text(), sa.ForeignKey("stores.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("open_time", sa.Text(), nullable=False),
        sa.Column("close_time", sa.Text(), nullable=False),
        sa.Column("break_start", sa.Text()),
        sa.Column("break_end", sa.Text()),
        sa.UniqueConstraint("store_id", "day_of_week"),
    )

    op.create_table(
        "services",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("store_id", sa.Text(), sa.ForeignKey("stores.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("available_days", sa.Text(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("description", sa.Text()),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("store_id", sa.Text(), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("store_name", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("user_name", sa.Text(), nullable=False),
        sa.Column("user_email", sa.Text(), nullable=False),
        sa.Column("service_id", sa.Text(), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("service_name", sa.Text(), nullable=False),
        sa.Column("service_duration_minutes", sa.Integer(), nullable=False),
        sa.Column("service_price", sa.Float(), nullable=False),
        sa.Column("booking_date", sa.Text(), nullable=False),
        sa.Column("booking_time", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("created_at", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.Text()),
        sa.Column("notes", sa.Text()),
    )
    op.create_index("ix_bookings_store_date", "bookings", ["store_id", "booking_date"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])


def downgrade():
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_index("ix_bookings_store_date", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("services")
    op.drop_table("store_hours")
    op.drop_index("ix_stores_owner_id", table_name="stores")
    op.drop_table("stores")
