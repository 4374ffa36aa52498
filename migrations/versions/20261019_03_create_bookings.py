"""create bookings and booking items

Revision ID: 20261019_03
Revises: 20261019_02
Create Date: 2026-10-19 09:50:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_03"
down_revision: Union[str, None] = "20261019_02"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("booking_type", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("patient_name", sa.String(length=120), nullable=False),
        sa.Column("patient_age", sa.Integer(), nullable=False),
        sa.Column("booking_date", sa.Date(), nullable=True),
        sa.Column("booking_time", sa.String(length=20), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("city", sa.String(length=120), nullable=False),
        sa.Column("state", sa.String(length=120), nullable=True),
        sa.Column("pincode", sa.String(length=20), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("prescription_url", sa.String(length=500), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("cancel_requested", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("cancel_reason", sa.String(length=500), nullable=True),
        sa.Column("cancel_reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancel_reviewed_by", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["cancel_reviewed_by"], ["users.id"], ondelete="SET NULL"),
        sa.CheckConstraint("patient_age BETWEEN 1 AND 150", name="ck_bookings_patient_age"),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"], unique=False)
    op.create_index("ix_bookings_status", "bookings", ["status"], unique=False)

    op.create_table(
        "booking_items",
        sa.Column("id", sa.Integer(), sa.Identity(), primary_key=True, nullable=False),
        sa.Column("booking_id", sa.String(length=36), nullable=False),
        sa.Column("test_id", sa.String(length=36), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["test_id"], ["lab_tests.id"], ondelete="RESTRICT"),
    )
    op.create_index("ix_booking_items_id", "booking_items", ["id"], unique=False)
    op.create_index("ix_booking_items_booking_id", "booking_items", ["booking_id"], unique=False)
    op.create_index("ix_booking_items_test_id", "booking_items", ["test_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_booking_items_test_id", table_name="booking_items")
    op.drop_index("ix_booking_items_booking_id", table_name="booking_items")
    op.drop_index("ix_booking_items_id", table_name="booking_items")
    op.drop_table("booking_items")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")
