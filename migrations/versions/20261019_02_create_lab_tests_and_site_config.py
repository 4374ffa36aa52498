"""create lab tests and site config

Revision ID: 20261019_02
Revises: 20261019_01
Create Date: 2026-10-19 09:40:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_02"
down_revision: Union[str, None] = "20261019_01"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "lab_tests",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("category", sa.String(length=120), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("duration_hours", sa.Integer(), nullable=True),
        sa.Column("test_type", sa.String(length=20), nullable=False, server_default="clinic_test"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("about", sa.Text(), nullable=True),
        sa.Column("parameters", sa.Text(), nullable=True),
        sa.Column("preparation", sa.Text(), nullable=True),
        sa.Column("why", sa.Text(), nullable=True),
        sa.Column("interpretations", sa.Text(), nullable=True),
        sa.Column("faqs", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("price > 0", name="ck_lab_tests_price_positive"),
    )
    op.create_index("ix_lab_tests_name", "lab_tests", ["name"], unique=False)
    op.create_index("ix_lab_tests_category", "lab_tests", ["category"], unique=False)
    op.create_index("ix_lab_tests_is_active", "lab_tests", ["is_active"], unique=False)

    op.create_table(
        "site_config",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("lab_name", sa.String(length=200), nullable=False),
        sa.Column("lab_address", sa.String(length=500), nullable=False),
        sa.Column("lab_city", sa.String(length=120), nullable=False),
        sa.Column("lab_state", sa.String(length=120), nullable=False),
        sa.Column("lab_pincode", sa.String(length=20), nullable=False),
        sa.Column("lab_phone", sa.String(length=20), nullable=False),
        sa.Column("lab_email", sa.String(length=255), nullable=False),
        sa.Column("lab_logo_url", sa.String(length=500), nullable=True),
        sa.Column("primary_color", sa.String(length=20), nullable=True),
        sa.Column("secondary_color", sa.String(length=20), nullable=True),
        sa.Column("about_text", sa.Text(), nullable=True),
        sa.Column("terms_text", sa.Text(), nullable=True),
        sa.Column("privacy_text", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )


def downgrade() -> None:
    op.drop_table("site_config")
    op.drop_index("ix_lab_tests_is_active", table_name="lab_tests")
    op.drop_index("ix_lab_tests_category", table_name="lab_tests")
    op.drop_index("ix_lab_tests_name", table_name="lab_tests")
    op.drop_table("lab_tests")
