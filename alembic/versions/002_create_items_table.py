"""create items table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, ENUM, UUID

revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None

CATEGORIES = ("electronics", "clothes", "books", "games", "sports", "home_garden", "other")
CONDITIONS = ("new", "like_new", "good", "fair", "poor")


def upgrade() -> None:
    sa.Enum(*CATEGORIES, name="item_category").create(op.get_bind(), checkfirst=True)
    sa.Enum(*CONDITIONS, name="item_condition").create(op.get_bind(), checkfirst=True)

    # types already exist; don't re-create them with the table
    item_category = ENUM(*CATEGORIES, name="item_category", create_type=False)
    item_condition = ENUM(*CONDITIONS, name="item_condition", create_type=False)

    op.create_table(
        "items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), index=True, nullable=False),
        sa.Column("title", sa.String(200), server_default="", nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", item_category, nullable=False),
        sa.Column("condition", item_condition, nullable=False),
        sa.Column(
            "swap_preferences", ARRAY(item_category),
            server_default="{}", nullable=False,
        ),
        sa.Column("value_min", sa.Numeric(12, 2), nullable=True),
        sa.Column("value_max", sa.Numeric(12, 2), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("is_archived", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("reciprocal_boost", sa.Float(), server_default="0", nullable=False),
        sa.Column("boost_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
    )
    op.create_index("ix_items_active_created", "items", ["is_active", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_items_active_created", table_name="items")
    op.drop_table("items")
    sa.Enum(name="item_condition").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="item_category").drop(op.get_bind(), checkfirst=True)
