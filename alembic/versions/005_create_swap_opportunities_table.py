"""create swap_opportunities table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision = "005"
down_revision = "004"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "swap_opportunities",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("cycle_type", sa.String(10), nullable=False),
        sa.Column("user_a_id", UUID(as_uuid=True), index=True, nullable=False),
        sa.Column(
            "item_a_id", UUID(as_uuid=True),
            sa.ForeignKey("items.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("user_b_id", UUID(as_uuid=True), index=True, nullable=False),
        sa.Column(
            "item_b_id", UUID(as_uuid=True),
            sa.ForeignKey("items.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("user_c_id", UUID(as_uuid=True), index=True, nullable=True),
        sa.Column(
            "item_c_id", UUID(as_uuid=True),
            sa.ForeignKey("items.id", ondelete="CASCADE"), nullable=True,
        ),
        sa.Column("confidence_score", sa.Float(), server_default="0", nullable=False),
        sa.Column("status", sa.String(20), server_default="active", nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), index=True, nullable=False),
        sa.CheckConstraint("cycle_type IN ('2-way', '3-way')", name="ck_swap_opportunities_cycle_type"),
    )


def downgrade() -> None:
    op.drop_table("swap_opportunities")
