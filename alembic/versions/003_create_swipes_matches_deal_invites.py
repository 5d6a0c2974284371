"""create swipes, matches and deal_invites tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision = "003"
down_revision = "002"
branch_labels = None
depends_on = None


def _item_fk(name: str) -> sa.Column:
    return sa.Column(
        name, UUID(as_uuid=True),
        sa.ForeignKey("items.id", ondelete="CASCADE"), index=True, nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "swipes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _item_fk("swiper_item_id"),
        _item_fk("swiped_item_id"),
        sa.Column("liked", sa.Boolean(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.UniqueConstraint("swiper_item_id", "swiped_item_id", name="uq_swipes_pair"),
    )

    op.create_table(
        "matches",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _item_fk("item_a_id"),
        _item_fk("item_b_id"),
        sa.Column("is_completed", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "deal_invites",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _item_fk("sender_item_id"),
        _item_fk("receiver_item_id"),
        sa.Column("status", sa.String(20), server_default="pending", nullable=False),
        sa.Column("attempt", sa.Integer(), server_default="1", nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("deal_invites")
    op.drop_table("matches")
    op.drop_table("swipes")
