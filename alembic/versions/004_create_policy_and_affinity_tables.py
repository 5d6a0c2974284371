"""create algorithm_policies and user_preferences_learned tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "004"
down_revision = "003"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "algorithm_policies",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("policy_version", sa.String(50), unique=True, nullable=False),
        sa.Column("weights", JSONB(), nullable=False),
        sa.Column("exploration_policy", JSONB(), nullable=False),
        sa.Column("reciprocal_policy", JSONB(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
    )

    op.create_table(
        "user_preferences_learned",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), unique=True, index=True, nullable=False),
        sa.Column("category_affinities", JSONB(), server_default="{}", nullable=False),
        sa.Column(
            "computed_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
    )


def downgrade() -> None:
    op.drop_table("user_preferences_learned")
    op.drop_table("algorithm_policies")
