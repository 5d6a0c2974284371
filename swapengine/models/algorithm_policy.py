"""
Algorithm policy model — versioned scoring weights and exploration knobs.

Rows are written by the policy-administration tooling; the engine reads
the newest row flagged ``active``. The JSON blobs are validated on read
by ``swapengine.matching_engine.policy``.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from swapengine.database import Base


class AlgorithmPolicy(Base):
    __tablename__ = "algorithm_policies"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    policy_version: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    weights: Mapped[dict] = mapped_column(JSONB, nullable=False)
    exploration_policy: Mapped[dict] = mapped_column(JSONB, nullable=False)
    reciprocal_policy: Mapped[dict] = mapped_column(JSONB, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    active: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<AlgorithmPolicy {self.policy_version} active={self.active}>"
