"""
Learned user affinity model — per-category preference strength in [0, 1].

Overwritten wholesale by every optimizer run; categories the user never
swiped on are absent and read as neutral (0.5).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from swapengine.database import Base


class UserAffinity(Base):
    __tablename__ = "user_preferences_learned"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), unique=True, nullable=False,
    )
    category_affinities: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    computed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<UserAffinity {self.user_id} {len(self.category_affinities or {})} categories>"
