"""
Match model — two items that liked each other.

Created by the swipe trigger outside this service; the engine only reads
matches to keep already-matched pairs out of recommendations.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from swapengine.database import Base


class Match(Base):
    __tablename__ = "matches"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    item_a_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("items.id"), index=True, nullable=False,
    )
    item_b_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("items.id"), index=True, nullable=False,
    )
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def other_item(self, item_id: uuid.UUID) -> uuid.UUID:
        """Return the partner item of *item_id* in this match."""
        return self.item_b_id if self.item_a_id == item_id else self.item_a_id

    def __repr__(self) -> str:
        return f"<Match {self.item_a_id} <-> {self.item_b_id}>"
