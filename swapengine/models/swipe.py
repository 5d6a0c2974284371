"""
Swipe model — one directional like/dislike decision.

A swipe is made *from* one of the swiper's own items (``swiper_item_id``)
*on* another user's item (``swiped_item_id``). Rows are append-only.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    event,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from swapengine.database import Base


class Swipe(Base):
    __tablename__ = "swipes"
    __table_args__ = (
        UniqueConstraint("swiper_item_id", "swiped_item_id", name="uq_swipes_pair"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    swiper_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("items.id"), index=True, nullable=False,
    )
    swiped_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("items.id"), index=True, nullable=False,
    )
    liked: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Swipe {self.swiper_item_id} -> {self.swiped_item_id} liked={self.liked}>"


@event.listens_for(Swipe, "init")
def _set_swipe_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
