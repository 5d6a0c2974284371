"""
Deal invite model — a direct exchange proposal between two items.

Owned by the deals feature. Accepted invites link the two items, and the
recommendation session excludes the partner item from future candidates.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from swapengine.database import Base


class DealInviteStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class DealInvite(Base):
    __tablename__ = "deal_invites"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    sender_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("items.id"), index=True, nullable=False,
    )
    receiver_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("items.id"), index=True, nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DealInviteStatus.PENDING.value,
    )
    attempt: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<DealInvite {self.sender_item_id} -> {self.receiver_item_id} {self.status}>"
