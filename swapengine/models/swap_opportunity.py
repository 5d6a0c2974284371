"""
Swap opportunity model — a detected 2-way or 3-way exchange cycle.

Rows are replaced on every optimizer run. The column layout is consumed
directly by the client's opportunity view and must stay stable.

Slot semantics: in a 2-way row user A gives ``item_a`` to user B and
receives ``item_b``. In a 3-way row A gives ``item_a`` to B, B gives
``item_b`` to C, and C gives ``item_c`` to A.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, ForeignKey, String, event
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from swapengine.database import Base


class CycleType(str, enum.Enum):
    TWO_WAY = "2-way"
    THREE_WAY = "3-way"


class OpportunityStatus(str, enum.Enum):
    ACTIVE = "active"
    ACCEPTED = "accepted"
    DISMISSED = "dismissed"


class SwapOpportunity(Base):
    __tablename__ = "swap_opportunities"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    cycle_type: Mapped[str] = mapped_column(String(10), nullable=False)

    user_a_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True, nullable=False)
    item_a_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("items.id", ondelete="CASCADE"), nullable=False,
    )
    user_b_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True, nullable=False)
    item_b_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("items.id", ondelete="CASCADE"), nullable=False,
    )
    user_c_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), index=True)
    item_c_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("items.id", ondelete="CASCADE"),
    )

    confidence_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OpportunityStatus.ACTIVE.value,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @property
    def item_ids(self) -> list[uuid.UUID]:
        ids = [self.item_a_id, self.item_b_id]
        if self.item_c_id is not None:
            ids.append(self.item_c_id)
        return ids

    def __repr__(self) -> str:
        return f"<SwapOpportunity {self.cycle_type} score={self.confidence_score:.3f}>"


@event.listens_for(SwapOpportunity, "init")
def _set_opportunity_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "status" not in kwargs:
        target.status = OpportunityStatus.ACTIVE.value
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
