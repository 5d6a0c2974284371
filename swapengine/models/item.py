"""
Item model — a listing offered for exchange.

Items are created and edited by the listing service. The engine only
reads them, except for ``reciprocal_boost`` / ``boost_expires_at`` which
are owned by the opportunity publisher.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    Numeric,
    String,
    Text,
    Enum as SAEnum,
    event,
)
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column

from swapengine.database import Base


class ItemCategory(str, enum.Enum):
    ELECTRONICS = "electronics"
    CLOTHES = "clothes"
    BOOKS = "books"
    GAMES = "games"
    SPORTS = "sports"
    HOME_GARDEN = "home_garden"
    OTHER = "other"


class ItemCondition(str, enum.Enum):
    NEW = "new"
    LIKE_NEW = "like_new"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class Item(Base):
    __tablename__ = "items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), index=True, nullable=False,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    description: Mapped[str | None] = mapped_column(Text)

    category: Mapped[ItemCategory] = mapped_column(
        SAEnum(ItemCategory, name="item_category",
               values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    condition: Mapped[ItemCondition] = mapped_column(
        SAEnum(ItemCondition, name="item_condition",
               values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    swap_preferences: Mapped[list[ItemCategory]] = mapped_column(
        ARRAY(SAEnum(ItemCategory, name="item_category",
                     values_callable=lambda e: [m.value for m in e])),
        nullable=False,
        default=lambda: [],
    )

    value_min: Mapped[float | None] = mapped_column(Numeric(precision=12, scale=2))
    value_max: Mapped[float | None] = mapped_column(Numeric(precision=12, scale=2))

    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)

    # Written only by the opportunity publisher
    reciprocal_boost: Mapped[float] = mapped_column(Float, default=0.0)
    boost_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def active_boost(self, now: datetime) -> float:
        """Return the reciprocal boost, or 0 once its expiry has passed."""
        boost = self.reciprocal_boost or 0.0
        if boost <= 0:
            return 0.0
        if self.boost_expires_at is not None and self.boost_expires_at <= now:
            return 0.0
        return float(boost)

    def __repr__(self) -> str:
        return (
            f"<Item {self.id} "
            f"{self.category.value if self.category else 'N/A'} "
            f"active={self.is_active}>"
        )


@event.listens_for(Item, "init")
def _set_item_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "swap_preferences" not in kwargs:
        target.swap_preferences = []
    if "is_active" not in kwargs:
        target.is_active = True
    if "is_archived" not in kwargs:
        target.is_archived = False
    if "reciprocal_boost" not in kwargs:
        target.reciprocal_boost = 0.0
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
