"""
Relational store access for the matching engine.

``SwapRepository`` wraps an ``AsyncSession`` and exposes every read and
write the recommendation session and the reciprocal optimizer perform.
Callers (and tests) depend on this seam rather than on query details.

Batch writes run inside a SAVEPOINT so one failed row can be logged and
skipped without poisoning the surrounding transaction.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert

from swapengine.models import (
    DealInvite,
    DealInviteStatus,
    Item,
    ItemCategory,
    Match,
    OpportunityStatus,
    Profile,
    SwapOpportunity,
    Swipe,
    UserAffinity,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


def _categories(values: Iterable) -> list[ItemCategory]:
    """Coerce labels to ``ItemCategory`` members, dropping unknown ones."""
    members = []
    for value in values:
        try:
            members.append(ItemCategory(getattr(value, "value", value)))
        except ValueError:
            logger.debug("Ignoring unknown category %r", value)
    return members


class SwapRepository:
    """Read/write operations over items, swipes, and opportunities."""

    def __init__(self, session: "AsyncSession"):
        self.session = session

    # ── Recommendation reads ────────────────────────────────────────────

    async def get_item(self, item_id: uuid.UUID) -> Item | None:
        result = await self.session.execute(select(Item).where(Item.id == item_id))
        return result.scalar_one_or_none()

    async def get_owner_location(self, user_id: uuid.UUID) -> tuple[float | None, float | None]:
        """Return the owner's profile coordinates, ``(None, None)`` when unknown."""
        result = await self.session.execute(
            select(Profile.latitude, Profile.longitude).where(Profile.user_id == user_id)
        )
        row = result.first()
        if row is None:
            return None, None
        return row.latitude, row.longitude

    async def get_swipes_from_item(self, item_id: uuid.UUID) -> list[Swipe]:
        result = await self.session.execute(
            select(Swipe).where(Swipe.swiper_item_id == item_id)
        )
        return list(result.scalars().all())

    async def get_matched_item_ids(self, item_id: uuid.UUID) -> set[uuid.UUID]:
        """Partner items of every match *item_id* takes part in."""
        result = await self.session.execute(
            select(Match).where(or_(Match.item_a_id == item_id, Match.item_b_id == item_id))
        )
        return {m.other_item(item_id) for m in result.scalars().all()}

    async def get_accepted_deal_item_ids(self, item_id: uuid.UUID) -> set[uuid.UUID]:
        """Partner items linked to *item_id* through an accepted deal invite."""
        result = await self.session.execute(
            select(DealInvite).where(
                DealInvite.status == DealInviteStatus.ACCEPTED.value,
                or_(
                    DealInvite.sender_item_id == item_id,
                    DealInvite.receiver_item_id == item_id,
                ),
            )
        )
        linked = set()
        for invite in result.scalars().all():
            if invite.sender_item_id == item_id:
                linked.add(invite.receiver_item_id)
            else:
                linked.add(invite.sender_item_id)
        return linked

    async def get_candidate_items(self, owner_id: uuid.UUID) -> list[Item]:
        """All active, non-archived items belonging to other users."""
        result = await self.session.execute(
            select(Item).where(
                Item.is_active.is_(True),
                Item.is_archived.is_(False),
                Item.user_id != owner_id,
            )
        )
        return list(result.scalars().all())

    async def get_compatible_items(
        self,
        owner_id: uuid.UUID,
        category,
        desired: Iterable,
    ) -> list[Item]:
        """
        Candidates by plain preference intersection (degraded mode).

        The candidate's category must be one the owner desires, and the
        candidate must desire the owner's category. Newest first.
        """
        wanted = _categories(desired)
        offered = _categories([category])
        if not wanted or not offered:
            return []
        result = await self.session.execute(
            select(Item)
            .where(
                Item.is_active.is_(True),
                Item.is_archived.is_(False),
                Item.user_id != owner_id,
                Item.category.in_(wanted),
                Item.swap_preferences.contains(offered),
            )
            .order_by(Item.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_items_by_ids(self, item_ids: Iterable[uuid.UUID]) -> list[Item]:
        ids = list(item_ids)
        if not ids:
            return []
        result = await self.session.execute(select(Item).where(Item.id.in_(ids)))
        return list(result.scalars().all())

    async def get_swipe_counts(self, item_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, int]:
        """Total swipes received by each item (items with none are absent)."""
        ids = list(item_ids)
        if not ids:
            return {}
        result = await self.session.execute(
            select(Swipe.swiped_item_id, func.count(Swipe.id))
            .where(Swipe.swiped_item_id.in_(ids))
            .group_by(Swipe.swiped_item_id)
        )
        return {item_id: count for item_id, count in result.all()}

    async def get_user_opportunities(
        self,
        user_id: uuid.UUID,
        now: datetime,
        limit: int = 20,
    ) -> list[SwapOpportunity]:
        """Active, unexpired opportunities involving *user_id*, best first."""
        result = await self.session.execute(
            select(SwapOpportunity)
            .where(
                SwapOpportunity.status == OpportunityStatus.ACTIVE.value,
                SwapOpportunity.expires_at > now,
                or_(
                    SwapOpportunity.user_a_id == user_id,
                    SwapOpportunity.user_b_id == user_id,
                    SwapOpportunity.user_c_id == user_id,
                ),
            )
            .order_by(SwapOpportunity.confidence_score.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    # ── User actions ────────────────────────────────────────────────────

    async def dismiss_opportunity(self, opportunity_id: uuid.UUID) -> SwapOpportunity | None:
        """Mark an opportunity dismissed; returns ``None`` for an unknown id."""
        result = await self.session.execute(
            select(SwapOpportunity).where(SwapOpportunity.id == opportunity_id)
        )
        opportunity = result.scalar_one_or_none()
        if opportunity is None:
            return None
        opportunity.status = OpportunityStatus.DISMISSED.value
        await self.session.flush()
        return opportunity

    # ── Batch reads ─────────────────────────────────────────────────────

    async def load_active_items(self, limit: int) -> list[Item]:
        """Active, non-archived items, newest first, at most *limit* rows."""
        result = await self.session.execute(
            select(Item)
            .where(Item.is_active.is_(True), Item.is_archived.is_(False))
            .order_by(Item.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def load_swipes(self, limit: int) -> list[Swipe]:
        """Most recent swipes, at most *limit* rows."""
        result = await self.session.execute(
            select(Swipe).order_by(Swipe.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    # ── Batch writes ────────────────────────────────────────────────────

    async def upsert_affinity(
        self,
        user_id: uuid.UUID,
        affinities: dict[str, float],
        computed_at: datetime,
    ) -> None:
        """Replace the user's learned affinity snapshot."""
        stmt = pg_insert(UserAffinity).values(
            id=uuid.uuid4(),
            user_id=user_id,
            category_affinities=affinities,
            computed_at=computed_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserAffinity.user_id],
            set_={
                "category_affinities": stmt.excluded.category_affinities,
                "computed_at": stmt.excluded.computed_at,
            },
        )
        async with self.session.begin_nested():
            await self.session.execute(stmt)

    async def purge_expired_opportunities(self, now: datetime) -> int:
        result = await self.session.execute(
            delete(SwapOpportunity).where(SwapOpportunity.expires_at < now)
        )
        return result.rowcount or 0

    async def retire_active_opportunities(self) -> int:
        """Delete rows from earlier runs that nobody has acted on yet."""
        result = await self.session.execute(
            delete(SwapOpportunity).where(
                SwapOpportunity.status == OpportunityStatus.ACTIVE.value,
            )
        )
        return result.rowcount or 0

    async def add_opportunity(self, opportunity: SwapOpportunity) -> None:
        async with self.session.begin_nested():
            self.session.add(opportunity)
            await self.session.flush()

    async def set_item_boost(
        self,
        item_id: uuid.UUID,
        boost: float,
        expires_at: datetime | None,
    ) -> None:
        async with self.session.begin_nested():
            await self.session.execute(
                update(Item)
                .where(Item.id == item_id)
                .values(reciprocal_boost=boost, boost_expires_at=expires_at)
            )

    async def reset_boosts_except(self, keep_ids: Iterable[uuid.UUID]) -> int:
        """Zero the boost of every boosted item not in *keep_ids*."""
        keep = list(keep_ids)
        stmt = update(Item).where(
            or_(Item.reciprocal_boost > 0, Item.boost_expires_at.is_not(None))
        )
        if keep:
            stmt = stmt.where(Item.id.not_in(keep))
        result = await self.session.execute(
            stmt.values(reciprocal_boost=0.0, boost_expires_at=None)
        )
        return result.rowcount or 0

    # ── Transactions ────────────────────────────────────────────────────

    def savepoint(self):
        """SAVEPOINT context; a failure inside rolls back only this block."""
        return self.session.begin_nested()
