"""
Opportunity publisher — persists a run's swaps and refreshes item boosts.

Publishing is full-replace: expired rows are purged and rows left
``active`` by the previous run are deleted before this run's rows are
written. Each item referenced by a written opportunity receives a
``reciprocal_boost`` equal to the best score among those opportunities
(capped by the reciprocal policy); every other boosted item is reset
to zero in the same pass.

Individual row writes that fail are logged and skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from swapengine.matching_engine.config import OPPORTUNITY_TTL_DAYS
from swapengine.matching_engine.cycles import OpportunityCandidate
from swapengine.matching_engine.policy import ReciprocalPolicy
from swapengine.models import OpportunityStatus, SwapOpportunity

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    two_way_written: int = 0
    three_way_written: int = 0
    items_boosted: int = 0
    boosts_reset: int = 0
    purged: int = 0
    retired: int = 0
    write_failures: int = 0


def compute_boost_map(
    opportunities: Iterable[OpportunityCandidate],
    boost_cap: float,
) -> dict:
    """Item id → max score over every opportunity referencing it, capped."""
    boosts: dict = {}
    for opp in opportunities:
        for item_id in opp.item_ids:
            boosts[item_id] = max(boosts.get(item_id, 0.0), opp.score)
    return {item_id: min(score, boost_cap) for item_id, score in boosts.items()}


def to_row(opp: OpportunityCandidate, expires_at: datetime) -> SwapOpportunity:
    users = list(opp.user_ids) + [None] * (3 - len(opp.user_ids))
    items = list(opp.item_ids) + [None] * (3 - len(opp.item_ids))
    return SwapOpportunity(
        cycle_type=opp.cycle_type,
        user_a_id=users[0], item_a_id=items[0],
        user_b_id=users[1], item_b_id=items[1],
        user_c_id=users[2], item_c_id=items[2],
        confidence_score=opp.score,
        status=OpportunityStatus.ACTIVE.value,
        expires_at=expires_at,
    )


class OpportunityPublisher:
    """
    Writes one run's opportunities through a ``SwapRepository``.

    Args:
        repo: Repository bound to the run's session.
        reciprocal: Boost cap and boost TTL for this run.
        now: Run timestamp; expiries are computed from it.
        ttl_days: Lifetime of the opportunity rows.
    """

    def __init__(
        self,
        repo,
        reciprocal: ReciprocalPolicy,
        now: datetime,
        ttl_days: int = OPPORTUNITY_TTL_DAYS,
    ):
        self.repo = repo
        self.reciprocal = reciprocal
        self.now = now
        self.ttl_days = ttl_days

    async def publish(
        self,
        two_way: Sequence[OpportunityCandidate],
        three_way: Sequence[OpportunityCandidate],
    ) -> PublishResult:
        result = PublishResult()

        result.purged = await self.repo.purge_expired_opportunities(self.now)
        result.retired = await self.repo.retire_active_opportunities()
        logger.info(
            "Cleared %d expired and %d superseded opportunities",
            result.purged, result.retired,
        )

        expires_at = self.now + timedelta(days=self.ttl_days)
        written: list[OpportunityCandidate] = []
        for opp in list(two_way) + list(three_way):
            try:
                await self.repo.add_opportunity(to_row(opp, expires_at))
            except Exception:
                logger.exception(
                    "Failed to write %s opportunity for users %s", opp.cycle_type, opp.user_ids,
                )
                result.write_failures += 1
                continue
            written.append(opp)
            if len(opp.item_ids) == 2:
                result.two_way_written += 1
            else:
                result.three_way_written += 1

        boosted = await self._apply_boosts(written, result)
        result.items_boosted = len(boosted)
        result.boosts_reset = await self.repo.reset_boosts_except(boosted)

        logger.info(
            "Published %d 2-way and %d 3-way opportunities, boosted %d items, reset %d",
            result.two_way_written, result.three_way_written,
            result.items_boosted, result.boosts_reset,
        )
        return result

    async def _apply_boosts(
        self,
        written: Sequence[OpportunityCandidate],
        result: PublishResult,
    ) -> list:
        """Set boosts for items in *written*; returns ids whose boost was stored."""
        boost_map = compute_boost_map(written, self.reciprocal.boost_cap)
        boost_expires_at = self.now + timedelta(days=self.reciprocal.boost_ttl_days)

        boosted = []
        for item_id, boost in boost_map.items():
            try:
                await self.repo.set_item_boost(item_id, boost, boost_expires_at)
            except Exception:
                logger.exception("Failed to update boost for item %s", item_id)
                result.write_failures += 1
                continue
            boosted.append(item_id)
        return boosted
