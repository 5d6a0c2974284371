"""
Recommendation session — ranks candidates for one source item.

Flow:
  1. Resolve the source item (``ItemNotFoundError`` if missing).
  2. Read the active policy once; it is threaded into every scoring call.
  3. Build the strict pool: active items of other users minus
     everything the source item already swiped, matched, or dealt with.
  4. If the strict pool is smaller than ``MIN_STRICT_POOL_SIZE`` (or the
     caller asked for it), expand: re-admit targets swiped more than
     ``RECYCLE_AFTER_DAYS`` ago and score with the expanded weights.
  5. Any failure in steps 3-4 falls back to a plain preference
     intersection (``degraded=True``) instead of failing the request.

The session only reads. It keeps no state between calls.
"""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from swapengine.matching_engine.config import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MIN_STRICT_POOL_SIZE,
    RECYCLE_AFTER_DAYS,
    SCORE_DECIMALS,
)
from swapengine.matching_engine.errors import ItemNotFoundError
from swapengine.matching_engine.policy import ActivePolicy, expanded_weights
from swapengine.matching_engine.scorer import CandidateScorer

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class RankedItem:
    id: uuid.UUID
    score: float


@dataclass
class RecommendationResult:
    ranked_items: list[RankedItem] = field(default_factory=list)
    total: int = 0
    search_expanded: bool = False
    policy_version: str = ""
    degraded: bool = False


class RecommendationService:
    """
    Per-request recommendation orchestration.

    Args:
        repo: ``SwapRepository`` bound to the request's session.
        policy_provider: Supplies the active policy (``PolicyProvider``).
        rng: Random source for exploration noise.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        repo,
        policy_provider,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.repo = repo
        self.policy_provider = policy_provider
        self.rng = rng or random.Random()
        self.clock = clock or _utcnow

    # ── Public API ───────────────────────────────────────────────────────

    async def recommend(
        self,
        source_item_id: uuid.UUID,
        limit: int = DEFAULT_LIMIT,
        expanded_search: bool = False,
    ) -> RecommendationResult:
        limit = max(1, min(limit, MAX_LIMIT))

        source = await self.repo.get_item(source_item_id)
        if source is None:
            raise ItemNotFoundError(source_item_id)

        policy = await self.policy_provider.get_active_policy()

        try:
            async with self.repo.savepoint():
                return await self._rank(source, policy, limit, expanded_search)
        except Exception:
            logger.exception(
                "Ranking failed for item %s, serving preference-only fallback", source.id,
            )
        return await self._fallback(source, policy, limit)

    async def recommend_with_retry(
        self,
        source_item_id: uuid.UUID,
        limit: int = DEFAULT_LIMIT,
    ) -> RecommendationResult:
        """
        Strict call, then one explicit expanded call if it came back empty.

        A failure of the expanded call counts as an exhausted pool.
        """
        result = await self.recommend(source_item_id, limit=limit)
        if result.ranked_items or result.search_expanded:
            return result

        try:
            return await self.recommend(source_item_id, limit=limit, expanded_search=True)
        except Exception:
            logger.warning(
                "Expanded retry failed for item %s, treating pool as exhausted",
                source_item_id, exc_info=True,
            )
            return RecommendationResult(
                total=0,
                search_expanded=True,
                policy_version=result.policy_version,
            )

    # ── Strict / expanded ranking ────────────────────────────────────────

    async def _rank(
        self,
        source,
        policy: ActivePolicy,
        limit: int,
        expanded_search: bool,
    ) -> RecommendationResult:
        now = self.clock()

        owner_location = await self.repo.get_owner_location(source.user_id)
        swipes = await self.repo.get_swipes_from_item(source.id)
        swiped_ids = {s.swiped_item_id for s in swipes}
        linked_ids = (
            await self.repo.get_matched_item_ids(source.id)
            | await self.repo.get_accepted_deal_item_ids(source.id)
        )
        linked_ids.add(source.id)

        candidates = await self.repo.get_candidate_items(source.user_id)
        strict_pool = [
            c for c in candidates if c.id not in swiped_ids and c.id not in linked_ids
        ]

        expand = expanded_search or len(strict_pool) < MIN_STRICT_POOL_SIZE
        pool = strict_pool
        weights = policy.weights
        if expand:
            recycle_before = now - timedelta(days=RECYCLE_AFTER_DAYS)
            recyclable = {
                s.swiped_item_id for s in swipes
                if s.created_at is not None and _aware(s.created_at) < recycle_before
            }
            pool = [
                c for c in candidates
                if c.id not in linked_ids and (c.id not in swiped_ids or c.id in recyclable)
            ]
            weights = expanded_weights(policy.weights)
            logger.info(
                "Expanded search for item %s: strict pool %d, expanded pool %d",
                source.id, len(strict_pool), len(pool),
            )

        liked_ids = [s.swiped_item_id for s in swipes if s.liked]
        liked_items = await self.repo.get_items_by_ids(liked_ids)
        swipe_counts = await self.repo.get_swipe_counts(c.id for c in pool)

        scorer = CandidateScorer(policy, weights=weights, rng=self.rng, now=now)
        scored = [
            (c, scorer.score(source, c, owner_location, liked_items, swipe_counts.get(c.id, 0)))
            for c in pool
        ]
        scored.sort(key=lambda pair: pair[1], reverse=True)

        return RecommendationResult(
            ranked_items=[
                RankedItem(id=c.id, score=round(score, SCORE_DECIMALS))
                for c, score in scored[:limit]
            ],
            total=len(pool),
            search_expanded=expand,
            policy_version=policy.policy_version,
        )

    # ── Degraded mode ────────────────────────────────────────────────────

    async def _fallback(
        self,
        source,
        policy: ActivePolicy,
        limit: int,
    ) -> RecommendationResult:
        """Preference intersection only, newest first, no scoring."""
        swipes = await self.repo.get_swipes_from_item(source.id)
        swiped_ids = {s.swiped_item_id for s in swipes}
        candidates = await self.repo.get_compatible_items(
            source.user_id, source.category, source.swap_preferences or [],
        )
        pool = [c for c in candidates if c.id not in swiped_ids and c.id != source.id]
        return RecommendationResult(
            ranked_items=[RankedItem(id=c.id, score=0.0) for c in pool[:limit]],
            total=len(pool),
            search_expanded=False,
            policy_version=policy.policy_version,
            degraded=True,
        )
