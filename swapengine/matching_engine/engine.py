"""
Reciprocal optimizer orchestrator.

Coordinates one batch run: acquires the run lock, loads capped snapshots
of active items and swipes, learns per-user affinities, scores every
user pair, detects 2-way and 3-way swaps, and publishes opportunities
and item boosts in a single transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timezone

from swapengine.matching_engine.affinity import learn_category_affinities
from swapengine.matching_engine.config import (
    EDGE_ADMISSION_THRESHOLD,
    MAX_ACTIVE_ITEMS,
    MAX_SWIPES,
)
from swapengine.matching_engine.cycles import find_three_way_cycles, select_two_way
from swapengine.matching_engine.policy import PolicyProvider
from swapengine.matching_engine.publisher import OpportunityPublisher
from swapengine.matching_engine.reciprocal import UserProfile, build_edges, score_all_pairs
from swapengine.matching_engine.reporter import build_run_report
from swapengine.matching_engine.repository import SwapRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReciprocalOptimizer:
    """Runs the periodic reciprocal-swap discovery pass."""

    def __init__(
        self,
        run_lock=None,
        session_factory=None,
        clock: Callable[[], datetime] | None = None,
        repo_factory=SwapRepository,
        max_items: int = MAX_ACTIVE_ITEMS,
        max_swipes: int = MAX_SWIPES,
    ):
        """
        Args:
            run_lock: RunLock instance (defaults to module-level singleton).
            session_factory: Async session factory for DB access
                             (defaults to ``swapengine.database.async_session``).
            clock: Returns the current UTC time; injected for tests.
            repo_factory: Builds the repository from a session.
            max_items: Cap on active items loaded per run.
            max_swipes: Cap on swipes loaded per run.
        """
        self._run_lock = run_lock
        self._session_factory = session_factory
        self.clock = clock or _utcnow
        self.repo_factory = repo_factory
        self.max_items = max_items
        self.max_swipes = max_swipes

    @property
    def run_lock(self):
        if self._run_lock is not None:
            return self._run_lock
        from swapengine.matching_engine.run_lock import run_lock
        return run_lock

    @property
    def session_factory(self):
        if self._session_factory is not None:
            return self._session_factory
        from swapengine.database import async_session
        return async_session

    # ── Public entry point ───────────────────────────────────────────────

    async def run_cycle(self) -> dict:
        """
        Execute a full optimizer run.

        Returns ``{"skipped": True}`` if another run holds the lock.
        """
        lock = await self.run_lock.acquire()
        if lock is None:
            logger.warning("Optimizer run skipped, lock held by another process")
            return {"skipped": True}

        try:
            return await self._execute_run()
        finally:
            await self.run_lock.release(lock)

    # ── Core run logic ───────────────────────────────────────────────────

    async def _execute_run(self) -> dict:
        started_at = self.clock()
        run_id = f"RO-{started_at:%Y%m%d-%H%M%S}"
        logger.info("Starting optimizer run %s", run_id)

        async with self.session_factory() as session:
            policy = await PolicyProvider(session).get_active_policy()

        async with self.session_factory() as session:
            async with session.begin():
                repo = self.repo_factory(session)

                # 1. Capped input snapshots
                items, items_truncated = await self._load_capped(
                    repo.load_active_items, self.max_items, "active items",
                )
                swipes, swipes_truncated = await self._load_capped(
                    repo.load_swipes, self.max_swipes, "swipes",
                )

                # 2. Affinities per user
                profiles, affinity_failures = await self._build_profiles(
                    repo, items, swipes, started_at,
                )
                logger.info("Processed %d users", len(profiles))

                # 3. Pairwise scores
                pair_scores, pruned = score_all_pairs(profiles)
                two_way = select_two_way(pair_scores)
                logger.info(
                    "Found %d 2-way swaps (%d pairs scored, %d pruned)",
                    len(two_way), len(pair_scores), pruned,
                )

                # 4. Three-way cycles
                edges = build_edges(pair_scores, EDGE_ADMISSION_THRESHOLD)
                cycles = find_three_way_cycles([p.user_id for p in profiles], edges)
                logger.info("Found %d 3-way cycles", len(cycles))

                # 5. Publish
                publisher = OpportunityPublisher(repo, policy.reciprocal, now=started_at)
                published = await publisher.publish(two_way, cycles)

        completed_at = self.clock()
        logger.info("Optimizer run %s completed", run_id)
        return build_run_report(
            run_id=run_id,
            started_at=started_at,
            completed_at=completed_at,
            users_processed=len(profiles),
            two_way_opportunities=published.two_way_written,
            three_way_cycles=published.three_way_written,
            items_boosted=published.items_boosted,
            items_loaded=len(items),
            swipes_loaded=len(swipes),
            items_truncated=items_truncated,
            swipes_truncated=swipes_truncated,
            write_failures=published.write_failures + affinity_failures,
        )

    @staticmethod
    async def _load_capped(
        loader: Callable[[int], Awaitable[list]],
        cap: int,
        what: str,
    ) -> tuple[list, bool]:
        """Load at most *cap* rows; one extra row is fetched to detect overflow."""
        rows = await loader(cap + 1)
        logger.info("Loaded %d %s", min(len(rows), cap), what)
        if len(rows) > cap:
            logger.warning("More than %d %s; truncating input", cap, what)
            return rows[:cap], True
        return rows, False

    @staticmethod
    async def _build_profiles(
        repo: SwapRepository,
        items: Sequence,
        swipes: Sequence,
        computed_at: datetime,
    ) -> tuple[list[UserProfile], int]:
        """
        Group items by owner and learn each owner's affinities.

        Swipes are attributed to the owner of the swiping item; swipes
        from items outside the snapshot are ignored. Returns the profiles
        (in item order) and the number of affinity writes that failed.
        """
        owner_by_item = {item.id: item.user_id for item in items}
        category_by_item = {item.id: item.category for item in items}

        profiles: dict = {}
        for item in items:
            profile = profiles.get(item.user_id)
            if profile is None:
                profile = profiles[item.user_id] = UserProfile(user_id=item.user_id)
            profile.items.append(item)

        swipes_by_user: dict = {}
        for swipe in swipes:
            owner = owner_by_item.get(swipe.swiper_item_id)
            if owner is None:
                continue
            swipes_by_user.setdefault(owner, []).append(swipe)

        failures = 0
        for user_id, profile in profiles.items():
            profile.affinities = learn_category_affinities(
                swipes_by_user.get(user_id, []), category_by_item,
            )
            try:
                await repo.upsert_affinity(user_id, profile.affinities, computed_at)
            except Exception:
                logger.exception("Failed to store affinities for user %s", user_id)
                failures += 1

        return list(profiles.values()), failures


# Module-level singleton
reciprocal_optimizer = ReciprocalOptimizer()
