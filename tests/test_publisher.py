"""Tests for the opportunity publisher (publisher.py).

Uses the in-memory repository from conftest to check full-replace
publishing, boost derivation, boost reset, idempotence, and per-row
failure handling.
"""

from datetime import timedelta

import pytest

from swapengine.matching_engine.cycles import OpportunityCandidate
from swapengine.matching_engine.policy import ReciprocalPolicy
from swapengine.matching_engine.publisher import (
    OpportunityPublisher,
    compute_boost_map,
    to_row,
)
from swapengine.models import OpportunityStatus

from tests.conftest import FakeSwapRepository

RECIPROCAL = ReciprocalPolicy(priority="medium", boost_cap=1.0, boost_ttl_days=7)


def _two_way(a, b, score):
    return OpportunityCandidate("2-way", (a.user_id, b.user_id), (a.id, b.id), score)


def _three_way(a, b, c, score):
    return OpportunityCandidate(
        "3-way", (a.user_id, b.user_id, c.user_id), (a.id, b.id, c.id), score,
    )


@pytest.fixture
def items(make_item):
    return [make_item() for _ in range(5)]


@pytest.fixture
def repo(items):
    return FakeSwapRepository(items=items)


# ===========================================================================
# Pure helpers
# ===========================================================================


class TestComputeBoostMap:

    def test_max_score_per_item(self, items):
        a, b, c = items[:3]
        boosts = compute_boost_map(
            [_two_way(a, b, 0.4), _three_way(a, b, c, 0.7), _two_way(b, c, 0.5)],
            boost_cap=1.0,
        )
        assert boosts == {a.id: 0.7, b.id: 0.7, c.id: 0.7}

    def test_cap_applied(self, items):
        a, b = items[:2]
        assert compute_boost_map([_two_way(a, b, 0.9)], boost_cap=0.5) == {a.id: 0.5, b.id: 0.5}

    def test_empty(self):
        assert compute_boost_map([], boost_cap=1.0) == {}


class TestToRow:

    def test_two_way_row(self, items, now):
        a, b = items[:2]
        row = to_row(_two_way(a, b, 0.42), now)
        assert row.cycle_type == "2-way"
        assert (row.user_a_id, row.item_a_id) == (a.user_id, a.id)
        assert (row.user_b_id, row.item_b_id) == (b.user_id, b.id)
        assert row.user_c_id is None and row.item_c_id is None
        assert row.status == OpportunityStatus.ACTIVE.value
        assert row.confidence_score == 0.42

    def test_three_way_row(self, items, now):
        a, b, c = items[:3]
        row = to_row(_three_way(a, b, c, 0.5), now)
        assert row.item_ids == [a.id, b.id, c.id]
        assert row.expires_at == now


# ===========================================================================
# OpportunityPublisher
# ===========================================================================


class TestPublish:

    @pytest.mark.asyncio
    async def test_writes_rows_with_ttl(self, repo, items, now):
        a, b, c = items[:3]
        publisher = OpportunityPublisher(repo, RECIPROCAL, now=now, ttl_days=7)

        result = await publisher.publish([_two_way(a, b, 0.5)], [_three_way(a, b, c, 0.6)])

        assert result.two_way_written == 1
        assert result.three_way_written == 1
        assert len(repo.opportunities) == 2
        assert all(o.expires_at == now + timedelta(days=7) for o in repo.opportunities)

    @pytest.mark.asyncio
    async def test_boosts_set_with_policy_ttl(self, repo, items, now):
        a, b = items[:2]
        reciprocal = ReciprocalPolicy(boost_cap=1.0, boost_ttl_days=3)
        await OpportunityPublisher(repo, reciprocal, now=now).publish([_two_way(a, b, 0.5)], [])

        assert a.reciprocal_boost == 0.5
        assert a.boost_expires_at == now + timedelta(days=3)
        assert b.reciprocal_boost == 0.5

    @pytest.mark.asyncio
    async def test_boost_capped(self, repo, items, now):
        a, b = items[:2]
        reciprocal = ReciprocalPolicy(boost_cap=0.3)
        result = await OpportunityPublisher(repo, reciprocal, now=now).publish(
            [_two_way(a, b, 0.8)], [],
        )
        assert a.reciprocal_boost == 0.3
        assert result.items_boosted == 2

    @pytest.mark.asyncio
    async def test_items_dropped_from_opportunities_reset(self, repo, items, now):
        a, b, c, d, _ = items
        c.reciprocal_boost = 0.9
        c.boost_expires_at = now + timedelta(days=2)
        d.reciprocal_boost = 0.4

        result = await OpportunityPublisher(repo, RECIPROCAL, now=now).publish(
            [_two_way(a, b, 0.5)], [],
        )

        assert c.reciprocal_boost == 0.0
        assert c.boost_expires_at is None
        assert d.reciprocal_boost == 0.0
        assert result.boosts_reset == 2
        assert set(repo.boosts()) == {a.id, b.id}

    @pytest.mark.asyncio
    async def test_previous_active_rows_replaced(self, repo, items, now):
        a, b, c = items[:3]
        stale = to_row(_two_way(b, c, 0.4), now + timedelta(days=3))
        accepted = to_row(_two_way(a, c, 0.4), now + timedelta(days=3))
        accepted.status = OpportunityStatus.ACCEPTED.value
        expired = to_row(_two_way(a, b, 0.4), now - timedelta(days=1))
        expired.status = OpportunityStatus.DISMISSED.value
        repo.opportunities = [stale, accepted, expired]

        result = await OpportunityPublisher(repo, RECIPROCAL, now=now).publish(
            [_two_way(a, b, 0.5)], [],
        )

        assert result.purged == 1
        assert result.retired == 1
        assert stale not in repo.opportunities
        assert expired not in repo.opportunities
        assert accepted in repo.opportunities
        assert len(repo.opportunities) == 2

    @pytest.mark.asyncio
    async def test_republishing_is_idempotent(self, repo, items, now):
        a, b, c, d, _ = items
        two_way = [_two_way(a, b, 0.5), _two_way(c, d, 0.35)]
        three_way = [_three_way(a, c, d, 0.6)]
        publisher = OpportunityPublisher(repo, RECIPROCAL, now=now)

        await publisher.publish(two_way, three_way)
        first = repo.boosts()
        first_rows = len(repo.opportunities)

        await publisher.publish(two_way, three_way)

        assert repo.boosts() == first
        assert len(repo.opportunities) == first_rows
        assert first[a.id] == 0.6

    @pytest.mark.asyncio
    async def test_failed_row_skipped_and_not_boosted(self, repo, items, now):
        a, b, c, d, _ = items
        repo.fail_opportunity_items = {c.id}

        result = await OpportunityPublisher(repo, RECIPROCAL, now=now).publish(
            [_two_way(a, b, 0.5), _two_way(c, d, 0.7)], [],
        )

        assert result.write_failures == 1
        assert result.two_way_written == 1
        assert set(repo.boosts()) == {a.id, b.id}

    @pytest.mark.asyncio
    async def test_failed_boost_does_not_abort(self, repo, items, now):
        a, b = items[:2]
        a.reciprocal_boost = 0.2
        repo.fail_boost_items = {a.id}

        result = await OpportunityPublisher(repo, RECIPROCAL, now=now).publish(
            [_two_way(a, b, 0.5)], [],
        )

        assert result.write_failures == 1
        assert result.items_boosted == 1
        assert b.reciprocal_boost == 0.5
        # The stale boost on the failed item is cleared by the reset pass
        assert a.reciprocal_boost == 0.0

    @pytest.mark.asyncio
    async def test_empty_run_clears_everything(self, repo, items, now):
        items[0].reciprocal_boost = 0.5
        result = await OpportunityPublisher(repo, RECIPROCAL, now=now).publish([], [])
        assert result.items_boosted == 0
        assert repo.boosts() == {}
