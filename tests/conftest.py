"""
Shared test fixtures for SwapEngine.

Provides item/swipe factories, an in-memory ``SwapRepository`` stand-in,
mock async sessions, a zero-noise policy, and an async test client.
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from swapengine.matching_engine.policy import DEFAULT_POLICY
from swapengine.models import (
    Item,
    ItemCategory,
    ItemCondition,
    OpportunityStatus,
    Swipe,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


# --- Model factories ---


def _make_item(**overrides) -> Item:
    """Create an Item with test defaults via the normal constructor."""
    defaults = {
        "user_id": uuid.uuid4(),
        "title": "Test item",
        "category": ItemCategory.BOOKS,
        "condition": ItemCondition.GOOD,
        "swap_preferences": [ItemCategory.GAMES],
        "latitude": None,
        "longitude": None,
        "created_at": NOW,
    }
    defaults.update(overrides)
    return Item(**defaults)


def _make_swipe(swiper: Item, target: Item, liked: bool = True, created_at=None) -> Swipe:
    return Swipe(
        swiper_item_id=swiper.id,
        swiped_item_id=target.id,
        liked=liked,
        created_at=created_at or NOW,
    )


@pytest.fixture
def make_item():
    """Factory fixture for creating Item instances."""
    return _make_item


@pytest.fixture
def make_swipe():
    """Factory fixture for creating Swipe instances."""
    return _make_swipe


@pytest.fixture
def now():
    return NOW


# --- Policies ---


def _zero_noise_policy():
    return DEFAULT_POLICY.model_copy(update={
        "exploration": DEFAULT_POLICY.exploration.model_copy(update={"randomness": 0.0}),
    })


@pytest.fixture
def zero_noise_policy():
    """Default policy with exploration noise disabled."""
    return _zero_noise_policy()


@pytest.fixture
def policy_provider(zero_noise_policy):
    provider = MagicMock()
    provider.get_active_policy = AsyncMock(return_value=zero_noise_policy)
    return provider


# --- In-memory repository ---


class FakeSwapRepository:
    """
    In-memory stand-in for ``SwapRepository``.

    Holds ORM instances in plain collections. ``fail_*`` sets make the
    corresponding per-row write raise, to exercise failure handling.
    """

    def __init__(self, items=(), swipes=()):
        self.items = {item.id: item for item in items}
        self.swipes = list(swipes)
        self.locations: dict = {}
        self.matched: dict = {}
        self.deals: dict = {}
        self.opportunities: list = []
        self.affinities: dict = {}
        self.fail_opportunity_items: set = set()
        self.fail_boost_items: set = set()
        self.fail_affinity_users: set = set()

    # Helpers for tests
    def add_match(self, a: Item, b: Item):
        self.matched.setdefault(a.id, set()).add(b.id)
        self.matched.setdefault(b.id, set()).add(a.id)

    def add_deal(self, a: Item, b: Item):
        self.deals.setdefault(a.id, set()).add(b.id)
        self.deals.setdefault(b.id, set()).add(a.id)

    def boosts(self) -> dict:
        return {
            item_id: item.reciprocal_boost
            for item_id, item in self.items.items()
            if item.reciprocal_boost
        }

    def _active(self):
        live = [i for i in self.items.values() if i.is_active and not i.is_archived]
        return sorted(live, key=lambda i: i.created_at, reverse=True)

    # Repository API
    def savepoint(self):
        @asynccontextmanager
        async def _noop():
            yield
        return _noop()

    async def get_item(self, item_id):
        return self.items.get(item_id)

    async def get_owner_location(self, user_id):
        return self.locations.get(user_id, (None, None))

    async def get_swipes_from_item(self, item_id):
        return [s for s in self.swipes if s.swiper_item_id == item_id]

    async def get_matched_item_ids(self, item_id):
        return set(self.matched.get(item_id, set()))

    async def get_accepted_deal_item_ids(self, item_id):
        return set(self.deals.get(item_id, set()))

    async def get_candidate_items(self, owner_id):
        return [i for i in self._active() if i.user_id != owner_id]

    async def get_compatible_items(self, owner_id, category, desired):
        wanted = set(desired)
        return [
            i for i in self._active()
            if i.user_id != owner_id
            and i.category in wanted
            and category in (i.swap_preferences or [])
        ]

    async def get_items_by_ids(self, item_ids):
        return [self.items[i] for i in item_ids if i in self.items]

    async def get_swipe_counts(self, item_ids):
        wanted = set(item_ids)
        counts: dict = {}
        for s in self.swipes:
            if s.swiped_item_id in wanted:
                counts[s.swiped_item_id] = counts.get(s.swiped_item_id, 0) + 1
        return counts

    async def get_user_opportunities(self, user_id, now, limit=20):
        rows = [
            o for o in self.opportunities
            if o.status == OpportunityStatus.ACTIVE.value
            and o.expires_at > now
            and user_id in (o.user_a_id, o.user_b_id, o.user_c_id)
        ]
        return sorted(rows, key=lambda o: o.confidence_score, reverse=True)[:limit]

    async def dismiss_opportunity(self, opportunity_id):
        for opportunity in self.opportunities:
            if opportunity.id == opportunity_id:
                opportunity.status = OpportunityStatus.DISMISSED.value
                return opportunity
        return None

    async def load_active_items(self, limit):
        return self._active()[:limit]

    async def load_swipes(self, limit):
        return sorted(self.swipes, key=lambda s: s.created_at, reverse=True)[:limit]

    async def upsert_affinity(self, user_id, affinities, computed_at):
        if user_id in self.fail_affinity_users:
            raise RuntimeError("affinity write failed")
        self.affinities[user_id] = (dict(affinities), computed_at)

    async def purge_expired_opportunities(self, now):
        before = len(self.opportunities)
        self.opportunities = [o for o in self.opportunities if o.expires_at >= now]
        return before - len(self.opportunities)

    async def retire_active_opportunities(self):
        before = len(self.opportunities)
        self.opportunities = [
            o for o in self.opportunities if o.status != OpportunityStatus.ACTIVE.value
        ]
        return before - len(self.opportunities)

    async def add_opportunity(self, opportunity):
        if self.fail_opportunity_items & set(opportunity.item_ids):
            raise RuntimeError("opportunity write failed")
        self.opportunities.append(opportunity)

    async def set_item_boost(self, item_id, boost, expires_at):
        if item_id in self.fail_boost_items:
            raise RuntimeError("boost write failed")
        item = self.items[item_id]
        item.reciprocal_boost = boost
        item.boost_expires_at = expires_at

    async def reset_boosts_except(self, keep_ids):
        keep = set(keep_ids)
        reset = 0
        for item in self.items.values():
            if item.id in keep:
                continue
            if item.reciprocal_boost or item.boost_expires_at is not None:
                item.reciprocal_boost = 0.0
                item.boost_expires_at = None
                reset += 1
        return reset


@pytest.fixture
def fake_repo():
    return FakeSwapRepository()


# --- Mock Database Session ---


def _async_cm():
    cm = AsyncMock()
    cm.__aenter__ = AsyncMock(return_value=None)
    cm.__aexit__ = AsyncMock(return_value=False)
    return cm


@pytest.fixture
def mock_db():
    """AsyncMock database session supporting begin() and begin_nested()."""
    db = AsyncMock()

    mock_result = MagicMock()
    mock_result.scalar_one_or_none = MagicMock(return_value=None)
    db.execute = AsyncMock(return_value=mock_result)
    db.flush = AsyncMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.begin = MagicMock(side_effect=lambda: _async_cm())
    db.begin_nested = MagicMock(side_effect=lambda: _async_cm())

    return db


@pytest.fixture
def mock_session_factory(mock_db):
    """Session factory returning a context manager that yields mock_db."""

    class _SessionCM:
        async def __aenter__(self):
            return mock_db

        async def __aexit__(self, *args):
            pass

    def factory():
        return _SessionCM()

    return factory


# --- Dependency Override Helpers ---


@pytest_asyncio.fixture
async def client(mock_db):
    """
    Async HTTP test client with get_db overridden to use a test double.
    Individual tests override service dependencies as needed.
    """
    from swapengine.database import get_db
    from swapengine.main import app

    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
