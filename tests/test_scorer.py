"""Tests for the candidate scorer (scorer.py).

Covers each sub-score, the weighted total, exploration noise isolation,
and the near-versus-far end-to-end ranking scenario.
"""

import random
from datetime import timedelta

import pytest

from swapengine.matching_engine.policy import DEFAULT_POLICY, ExplorationPolicy
from swapengine.matching_engine.scorer import (
    CandidateScorer,
    ScoreBreakdown,
    behavior_affinity,
    category_similarity,
    exchange_compatibility,
    freshness_score,
)
from swapengine.matching_engine.similarity import cosine_similarity
from swapengine.matching_engine.embeddings import embedding_for
from swapengine.models import ItemCategory, ItemCondition

EXPLORATION = DEFAULT_POLICY.exploration

# Owner in central Lagos
OWNER = (6.5244, 3.3792)
KM_PER_DEG_LAT = 111.19


def _north_of(km: float) -> tuple[float, float]:
    return OWNER[0] + km / KM_PER_DEG_LAT, OWNER[1]


# ===========================================================================
# Sub-scores
# ===========================================================================


class TestCategorySimilarity:

    def test_no_preferences_is_neutral(self):
        assert category_similarity([], ItemCategory.GAMES) == 0.5

    def test_single_preference_equal_category(self):
        assert category_similarity([ItemCategory.GAMES], ItemCategory.GAMES) == pytest.approx(1.0)

    def test_mean_of_preferences(self):
        expected = cosine_similarity(
            [(a + b) / 2 for a, b in zip(embedding_for("books"), embedding_for("sports"))],
            embedding_for("games"),
        )
        got = category_similarity([ItemCategory.BOOKS, ItemCategory.SPORTS], ItemCategory.GAMES)
        assert got == pytest.approx(expected)


class TestExchangeCompatibility:

    def test_perfect_mutual_swap(self, make_item):
        source = make_item(category=ItemCategory.BOOKS, swap_preferences=[ItemCategory.GAMES])
        candidate = make_item(category=ItemCategory.GAMES, swap_preferences=[ItemCategory.BOOKS])
        assert exchange_compatibility(source, candidate) == pytest.approx(1.0)

    def test_one_sided_want(self, make_item):
        source = make_item(category=ItemCategory.BOOKS, swap_preferences=[ItemCategory.GAMES])
        candidate = make_item(category=ItemCategory.GAMES, swap_preferences=[ItemCategory.SPORTS])
        sim = cosine_similarity(embedding_for("books"), embedding_for("sports"))
        assert exchange_compatibility(source, candidate) == pytest.approx(0.4 + 0.2 * sim)

    def test_candidate_without_preferences_uses_other(self, make_item):
        source = make_item(category=ItemCategory.BOOKS, swap_preferences=[])
        candidate = make_item(category=ItemCategory.GAMES, swap_preferences=[])
        sim = cosine_similarity(embedding_for("books"), embedding_for("other"))
        assert exchange_compatibility(source, candidate) == pytest.approx(0.2 * sim)


class TestBehaviorAffinity:

    def test_no_likes_is_neutral(self):
        assert behavior_affinity([], ItemCategory.GAMES) == 0.5

    def test_liked_same_category(self, make_item):
        liked = [make_item(category=ItemCategory.SPORTS)]
        assert behavior_affinity(liked, ItemCategory.SPORTS) == pytest.approx(1.0)


class TestFreshness:

    def test_brand_new_cold_start(self, now):
        assert freshness_score(now, now, 0, EXPLORATION) == pytest.approx(1.15)

    def test_warm_item_gets_no_boost(self, now):
        assert freshness_score(now, now, 5, EXPLORATION) == pytest.approx(1.0)

    def test_one_day_old(self, now):
        assert freshness_score(now - timedelta(days=1), now, 10, EXPLORATION) == pytest.approx(0.5)

    def test_stale_item_penalised(self, now):
        score = freshness_score(now - timedelta(days=20), now, 10, EXPLORATION)
        assert score == pytest.approx(1 / 21 - 0.1)

    def test_exactly_at_stale_threshold_not_penalised(self, now):
        score = freshness_score(now - timedelta(days=14), now, 10, EXPLORATION)
        assert score == pytest.approx(1 / 15)

    def test_custom_thresholds(self, now):
        exploration = ExplorationPolicy(
            randomness=0, cold_start_boost=0.5, stale_item_penalty=0,
            cold_start_threshold_swipes=20,
        )
        assert freshness_score(now, now, 19, exploration) == pytest.approx(1.5)

    def test_naive_timestamp_treated_as_utc(self, now):
        naive = (now - timedelta(days=1)).replace(tzinfo=None)
        assert freshness_score(naive, now, 10, EXPLORATION) == pytest.approx(0.5)


# ===========================================================================
# CandidateScorer
# ===========================================================================


class TestCandidateScorer:

    def test_breakdown_fields(self, make_item, zero_noise_policy, now):
        source = make_item(category=ItemCategory.BOOKS, swap_preferences=[ItemCategory.GAMES])
        candidate = make_item(
            category=ItemCategory.GAMES,
            swap_preferences=[ItemCategory.BOOKS],
            condition=ItemCondition.NEW,
            latitude=OWNER[0], longitude=OWNER[1],
            reciprocal_boost=0.6,
            boost_expires_at=now + timedelta(days=3),
        )
        scorer = CandidateScorer(zero_noise_policy, now=now)
        parts = scorer.breakdown(source, candidate, OWNER, [], swipe_count=0)

        assert parts.category_similarity == pytest.approx(1.0)
        assert parts.geo_score == pytest.approx(1.0)
        assert parts.exchange_compatibility == pytest.approx(1.0)
        assert parts.behavior_affinity == 0.5
        assert parts.freshness == pytest.approx(1.15)
        assert parts.condition_score == 1.0
        assert parts.reciprocal_boost == 0.6

    def test_expired_boost_contributes_nothing(self, make_item, zero_noise_policy, now):
        source = make_item()
        candidate = make_item(
            category=ItemCategory.GAMES,
            reciprocal_boost=0.9,
            boost_expires_at=now - timedelta(minutes=1),
        )
        parts = CandidateScorer(zero_noise_policy, now=now).breakdown(
            source, candidate, (None, None), [], 0,
        )
        assert parts.reciprocal_boost == 0.0

    def test_weighted_total(self):
        parts = ScoreBreakdown(1.0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0)
        assert parts.weighted_total(DEFAULT_POLICY.weights) == pytest.approx(1.0)

    def test_deterministic_without_noise(self, make_item, zero_noise_policy, now):
        source = make_item()
        candidate = make_item(category=ItemCategory.GAMES, swap_preferences=[ItemCategory.BOOKS])
        first = CandidateScorer(zero_noise_policy, now=now).score(source, candidate, OWNER, [], 2)
        second = CandidateScorer(zero_noise_policy, now=now).score(source, candidate, OWNER, [], 2)
        assert first == second

    def test_noise_bounded_by_randomness(self, make_item, now):
        source = make_item()
        candidate = make_item(category=ItemCategory.GAMES)
        rng = random.Random(7)
        base = CandidateScorer(
            DEFAULT_POLICY.model_copy(update={
                "exploration": DEFAULT_POLICY.exploration.model_copy(update={"randomness": 0.0}),
            }),
            now=now,
        ).score(source, candidate, OWNER, [], 10)

        scorer = CandidateScorer(DEFAULT_POLICY, rng=rng, now=now)
        for _ in range(50):
            noisy = scorer.score(source, candidate, OWNER, [], 10)
            assert base <= noisy < base + 0.1

    def test_seeded_rng_reproducible(self, make_item, now):
        source = make_item()
        candidate = make_item(category=ItemCategory.GAMES)
        a = CandidateScorer(DEFAULT_POLICY, rng=random.Random(3), now=now)
        b = CandidateScorer(DEFAULT_POLICY, rng=random.Random(3), now=now)
        assert a.score(source, candidate, OWNER, [], 1) == b.score(source, candidate, OWNER, [], 1)

    def test_custom_weights_override_policy(self, make_item, zero_noise_policy, now):
        source = make_item()
        candidate = make_item(category=ItemCategory.GAMES, condition=ItemCondition.POOR)
        only_condition = zero_noise_policy.weights.model_copy(update={
            "category_similarity": 0, "geo_score": 0, "exchange_compatibility": 0,
            "behavior_affinity": 0, "freshness": 0, "condition_score": 1.0,
            "reciprocal_boost": 0,
        })
        scorer = CandidateScorer(zero_noise_policy, weights=only_condition, now=now)
        assert scorer.score(source, candidate, OWNER, [], 0) == pytest.approx(0.3)


class TestNearBeatsFar:
    """Books-for-games listing: a 10 km candidate outranks an identical 500 km one."""

    def test_near_candidate_scores_higher(self, make_item, zero_noise_policy, now):
        source = make_item(category=ItemCategory.BOOKS, swap_preferences=[ItemCategory.GAMES])

        def games_item(km):
            lat, lon = _north_of(km)
            return make_item(
                category=ItemCategory.GAMES,
                swap_preferences=[ItemCategory.BOOKS],
                condition=ItemCondition.NEW,
                created_at=now,
                latitude=lat, longitude=lon,
            )

        near, far = games_item(10), games_item(500)
        scorer = CandidateScorer(zero_noise_policy, now=now)

        near_score = scorer.score(source, near, OWNER, [], 0)
        far_score = scorer.score(source, far, OWNER, [], 0)
        assert near_score > far_score
        # Only the geo term differs
        geo_gap = (
            scorer.breakdown(source, near, OWNER, [], 0).geo_score
            - scorer.breakdown(source, far, OWNER, [], 0).geo_score
        )
        assert near_score - far_score == pytest.approx(0.15 * geo_gap)
