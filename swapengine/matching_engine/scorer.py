"""
Candidate scorer — ranks one candidate item against a source item.

Seven independent sub-scores are combined as a weighted sum using the
active policy's coefficients, plus an additive exploration term drawn
from an injected random source. With ``randomness == 0`` the score is a
pure function of its inputs.

Items are ``swapengine.models.Item`` instances (or any object exposing
the same attributes).
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from swapengine.matching_engine.config import (
    EXCHANGE_EMBEDDING_WEIGHT,
    EXCHANGE_I_WANT_WEIGHT,
    EXCHANGE_THEY_WANT_WEIGHT,
    NEUTRAL_SCORE,
)
from swapengine.matching_engine.embeddings import (
    CATEGORY_EMBEDDINGS,
    average_embedding,
    condition_score,
    embedding_for,
    label,
)
from swapengine.matching_engine.policy import (
    ActivePolicy,
    ExplorationPolicy,
    PolicyWeights,
)
from swapengine.matching_engine.similarity import cosine_similarity, geo_score

SECONDS_PER_DAY = 86400

# (latitude, longitude) of the source item's owner; either may be None
OwnerLocation = tuple[float | None, float | None]


@dataclass(frozen=True)
class ScoreBreakdown:
    """Sub-scores for one (source, candidate) pair; field names match ``PolicyWeights``."""

    category_similarity: float
    geo_score: float
    exchange_compatibility: float
    behavior_affinity: float
    freshness: float
    condition_score: float
    reciprocal_boost: float

    def weighted_total(self, weights: PolicyWeights) -> float:
        return sum(
            getattr(weights, name) * value
            for name, value in asdict(self).items()
        )


# ── Sub-scores ───────────────────────────────────────────────────────────


def _labels(categories: Iterable | None) -> set[str]:
    return {label(c) for c in (categories or [])}


def category_similarity(desired: Sequence, candidate_category) -> float:
    """Cosine between the mean embedding of *desired* and the candidate's category."""
    avg = average_embedding(desired or [])
    if avg is None:
        return NEUTRAL_SCORE
    return cosine_similarity(avg, embedding_for(candidate_category))


def exchange_compatibility(source, candidate) -> float:
    """
    How well the two items complement each other.

    ``0.4 * (candidate wants source's category)
    + 0.4 * (source wants candidate's category)
    + 0.2 * cosine(source category, mean of candidate's wants)``
    """
    they_want_mine = 1.0 if label(source.category) in _labels(candidate.swap_preferences) else 0.0
    i_want_theirs = 1.0 if label(candidate.category) in _labels(source.swap_preferences) else 0.0

    their_wants = average_embedding(candidate.swap_preferences or [])
    if their_wants is None:
        their_wants = CATEGORY_EMBEDDINGS["other"]
    embedding_sim = cosine_similarity(embedding_for(source.category), their_wants)

    return (
        EXCHANGE_THEY_WANT_WEIGHT * they_want_mine
        + EXCHANGE_I_WANT_WEIGHT * i_want_theirs
        + EXCHANGE_EMBEDDING_WEIGHT * embedding_sim
    )


def behavior_affinity(liked_items: Sequence, candidate_category) -> float:
    """Cosine between the mean embedding of previously liked items and the candidate."""
    avg = average_embedding(item.category for item in liked_items)
    if avg is None:
        return NEUTRAL_SCORE
    return cosine_similarity(avg, embedding_for(candidate_category))


def age_in_days(created_at: datetime | None, now: datetime) -> float:
    if created_at is None:
        return 0.0
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return max((now - created_at).total_seconds() / SECONDS_PER_DAY, 0.0)


def freshness_score(
    created_at: datetime | None,
    now: datetime,
    swipe_count: int,
    exploration: ExplorationPolicy,
) -> float:
    """
    ``1 / (1 + age_days)`` with cold-start and staleness adjustments.

    Not clamped: a stale item may score below zero here.
    """
    age = age_in_days(created_at, now)
    score = 1.0 / (1.0 + age)
    if swipe_count < exploration.cold_start_threshold_swipes:
        score += exploration.cold_start_boost
    if age > exploration.stale_threshold_days:
        score -= exploration.stale_item_penalty
    return score


# ── Scorer ───────────────────────────────────────────────────────────────


class CandidateScorer:
    """
    Scores candidates for one source item under one policy.

    Args:
        policy: The active policy (exploration parameters are read from it).
        weights: Weight vector for this pass; defaults to ``policy.weights``.
                 The expanded-search pass supplies adjusted weights here.
        rng: Random source for the exploration term.
        now: Reference time for freshness and boost expiry.
    """

    def __init__(
        self,
        policy: ActivePolicy,
        weights: PolicyWeights | None = None,
        rng: random.Random | None = None,
        now: datetime | None = None,
    ):
        self.policy = policy
        self.weights = weights or policy.weights
        self.rng = rng or random.Random()
        self.now = now or datetime.now(timezone.utc)

    def breakdown(
        self,
        source,
        candidate,
        owner_location: OwnerLocation,
        liked_items: Sequence,
        swipe_count: int,
    ) -> ScoreBreakdown:
        owner_lat, owner_lon = owner_location
        return ScoreBreakdown(
            category_similarity=category_similarity(source.swap_preferences, candidate.category),
            geo_score=geo_score(owner_lat, owner_lon, candidate.latitude, candidate.longitude),
            exchange_compatibility=exchange_compatibility(source, candidate),
            behavior_affinity=behavior_affinity(liked_items, candidate.category),
            freshness=freshness_score(
                candidate.created_at, self.now, swipe_count, self.policy.exploration,
            ),
            condition_score=condition_score(candidate.condition),
            reciprocal_boost=candidate.active_boost(self.now),
        )

    def exploration_noise(self) -> float:
        randomness = self.policy.exploration.randomness
        if randomness <= 0:
            return 0.0
        return self.rng.random() * randomness

    def score(
        self,
        source,
        candidate,
        owner_location: OwnerLocation,
        liked_items: Sequence,
        swipe_count: int,
    ) -> float:
        """Weighted sum of the seven sub-scores plus exploration noise."""
        parts = self.breakdown(source, candidate, owner_location, liked_items, swipe_count)
        return parts.weighted_total(self.weights) + self.exploration_noise()
