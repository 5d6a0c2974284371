"""
Pairwise reciprocal scorer.

For two users, searches every (item of A, item of B) combination for the
pair both owners would most plausibly accept, combining each side's
declared wants with its learned category affinity. A distance bonus
favours pairs whose items are close to each other.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from collections.abc import Mapping, Sequence

from swapengine.matching_engine.config import (
    DIRECT_MATCH_HIT,
    DIRECT_MATCH_MISS,
    DIRECT_MATCH_WEIGHT,
    LEARNED_AFFINITY_WEIGHT,
    NEUTRAL_AFFINITY,
    PAIR_DISTANCE_BONUS,
    PAIR_DISTANCE_SIGMA_KM,
    UNWANTED_FLOOR,
)
from swapengine.matching_engine.embeddings import label
from swapengine.matching_engine.similarity import exp_decay, haversine_km

logger = logging.getLogger(__name__)


@dataclass
class UserProfile:
    """One user's active items and learned affinities for a batch run."""

    user_id: uuid.UUID
    items: list = field(default_factory=list)
    affinities: dict[str, float] = field(default_factory=dict)

    @property
    def offered_categories(self) -> set[str]:
        return {label(item.category) for item in self.items}

    @property
    def wanted_categories(self) -> set[str]:
        return {label(c) for item in self.items for c in (item.swap_preferences or [])}


@dataclass(frozen=True)
class PairScore:
    """
    Best item pair between two users.

    ``item_a`` belongs to ``user_a_id`` and goes to ``user_b_id``;
    ``item_b`` travels the other way.
    """

    user_a_id: uuid.UUID
    user_b_id: uuid.UUID
    item_a: object
    item_b: object
    score: float

    def reversed(self) -> "PairScore":
        return replace(
            self,
            user_a_id=self.user_b_id,
            user_b_id=self.user_a_id,
            item_a=self.item_b,
            item_b=self.item_a,
        )


def predict_preference(
    affinities: Mapping[str, float],
    item,
    viewer_preferences: Sequence,
) -> float:
    """How much a viewer with *affinities* and *viewer_preferences* would want *item*."""
    category = label(item.category)
    wanted = {label(c) for c in (viewer_preferences or [])}
    direct = DIRECT_MATCH_HIT if category in wanted else DIRECT_MATCH_MISS
    learned = affinities.get(category, NEUTRAL_AFFINITY)
    return DIRECT_MATCH_WEIGHT * direct + LEARNED_AFFINITY_WEIGHT * learned


def _wants(item, category: str) -> bool:
    return category in {label(c) for c in (item.swap_preferences or [])}


def _distance_bonus(item_a, item_b) -> float:
    if not (item_a.has_coordinates and item_b.has_coordinates):
        return 0.0
    distance = haversine_km(
        item_a.latitude, item_a.longitude, item_b.latitude, item_b.longitude,
    )
    return exp_decay(distance, PAIR_DISTANCE_SIGMA_KM) * PAIR_DISTANCE_BONUS


def score_item_pair(user_a: UserProfile, item_a, user_b: UserProfile, item_b) -> float:
    """Reciprocal score for ``item_a`` (owned by A) against ``item_b`` (owned by B)."""
    if _wants(item_b, label(item_a.category)):
        b_prediction = predict_preference(user_b.affinities, item_a, item_b.swap_preferences)
    else:
        b_prediction = UNWANTED_FLOOR

    if _wants(item_a, label(item_b.category)):
        a_prediction = predict_preference(user_a.affinities, item_b, item_a.swap_preferences)
    else:
        a_prediction = UNWANTED_FLOOR

    return b_prediction * a_prediction + _distance_bonus(item_a, item_b)


def score_user_pair(user_a: UserProfile, user_b: UserProfile) -> PairScore | None:
    """
    Best-scoring item pair between two users, or ``None`` if no pair
    scores above zero.
    """
    best: PairScore | None = None
    for item_a in user_a.items:
        for item_b in user_b.items:
            score = score_item_pair(user_a, item_a, user_b, item_b)
            if score > 0 and (best is None or score > best.score):
                best = PairScore(user_a.user_id, user_b.user_id, item_a, item_b, score)
    return best


def has_preference_overlap(user_a: UserProfile, user_b: UserProfile) -> bool:
    """
    True when each user offers some category the other wants.

    Without mutual overlap every item pair scores at most
    ``UNWANTED_FLOOR * 0.8 + PAIR_DISTANCE_BONUS``, below any admission
    threshold, so such pairs can be skipped before the product loop.
    """
    return bool(
        user_a.offered_categories & user_b.wanted_categories
        and user_b.offered_categories & user_a.wanted_categories
    )


def score_all_pairs(profiles: Sequence[UserProfile]) -> tuple[list[PairScore], int]:
    """
    Score every unordered user pair once.

    Returns:
        ``(pair_scores, pruned)`` where *pruned* counts the pairs skipped
        for lack of preference overlap.
    """
    results: list[PairScore] = []
    pruned = 0
    for i, user_a in enumerate(profiles):
        for user_b in profiles[i + 1:]:
            if not has_preference_overlap(user_a, user_b):
                pruned += 1
                continue
            pair = score_user_pair(user_a, user_b)
            if pair is not None:
                results.append(pair)
    logger.debug("Scored %d user pairs (%d pruned)", len(results), pruned)
    return results, pruned


def build_edges(
    pair_scores: Sequence[PairScore],
    threshold: float,
) -> dict[tuple[uuid.UUID, uuid.UUID], PairScore]:
    """
    Directed edges ``(giver, receiver) → PairScore`` for pairs at or above
    *threshold*. Each admitted pair yields both directions, oriented so
    that ``edge.item_a`` is the giver's item.
    """
    edges = {}
    for pair in pair_scores:
        if pair.score < threshold:
            continue
        edges[(pair.user_a_id, pair.user_b_id)] = pair
        edges[(pair.user_b_id, pair.user_a_id)] = pair.reversed()
    return edges
