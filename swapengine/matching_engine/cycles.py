"""
Cycle detection — 2-way swaps and 3-way exchange loops.

Two-way opportunities come straight from the pairwise scores. Three-way
cycles close a loop A→B→C→A where each arrow is an admitted directed
edge (the receiver wants the giver's item).

The triple search stops after ``MAX_CYCLES_FOUND`` hits and then keeps
the best ``MAX_CYCLES_KEPT``. The kept set is therefore the best of the
first cycles reached in user order, not a global top-N.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from swapengine.matching_engine.config import (
    EDGE_ADMISSION_THRESHOLD,
    MAX_CYCLES_FOUND,
    MAX_CYCLES_KEPT,
    MAX_TWO_WAY_OPPORTUNITIES,
    TWO_WAY_ADMISSION_THRESHOLD,
)
from swapengine.matching_engine.reciprocal import PairScore
from swapengine.models.swap_opportunity import CycleType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpportunityCandidate:
    """
    A detected swap, before persistence.

    ``user_ids[i]`` gives ``item_ids[i]`` to the next participant
    (wrapping around for 3-way cycles).
    """

    cycle_type: str
    user_ids: tuple
    item_ids: tuple
    score: float


def select_two_way(
    pair_scores: Sequence[PairScore],
    threshold: float = TWO_WAY_ADMISSION_THRESHOLD,
    limit: int = MAX_TWO_WAY_OPPORTUNITIES,
) -> list[OpportunityCandidate]:
    """Pairs scoring above *threshold*, best first, at most *limit*."""
    admitted = [p for p in pair_scores if p.score > threshold]
    admitted.sort(key=lambda p: p.score, reverse=True)
    return [
        OpportunityCandidate(
            cycle_type=CycleType.TWO_WAY.value,
            user_ids=(p.user_a_id, p.user_b_id),
            item_ids=(p.item_a.id, p.item_b.id),
            score=p.score,
        )
        for p in admitted[:limit]
    ]


def find_three_way_cycles(
    user_ids: Sequence[uuid.UUID],
    edges: Mapping[tuple[uuid.UUID, uuid.UUID], PairScore],
    threshold: float = EDGE_ADMISSION_THRESHOLD,
    max_found: int = MAX_CYCLES_FOUND,
    max_kept: int = MAX_CYCLES_KEPT,
) -> list[OpportunityCandidate]:
    """
    Search for loops A→B→C→A over admitted directed edges.

    Each set of three users is visited once, in *user_ids* order
    (A before B before C), so a triangle admitted in both directions
    yields a single cycle. Cycle score is the mean of the three edge
    scores.
    """

    def admitted(giver, receiver) -> PairScore | None:
        edge = edges.get((giver, receiver))
        if edge is None or edge.score < threshold:
            return None
        return edge

    found: list[OpportunityCandidate] = []

    for i, user_a in enumerate(user_ids):
        for j in range(i + 1, len(user_ids)):
            user_b = user_ids[j]
            ab = admitted(user_a, user_b)
            if ab is None:
                continue
            for user_c in user_ids[j + 1:]:
                bc = admitted(user_b, user_c)
                if bc is None:
                    continue
                ca = admitted(user_c, user_a)
                if ca is None:
                    continue

                found.append(OpportunityCandidate(
                    cycle_type=CycleType.THREE_WAY.value,
                    user_ids=(user_a, user_b, user_c),
                    item_ids=(ab.item_a.id, bc.item_a.id, ca.item_a.id),
                    score=(ab.score + bc.score + ca.score) / 3,
                ))
                if len(found) >= max_found:
                    logger.info("Cycle search stopped early after %d cycles", len(found))
                    return _top(found, max_kept)

    return _top(found, max_kept)


def _top(cycles: list[OpportunityCandidate], limit: int) -> list[OpportunityCandidate]:
    return sorted(cycles, key=lambda c: c.score, reverse=True)[:limit]
