"""
Affinity learner — per-user category preference from swipe history.

Each swipe contributes ``+1`` (liked) or ``-0.5`` (passed) to the target
item's category. The per-category mean is mapped into ``[0, 1]`` via
``(mean + 1) / 2`` and clamped. Categories the user never swiped on get
no entry; readers default those to ``NEUTRAL_AFFINITY``.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping

from swapengine.matching_engine.config import DISLIKE_DELTA, LIKE_DELTA
from swapengine.matching_engine.embeddings import label


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def learn_category_affinities(
    swipes: Iterable,
    category_by_item: Mapping,
) -> dict[str, float]:
    """
    Build one user's affinity snapshot from scratch.

    Args:
        swipes: The user's swipes (objects with ``swiped_item_id`` and ``liked``).
        category_by_item: Target item id → category. Swipes on unknown
                          (inactive or truncated) items are ignored.

    Returns:
        Category label → affinity in ``[0, 1]``.
    """
    sums: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)

    for swipe in swipes:
        category = category_by_item.get(swipe.swiped_item_id)
        if category is None:
            continue
        key = label(category)
        counts[key] += 1
        sums[key] += LIKE_DELTA if swipe.liked else DISLIKE_DELTA

    return {
        key: _clamp01((sums[key] / counts[key] + 1) / 2)
        for key in counts
    }
