"""
Static category embedding and condition tables.

Each category maps to a hand-authored 5-dimensional vector over the
semantic axes ``[tech, fashion, media, sports, home]``. Unknown labels
fall back to the ``other`` vector.
"""

from collections.abc import Iterable

CATEGORY_EMBEDDINGS: dict[str, tuple[float, ...]] = {
    "electronics": (0.9, 0.1, 0.3, 0.2, 0.2),
    "clothes": (0.1, 0.9, 0.2, 0.3, 0.1),
    "books": (0.2, 0.1, 0.9, 0.1, 0.3),
    "games": (0.7, 0.1, 0.8, 0.4, 0.2),
    "sports": (0.2, 0.3, 0.1, 0.9, 0.2),
    "home_garden": (0.2, 0.1, 0.2, 0.1, 0.9),
    "other": (0.3, 0.3, 0.3, 0.3, 0.3),
}

EMBEDDING_DIM = 5

CONDITION_SCORES: dict[str, float] = {
    "new": 1.0,
    "like_new": 0.9,
    "good": 0.7,
    "fair": 0.5,
    "poor": 0.3,
}
UNKNOWN_CONDITION_SCORE = 0.5


def label(value) -> str:
    """Normalise an enum member or raw string to its plain label."""
    return getattr(value, "value", value)


def embedding_for(category) -> tuple[float, ...]:
    return CATEGORY_EMBEDDINGS.get(label(category), CATEGORY_EMBEDDINGS["other"])


def average_embedding(categories: Iterable) -> tuple[float, ...] | None:
    """Mean embedding of *categories*, or ``None`` when there are none."""
    vectors = [embedding_for(c) for c in categories]
    if not vectors:
        return None
    n = len(vectors)
    return tuple(sum(v[i] for v in vectors) / n for i in range(EMBEDDING_DIM))


def condition_score(condition) -> float:
    return CONDITION_SCORES.get(label(condition), UNKNOWN_CONDITION_SCORE)
