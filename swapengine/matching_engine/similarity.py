"""
Geo and similarity primitives.

Pure functions with no state: great-circle distance, exponential decay,
and cosine similarity over plain float sequences.
"""

import math
from collections.abc import Sequence

from swapengine.matching_engine.config import (
    EARTH_RADIUS_KM,
    GEO_SIGMA_KM,
    NEUTRAL_SCORE,
)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def exp_decay(value: float, sigma: float) -> float:
    """``exp(-value / sigma)``: 1.0 at zero, falling towards 0."""
    return math.exp(-value / sigma)


def geo_score(
    lat1: float | None,
    lon1: float | None,
    lat2: float | None,
    lon2: float | None,
    sigma_km: float = GEO_SIGMA_KM,
) -> float:
    """
    Proximity score in (0, 1].

    Returns ``NEUTRAL_SCORE`` when either side has no coordinates.
    """
    if lat1 is None or lon1 is None or lat2 is None or lon2 is None:
        return NEUTRAL_SCORE
    return exp_decay(haversine_km(lat1, lon1, lat2, lon2), sigma_km)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between *a* and *b*; 0 for empty, mismatched or zero vectors."""
    if len(a) != len(b) or not a:
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    denominator = norm_a * norm_b
    if denominator == 0:
        return 0.0
    return dot / denominator
