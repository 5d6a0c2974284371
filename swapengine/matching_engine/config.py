"""
Matching engine configuration constants.

Defines the thresholds, caps, and scoring constants used by the
recommendation session and the reciprocal optimizer. Operator-tunable
values are read from ``swapengine.config.settings``.
"""

from swapengine.config import settings

# ── Geo & similarity ─────────────────────────────────────────────────────

EARTH_RADIUS_KM = 6371.0
GEO_SIGMA_KM = 50.0               # candidate geo score: exp(-d / 50)
NEUTRAL_SCORE = 0.5               # sub-score when an input is missing

# ── Recommendation session ───────────────────────────────────────────────

DEFAULT_LIMIT = settings.RECOMMENDATION_DEFAULT_LIMIT
MAX_LIMIT = settings.RECOMMENDATION_MAX_LIMIT
MIN_STRICT_POOL_SIZE = 5          # strict pool smaller than this triggers expansion
RECYCLE_AFTER_DAYS = 7            # swipes older than this are re-admitted when expanded
SCORE_DECIMALS = 3

# Expanded-search weight adjustments: (delta, bound)
EXPANDED_RECIPROCAL_DELTA, EXPANDED_RECIPROCAL_CAP = 0.08, 0.25
EXPANDED_BEHAVIOR_DELTA, EXPANDED_BEHAVIOR_CAP = 0.05, 0.20
EXPANDED_EXCHANGE_DELTA, EXPANDED_EXCHANGE_FLOOR = -0.03, 0.10

# Exchange compatibility mix
EXCHANGE_THEY_WANT_WEIGHT = 0.4
EXCHANGE_I_WANT_WEIGHT = 0.4
EXCHANGE_EMBEDDING_WEIGHT = 0.2

# ── Affinity learner ─────────────────────────────────────────────────────

LIKE_DELTA = 1.0
DISLIKE_DELTA = -0.5
NEUTRAL_AFFINITY = 0.5

# ── Pairwise reciprocal scorer ───────────────────────────────────────────

DIRECT_MATCH_WEIGHT = 0.4
LEARNED_AFFINITY_WEIGHT = 0.6
DIRECT_MATCH_HIT = 0.5
DIRECT_MATCH_MISS = 0.2
UNWANTED_FLOOR = 0.1              # prediction when the viewer does not want the category
PAIR_DISTANCE_SIGMA_KM = 100.0
PAIR_DISTANCE_BONUS = 0.2

# ── Cycle detection & publishing ─────────────────────────────────────────

EDGE_ADMISSION_THRESHOLD = 0.3    # directed edge needed to close a 3-way cycle
TWO_WAY_ADMISSION_THRESHOLD = 0.3 # pair score needed to publish a 2-way swap
MAX_TWO_WAY_OPPORTUNITIES = 50
MAX_CYCLES_FOUND = 20             # early exit while searching triples
MAX_CYCLES_KEPT = 10

OPPORTUNITY_TTL_DAYS = settings.OPPORTUNITY_TTL_DAYS

# ── Batch input caps ─────────────────────────────────────────────────────

MAX_ACTIVE_ITEMS = settings.OPTIMIZER_MAX_ACTIVE_ITEMS
MAX_SWIPES = settings.OPTIMIZER_MAX_SWIPES

# ── Run lock ─────────────────────────────────────────────────────────────

RUN_LOCK_KEY = "optimizer:lock"
RUN_LOCK_TIMEOUT_SECONDS = 600
