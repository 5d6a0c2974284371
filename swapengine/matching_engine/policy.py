"""
Active algorithm policy — scoring weights and exploration parameters.

The policy is read once per request (or batch run) and passed explicitly
into every scoring call. A missing, unreachable, or malformed policy row
never blocks scoring: ``PolicyProvider`` logs a warning and returns
``DEFAULT_POLICY`` tagged ``"default"``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy import select

from swapengine.matching_engine.config import (
    EXPANDED_BEHAVIOR_CAP,
    EXPANDED_BEHAVIOR_DELTA,
    EXPANDED_EXCHANGE_DELTA,
    EXPANDED_EXCHANGE_FLOOR,
    EXPANDED_RECIPROCAL_CAP,
    EXPANDED_RECIPROCAL_DELTA,
    OPPORTUNITY_TTL_DAYS,
)
from swapengine.matching_engine.errors import PolicyError
from swapengine.models.algorithm_policy import AlgorithmPolicy

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

DEFAULT_POLICY_VERSION = "default"


class PolicyWeights(BaseModel):
    """The seven scoring coefficients (stored with camelCase keys)."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    category_similarity: float = Field(..., ge=0)
    geo_score: float = Field(..., ge=0)
    exchange_compatibility: float = Field(..., ge=0)
    behavior_affinity: float = Field(..., ge=0)
    freshness: float = Field(..., ge=0)
    condition_score: float = Field(..., ge=0)
    reciprocal_boost: float = Field(..., ge=0)


class ExplorationPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    randomness: float = Field(..., ge=0)
    cold_start_boost: float = Field(..., ge=0)
    stale_item_penalty: float = Field(..., ge=0)
    cold_start_threshold_swipes: int = Field(5, ge=0)
    stale_threshold_days: float = Field(14, ge=0)


class ReciprocalPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    priority: Literal["low", "medium", "high"] = "medium"
    boost_cap: float = Field(1.0, ge=0, le=1)
    boost_ttl_days: int = Field(OPPORTUNITY_TTL_DAYS, ge=1)


class ActivePolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    policy_version: str
    weights: PolicyWeights
    exploration: ExplorationPolicy
    reciprocal: ReciprocalPolicy


DEFAULT_POLICY = ActivePolicy(
    policy_version=DEFAULT_POLICY_VERSION,
    weights=PolicyWeights(
        category_similarity=0.20,
        geo_score=0.15,
        exchange_compatibility=0.25,
        behavior_affinity=0.15,
        freshness=0.10,
        condition_score=0.05,
        reciprocal_boost=0.10,
    ),
    exploration=ExplorationPolicy(
        randomness=0.1,
        cold_start_boost=0.15,
        stale_item_penalty=0.1,
        cold_start_threshold_swipes=5,
        stale_threshold_days=14,
    ),
    reciprocal=ReciprocalPolicy(priority="medium", boost_cap=1.0, boost_ttl_days=OPPORTUNITY_TTL_DAYS),
)


def parse_policy(
    policy_version: str,
    weights: dict | None,
    exploration_policy: dict | None,
    reciprocal_policy: dict | None,
) -> ActivePolicy:
    """
    Validate raw policy JSON into an ``ActivePolicy``.

    Raises ``PolicyError`` if any blob is missing or out of bounds.
    """
    try:
        return ActivePolicy(
            policy_version=policy_version,
            weights=PolicyWeights.model_validate(weights or {}),
            exploration=ExplorationPolicy.model_validate(exploration_policy or {}),
            reciprocal=ReciprocalPolicy.model_validate(reciprocal_policy or {}),
        )
    except ValidationError as exc:
        raise PolicyError(str(exc)) from exc


def expanded_weights(weights: PolicyWeights) -> PolicyWeights:
    """
    Weights for an expanded-search pass.

    Leans towards reciprocal boost and learned behaviour, away from strict
    exchange compatibility. Applies to the current pass only.
    """
    return weights.model_copy(update={
        "reciprocal_boost": min(
            weights.reciprocal_boost + EXPANDED_RECIPROCAL_DELTA, EXPANDED_RECIPROCAL_CAP,
        ),
        "behavior_affinity": min(
            weights.behavior_affinity + EXPANDED_BEHAVIOR_DELTA, EXPANDED_BEHAVIOR_CAP,
        ),
        "exchange_compatibility": max(
            weights.exchange_compatibility + EXPANDED_EXCHANGE_DELTA, EXPANDED_EXCHANGE_FLOOR,
        ),
    })


class PolicyProvider:
    """Reads the newest active policy row for one request or batch run."""

    def __init__(self, session: "AsyncSession"):
        self.session = session

    async def get_active_policy(self) -> ActivePolicy:
        # savepoint: a failed read must not abort the caller's transaction
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(
                    select(AlgorithmPolicy)
                    .where(AlgorithmPolicy.active.is_(True))
                    .order_by(AlgorithmPolicy.created_at.desc())
                    .limit(1)
                )
                row = result.scalar_one_or_none()
        except Exception:
            logger.warning("Active policy unavailable, using defaults", exc_info=True)
            return DEFAULT_POLICY

        if row is None:
            logger.debug("No active policy, using defaults")
            return DEFAULT_POLICY

        try:
            return parse_policy(
                row.policy_version,
                row.weights,
                row.exploration_policy,
                row.reciprocal_policy,
            )
        except PolicyError as exc:
            logger.warning(
                "Active policy %s is malformed, using defaults: %s",
                row.policy_version, exc,
            )
            return DEFAULT_POLICY
