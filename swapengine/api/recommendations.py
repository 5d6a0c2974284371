"""
Recommendation endpoint.

Ranks candidate items for one of the caller's items. Pool exhaustion is
never an error: the response carries ``searchExpanded`` (and
``degraded`` when the preference-only fallback served the request).
With ``autoRetry`` the strict-then-expanded retry runs server-side.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from swapengine.api.deps import get_recommendation_service
from swapengine.matching_engine.errors import ItemNotFoundError
from swapengine.matching_engine.recommender import RecommendationService
from swapengine.schemas.recommendation import (
    RankedItemRead,
    RecommendationRequest,
    RecommendationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=RecommendationResponse)
async def recommend_items(
    payload: RecommendationRequest,
    service: RecommendationService = Depends(get_recommendation_service),
):
    try:
        if payload.auto_retry and not payload.expanded_search:
            result = await service.recommend_with_retry(
                payload.source_item_id, limit=payload.limit,
            )
        else:
            result = await service.recommend(
                payload.source_item_id,
                limit=payload.limit,
                expanded_search=payload.expanded_search,
            )
    except ItemNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Item not found",
        )

    logger.info(
        "Recommended %d items for %s (pool=%d, expanded=%s)",
        len(result.ranked_items), payload.source_item_id, result.total, result.search_expanded,
    )
    return RecommendationResponse(
        ranked_items=[RankedItemRead(id=r.id, score=r.score) for r in result.ranked_items],
        total=result.total,
        search_expanded=result.search_expanded,
        policy_version=result.policy_version,
        degraded=result.degraded,
    )
