"""
Swap opportunity reads and user actions.

Lists active, unexpired swaps involving a user, and lets a user dismiss
one. Dismissed rows are kept by later optimizer runs until they expire.
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from swapengine.api.deps import get_repository
from swapengine.matching_engine.repository import SwapRepository
from swapengine.schemas.opportunity import OpportunityListResponse, SwapOpportunityRead

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=OpportunityListResponse)
async def list_opportunities(
    user_id: UUID,
    limit: int = Query(20, ge=1, le=100),
    repo: SwapRepository = Depends(get_repository),
):
    """Highest-confidence opportunities first."""
    rows = await repo.get_user_opportunities(
        user_id, now=datetime.now(timezone.utc), limit=limit,
    )
    return OpportunityListResponse(
        opportunities=[SwapOpportunityRead.model_validate(r) for r in rows],
        count=len(rows),
    )


@router.post("/{opportunity_id}/dismiss", response_model=SwapOpportunityRead)
async def dismiss_opportunity(
    opportunity_id: UUID,
    repo: SwapRepository = Depends(get_repository),
):
    opportunity = await repo.dismiss_opportunity(opportunity_id)
    if opportunity is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Opportunity not found",
        )
    logger.info("Opportunity %s dismissed", opportunity_id)
    return SwapOpportunityRead.model_validate(opportunity)
