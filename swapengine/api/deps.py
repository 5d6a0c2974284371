"""
Reusable FastAPI dependencies wiring request sessions to engine services.

Tests override these through ``app.dependency_overrides``.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from swapengine.database import get_db
from swapengine.matching_engine.policy import PolicyProvider
from swapengine.matching_engine.recommender import RecommendationService
from swapengine.matching_engine.repository import SwapRepository


async def get_repository(db: AsyncSession = Depends(get_db)) -> SwapRepository:
    return SwapRepository(db)


async def get_recommendation_service(
    db: AsyncSession = Depends(get_db),
) -> RecommendationService:
    return RecommendationService(SwapRepository(db), PolicyProvider(db))


def get_optimizer():
    from swapengine.matching_engine.engine import reciprocal_optimizer
    return reciprocal_optimizer
