"""
Pydantic schemas for the recommendation endpoint.

Field names are camelCase on the wire.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from swapengine.config import settings


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RecommendationRequest(_CamelModel):
    source_item_id: UUID
    limit: int = Field(
        settings.RECOMMENDATION_DEFAULT_LIMIT, ge=1, le=settings.RECOMMENDATION_MAX_LIMIT,
    )
    expanded_search: bool = False
    # strict pass, then one expanded pass when the strict pass is empty
    auto_retry: bool = False


class RankedItemRead(_CamelModel):
    id: UUID
    score: float


class RecommendationResponse(_CamelModel):
    """Ranked candidates plus the pool size and policy they were scored under."""
    ranked_items: list[RankedItemRead]
    total: int
    search_expanded: bool
    policy_version: str
    degraded: bool = False
