"""
Pydantic schemas for swap opportunity reads.

Slot columns keep their stored snake_case names.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class SwapOpportunityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    cycle_type: str
    user_a_id: UUID
    item_a_id: UUID
    user_b_id: UUID
    item_b_id: UUID
    user_c_id: UUID | None = None
    item_c_id: UUID | None = None
    confidence_score: float
    status: str
    created_at: datetime | None = None
    expires_at: datetime


class OpportunityListResponse(BaseModel):
    opportunities: list[SwapOpportunityRead]
    count: int
