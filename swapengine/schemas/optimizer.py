"""
Pydantic schemas for the reciprocal optimizer endpoint.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class OptimizerStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    users_processed: int
    two_way_opportunities: int
    three_way_cycles: int
    items_boosted: int
    items_loaded: int = 0
    swipes_loaded: int = 0
    items_truncated: bool = False
    swipes_truncated: bool = False
    write_failures: int = 0


class OptimizerRunResponse(BaseModel):
    """Summary of one optimizer run."""
    success: bool
    run_id: str
    duration_seconds: float
    stats: OptimizerStats
