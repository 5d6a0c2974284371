"""
Reciprocal optimizer trigger.

Runs a batch pass immediately instead of waiting for the next scheduled
run. Answers 409 while another run holds the lock.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from swapengine.api.deps import get_optimizer
from swapengine.schemas.optimizer import OptimizerRunResponse

router = APIRouter()


@router.post("/run", response_model=OptimizerRunResponse)
async def run_optimizer(optimizer=Depends(get_optimizer)):
    report = await optimizer.run_cycle()
    if report.get("skipped"):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Optimizer run already in progress",
        )
    return report
