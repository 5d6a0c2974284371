"""
Reciprocal optimizer Celery task.

Runs on the schedule defined by OPTIMIZER_INTERVAL_SECONDS. Can also be
triggered manually via the optimizer API.
"""

import asyncio
import logging

from swapengine.tasks.celery_app import celery_app
from swapengine.matching_engine.engine import reciprocal_optimizer

logger = logging.getLogger(__name__)


@celery_app.task(name="swapengine.tasks.optimizer_tasks.run_reciprocal_optimizer")
def run_reciprocal_optimizer():
    """
    Execute one optimizer run.

    Celery tasks are synchronous, so the async engine runs on a fresh
    event loop.
    """
    logger.info("Starting scheduled optimizer run")
    loop = asyncio.new_event_loop()
    try:
        result = loop.run_until_complete(reciprocal_optimizer.run_cycle())
        if result.get("skipped"):
            logger.info("Optimizer run skipped, lock held by another process")
            return result
        stats = result["stats"]
        logger.info(
            "Optimizer run %s completed: %d users, %d 2-way, %d 3-way, %d items boosted",
            result["run_id"],
            stats["usersProcessed"],
            stats["twoWayOpportunities"],
            stats["threeWayCycles"],
            stats["itemsBoosted"],
        )
        return result
    except Exception:
        logger.exception("Optimizer run failed")
        raise
    finally:
        loop.close()
