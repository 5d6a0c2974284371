"""
Run reporting — structured summary of one reciprocal optimizer run.

The ``stats`` keys are camelCase to match the HTTP response shape.
"""

from datetime import datetime


def build_run_report(
    run_id: str,
    started_at: datetime,
    completed_at: datetime,
    users_processed: int,
    two_way_opportunities: int,
    three_way_cycles: int,
    items_boosted: int,
    items_loaded: int,
    swipes_loaded: int,
    items_truncated: bool = False,
    swipes_truncated: bool = False,
    write_failures: int = 0,
) -> dict:
    duration = completed_at - started_at
    return {
        "success": True,
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "completed_at": completed_at.isoformat(),
        "duration_seconds": duration.total_seconds(),
        "stats": {
            "usersProcessed": users_processed,
            "twoWayOpportunities": two_way_opportunities,
            "threeWayCycles": three_way_cycles,
            "itemsBoosted": items_boosted,
            "itemsLoaded": items_loaded,
            "swipesLoaded": swipes_loaded,
            "itemsTruncated": items_truncated,
            "swipesTruncated": swipes_truncated,
            "writeFailures": write_failures,
        },
    }
