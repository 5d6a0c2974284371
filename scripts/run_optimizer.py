"""
Manual optimizer trigger — runs a single reciprocal optimizer pass from the command line.

Usage:
    python scripts/run_optimizer.py

Useful for testing swap discovery without waiting for the Celery beat schedule.
"""

import asyncio
import json

from swapengine.matching_engine.engine import reciprocal_optimizer


async def main():
    """Run a single optimizer pass and print the report."""
    print("Starting manual optimizer run...")
    result = await reciprocal_optimizer.run_cycle()

    print("\n=== Optimizer Run Report ===")
    print(json.dumps(result, indent=2, default=str))
    if result.get("skipped"):
        print("\nSkipped: another run holds the lock")
        return
    stats = result["stats"]
    print(f"\nUsers processed: {stats['usersProcessed']}")
    print(f"2-way opportunities: {stats['twoWayOpportunities']}")
    print(f"3-way cycles: {stats['threeWayCycles']}")
    print(f"Items boosted: {stats['itemsBoosted']}")


if __name__ == "__main__":
    asyncio.run(main())
