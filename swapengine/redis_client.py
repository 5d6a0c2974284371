"""
Redis connection setup using redis-py async client.

Provides the shared redis instance used for the optimizer run lock.
"""

import redis.asyncio as aioredis

from swapengine.config import settings

redis = aioredis.from_url(
    settings.REDIS_URL,
    decode_responses=True,
    ssl=settings.REDIS_SSL,
)
