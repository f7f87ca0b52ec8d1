"""Redis client factory — used for the order number sequence only.

The client is built in the application lifespan and kept on ``app.state``;
nothing here holds module-level connection state.
"""

import redis.asyncio as aioredis

from config.settings import Settings


def create_redis(settings: Settings) -> aioredis.Redis:
    """Create the Redis connection pool (connections open lazily)."""
    return aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )


async def close_redis(client: aioredis.Redis) -> None:
    await client.aclose()
