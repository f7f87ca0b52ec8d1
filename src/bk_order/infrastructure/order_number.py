"""Order number allocation: ``MF-YYYYMMDD-NNNN``.

The per-day sequence is a Redis counter, so concurrent creations never
receive the same number. Keys expire two days after first use.
"""

from datetime import datetime

import redis.asyncio as aioredis

from src.bk_common.datetime_utils import compact_date

_KEY_TTL_SECONDS = 2 * 24 * 3600


class RedisOrderNumberGenerator:
    def __init__(self, redis: aioredis.Redis, prefix: str = "MF") -> None:
        self._redis = redis
        self._prefix = prefix

    async def next_number(self, now: datetime) -> str:
        day = compact_date(now)
        key = f"order_seq:{self._prefix}:{day}"
        sequence = await self._redis.incr(key)
        if sequence == 1:
            await self._redis.expire(key, _KEY_TTL_SECONDS)
        return f"{self._prefix}-{day}-{sequence:04d}"
