"""Redis client management."""

from typing import Optional
import redis.asyncio as redis


async def get_redis_client(url: Optional[str] = None) -> redis.Redis:
    """Create a Redis client for the job streams.

    Args:
        url: Redis URL (falls back to the configured REDIS_URL)

    Returns:
        Redis async client
    """
    if url is None:
        from ..config import settings
        url = settings.REDIS_URL
    return redis.from_url(url, decode_responses=True)


async def close_redis(client: Optional[redis.Redis]):
    """Close Redis connection gracefully."""
    if client is not None:
        await client.aclose()


__all__ = ["get_redis_client", "close_redis"]
