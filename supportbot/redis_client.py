"""
Construction of the process-wide Redis client.

Everything that talks to Redis goes through `supportbot.storage.ExpiringStore`;
this module only owns the connection pool so that the app lifespan can open
and close it in one place.
"""

from __future__ import annotations

from typing import Optional

from redis.asyncio import Redis

from .logging_config import logger
from .settings import Settings

_redis_client: Optional[Redis] = None


def get_redis_client(config: Settings) -> Redis:
    """
    Return a lazily-created global Redis client.

    Creating the client does not connect; the first command does. A store
    that is down at startup therefore only shows up as degraded operations.
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(config.redis_url, decode_responses=True)
    return _redis_client


async def close_redis_client() -> None:
    global _redis_client
    if _redis_client is None:
        return
    try:
        await _redis_client.aclose()
    except Exception:
        logger.warning("Error closing Redis connection", exc_info=True)
    finally:
        _redis_client = None


__all__ = ["get_redis_client", "close_redis_client"]
