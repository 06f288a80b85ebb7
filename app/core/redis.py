import logging
from typing import Optional
from redis.asyncio import Redis
from app.core.config import settings

logger = logging.getLogger(__name__)

redis: Optional[Redis] = None


async def init_redis() -> Optional[Redis]:
    global redis
    if not settings.REDIS_URL:
        logger.info("REDIS_URL not set, running with in-process cache only")
        return None
    try:
        redis = Redis.from_url(settings.REDIS_URL, decode_responses=True)
        await redis.ping()
        logger.info("Connected to Redis")
        return redis
    except Exception as e:
        redis = None
        logger.error(f"Failed to connect to Redis: {e}")
        raise


async def close_redis():
    global redis
    if redis:
        await redis.close()
        redis = None


def get_redis() -> Optional[Redis]:
    return redis


def set_redis(client: Optional[Redis]) -> None:
    global redis
    redis = client


async def redis_health() -> dict:
    client = get_redis()
    if client is None:
        return {"healthy": True, "mode": "memory"}
    try:
        await client.ping()
        return {"healthy": True, "mode": "redis"}
    except Exception as e:
        logger.error(f"Redis health check failed: {e}")
        return {"healthy": False, "mode": "redis", "error": str(e)}
