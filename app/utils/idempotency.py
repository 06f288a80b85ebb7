from typing import Optional
from app.core.cache import performance_cache, cache_keys
from app.core.config import settings


async def get_idempotent(key: Optional[str]):
    if not key:
        return None
    return await performance_cache.get(cache_keys.idempotency(key))


async def set_idempotent(key: Optional[str], value: dict):
    if not key:
        return
    await performance_cache.set(cache_keys.idempotency(key), value, settings.IDEMPOTENCY_TTL)
