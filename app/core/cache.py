"""Two-tier cache: an in-process map in front of an optional Redis.

Reads check process memory first and fall back to Redis, repopulating memory
on a remote hit. Writes go to both tiers. Memory entries are pruned by a
periodic sweep (expired first, then oldest-inserted beyond the size cap).
Nothing here is coupled to the data layer; writers must invalidate.
"""
import asyncio
import json
import logging
import time
from contextlib import suppress
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from app.core.config import settings
from app.core.metrics import cache_hits, cache_misses, cache_evictions
from app.core.redis import get_redis

logger = logging.getLogger(__name__)

CACHE_TTL = {
    "SHORT": 60,
    "MEDIUM": 300,
    "LONG": 3600,
    "DAY": 86400,
    "WEEK": 604800,
}

STALE_PREFIX = "stale:"


def _namespace(key: str) -> str:
    return key.split(":", 1)[0]


class PerformanceCache:

    def __init__(
        self,
        max_memory_items: Optional[int] = None,
        cleanup_interval: Optional[float] = None,
        redis_getter: Callable[[], Any] = get_redis,
        clock: Callable[[], float] = time.time,
    ):
        self.max_memory_items = max_memory_items or settings.MEMORY_CACHE_MAX_ITEMS
        self.cleanup_interval = cleanup_interval or settings.MEMORY_CACHE_CLEANUP_INTERVAL
        self._redis_getter = redis_getter
        self._clock = clock
        self._memory: Dict[str, Tuple[Any, float]] = {}
        self._cleanup_task: Optional[asyncio.Task] = None
        self._revalidating: Dict[str, asyncio.Task] = {}

    @property
    def redis(self):
        return self._redis_getter()

    @property
    def memory_size(self) -> int:
        return len(self._memory)

    def _memory_get(self, key: str) -> Tuple[bool, Any]:
        item = self._memory.get(key)
        if item is not None and item[1] > self._clock():
            return True, item[0]
        return False, None

    def _memory_set(self, key: str, value: Any, ttl: float) -> None:
        self._memory[key] = (value, self._clock() + ttl)

    async def get(self, key: str) -> Any:
        found, value = self._memory_get(key)
        if found:
            cache_hits.labels(tier="memory", namespace=_namespace(key)).inc()
            return value

        redis = self.redis
        if redis is not None:
            try:
                raw = await redis.get(key)
                if raw is not None:
                    value = json.loads(raw)
                    self._memory_set(key, value, CACHE_TTL["SHORT"])
                    cache_hits.labels(tier="redis", namespace=_namespace(key)).inc()
                    return value
            except Exception as e:
                logger.error(f"Redis get error for {key}: {e}")

        cache_misses.labels(namespace=_namespace(key)).inc()
        return None

    async def set(self, key: str, value: Any, ttl: int = CACHE_TTL["MEDIUM"]) -> None:
        self._memory_set(key, value, ttl)

        redis = self.redis
        if redis is not None:
            try:
                await redis.set(key, json.dumps(value, default=str), ex=ttl)
            except Exception as e:
                logger.error(f"Redis set error for {key}: {e}")

    async def delete(self, key: str) -> None:
        self._memory.pop(key, None)

        redis = self.redis
        if redis is not None:
            try:
                await redis.delete(key)
            except Exception as e:
                logger.error(f"Redis delete error for {key}: {e}")

    async def clear_pattern(self, pattern: str) -> int:
        """Drop every key containing ``pattern`` from both tiers."""
        doomed = [key for key in self._memory if pattern in key]
        for key in doomed:
            del self._memory[key]
        removed = len(doomed)

        redis = self.redis
        if redis is not None:
            try:
                keys = [key async for key in redis.scan_iter(match=f"*{pattern}*")]
                if keys:
                    await redis.delete(*keys)
                    removed = max(removed, len(keys))
            except Exception as e:
                logger.error(f"Redis clear pattern error for {pattern}: {e}")

        return removed

    async def mget(self, keys: List[str]) -> List[Any]:
        results: List[Any] = []
        missing: List[int] = []
        for index, key in enumerate(keys):
            found, value = self._memory_get(key)
            results.append(value if found else None)
            if not found:
                missing.append(index)

        redis = self.redis
        if redis is not None and missing:
            try:
                raw_values = await redis.mget([keys[i] for i in missing])
                for index, raw in zip(missing, raw_values):
                    if raw is None:
                        continue
                    value = json.loads(raw)
                    results[index] = value
                    self._memory_set(keys[index], value, CACHE_TTL["SHORT"])
            except Exception as e:
                logger.error(f"Redis mget error: {e}")

        return results

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[Any]],
        ttl: int = CACHE_TTL["MEDIUM"],
    ) -> Any:
        cached = await self.get(key)
        if cached is not None:
            return cached

        value = await compute()
        await self.set(key, value, ttl)
        return value

    async def get_stale_while_revalidate(
        self,
        key: str,
        compute: Callable[[], Awaitable[Any]],
        ttl: int = CACHE_TTL["MEDIUM"],
        stale_ttl: int = CACHE_TTL["LONG"],
    ) -> Any:
        """Serve a fresh value, else a stale one while recomputing in the background."""
        stale_key = f"{STALE_PREFIX}{key}"

        fresh = await self.get(key)
        if fresh is not None:
            return fresh

        stale = await self.get(stale_key)
        if stale is not None:
            if key not in self._revalidating:
                task = asyncio.create_task(self._revalidate(key, compute, ttl, stale_ttl))
                self._revalidating[key] = task
                task.add_done_callback(lambda _t: self._revalidating.pop(key, None))
            return stale

        value = await compute()
        await self.set(key, value, ttl)
        await self.set(stale_key, value, stale_ttl)
        return value

    async def _revalidate(self, key: str, compute, ttl: int, stale_ttl: int) -> None:
        try:
            value = await compute()
            await self.set(key, value, ttl)
            await self.set(f"{STALE_PREFIX}{key}", value, stale_ttl)
        except Exception as e:
            logger.error(f"Background revalidation error for {key}: {e}", exc_info=True)

    async def wait_for_revalidation(self) -> None:
        pending = list(self._revalidating.values())
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def cleanup(self) -> int:
        """Sweep expired entries, then trim to the size cap in insertion order."""
        now = self._clock()
        expired = [key for key, (_, expires) in self._memory.items() if expires <= now]
        for key in expired:
            del self._memory[key]
        if expired:
            cache_evictions.labels(reason="expired").inc(len(expired))

        overflow = len(self._memory) - self.max_memory_items
        if overflow > 0:
            for key in list(self._memory)[:overflow]:
                del self._memory[key]
            cache_evictions.labels(reason="size").inc(overflow)

        return len(expired) + max(overflow, 0)

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.cleanup_interval)
            try:
                removed = self.cleanup()
                if removed:
                    logger.debug(f"Memory cache sweep removed {removed} entries")
            except Exception as e:
                logger.error(f"Memory cache sweep failed: {e}", exc_info=True)

    def start_cleanup(self) -> None:
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop_cleanup(self) -> None:
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._cleanup_task
            self._cleanup_task = None

    def clear_memory(self) -> None:
        self._memory.clear()


performance_cache = PerformanceCache()


class cache_keys:
    @staticmethod
    def vehicle(ref) -> str:
        return f"vehicle:{ref}"

    @staticmethod
    def vehicles(params: dict) -> str:
        return f"vehicles:{json.dumps(params, sort_keys=True, default=str)}"

    @staticmethod
    def vehicle_search(params: dict) -> str:
        return f"search:{json.dumps(params, sort_keys=True, default=str)}"

    @staticmethod
    def testimonials(params: dict) -> str:
        return f"testimonials:{json.dumps(params, sort_keys=True, default=str)}"

    @staticmethod
    def idempotency(key: str) -> str:
        return f"idemp:{key}"
