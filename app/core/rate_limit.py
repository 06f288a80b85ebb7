import logging
import time
from typing import Dict, Tuple
from app.core.redis import get_redis
from app.core.config import settings
from app.core.errors import APIError
from app.core.metrics import rate_limit_exceeded

logger = logging.getLogger(__name__)

# identifier -> (count, window_reset_at)
_windows: Dict[str, Tuple[int, float]] = {}
_last_sweep = 0.0
SWEEP_INTERVAL = 60


def _sweep(now: float) -> None:
    global _last_sweep
    if now - _last_sweep < SWEEP_INTERVAL:
        return
    _last_sweep = now
    for key in [k for k, (_, reset_at) in _windows.items() if now >= reset_at]:
        del _windows[key]


def _check_memory(key: str, limit: int, window: int) -> bool:
    now = time.time()
    _sweep(now)
    count, reset_at = _windows.get(key, (0, 0.0))
    if now >= reset_at:
        _windows[key] = (1, now + window)
        return True
    if count >= limit:
        return False
    _windows[key] = (count + 1, reset_at)
    return True


async def _check_redis(redis, key: str, limit: int, window: int) -> bool:
    current = await redis.get(key)
    if current is None:
        await redis.set(key, "1", ex=window)
        return True
    if int(current) >= limit:
        return False
    await redis.incr(key)
    return True


async def check_rate_limit(
    identifier: str,
    limit: int,
    window: int,
    scope: str = "api",
) -> None:
    """Fixed-window counter; raises 429 once ``limit`` hits land in one window."""
    key = f"rl:{scope}:{identifier}"
    redis = get_redis()
    allowed = None
    if redis is not None:
        try:
            allowed = await _check_redis(redis, key, limit, window)
        except Exception as e:
            logger.warning(f"Redis rate limit check failed, using in-process counter: {e}")
    if allowed is None:
        allowed = _check_memory(key, limit, window)

    if not allowed:
        rate_limit_exceeded.labels(scope=scope).inc()
        raise APIError(
            status_code=429,
            message="Too many requests. Please try again later.",
            code="RATE_LIMIT",
        )


async def check_contact_rate_limit(client_ip: str) -> None:
    await check_rate_limit(
        client_ip,
        settings.CONTACT_RATE_LIMIT,
        settings.CONTACT_RATE_LIMIT_WINDOW,
        scope="contact",
    )


async def check_admin_rate_limit(user_id: int) -> None:
    await check_rate_limit(
        str(user_id),
        settings.API_RATE_LIMIT,
        settings.API_RATE_LIMIT_WINDOW,
        scope="admin",
    )


def reset_rate_limits() -> None:
    global _last_sweep
    _windows.clear()
    _last_sweep = 0.0
