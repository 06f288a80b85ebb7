import logging
import time
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.core.cache import performance_cache
from app.core.config import settings
from app.core.errors import error_body
from app.core.redis import redis_health
from app.core.response_builders import success_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])

STARTED_AT = time.time()


async def _database_status(db: AsyncSession) -> dict:
    start = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy", "latency_ms": round((time.perf_counter() - start) * 1000, 2)}


@router.get("")
async def health(db: AsyncSession = Depends(get_db)):
    database = await _database_status(db)
    cache = await redis_health()
    cache["memory_items"] = performance_cache.memory_size

    if database["status"] != "healthy":
        overall = "unhealthy"
    elif not cache["healthy"]:
        overall = "degraded"
    else:
        overall = "healthy"

    data = {
        "status": overall,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.time() - STARTED_AT, 1),
        "version": settings.API_VERSION,
        "services": {"database": database, "cache": cache},
    }
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content={**error_body("Service unhealthy", "HEALTH_CHECK_FAILED"), "data": data})
    return success_response(data)


@router.get("/db")
async def health_db(db: AsyncSession = Depends(get_db)):
    database = await _database_status(db)
    if database["status"] != "healthy":
        return JSONResponse(status_code=503, content=error_body("Database unavailable", "HEALTH_CHECK_FAILED", database))
    return success_response(database)


@router.get("/redis")
async def health_redis():
    return success_response(await redis_health())
