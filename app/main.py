from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from starlette.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy import text
from app.api import (
    auth,
    vehicles,
    contact,
    testimonials,
    blog,
    inventory_alerts,
    admin_notifications,
    admin_pricing,
    admin_leads,
    health,
    visitor,
)
from app.core.cache import performance_cache
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.redis import init_redis, close_redis, get_redis
from app.core.metrics import request_count, request_duration, db_connected, redis_connected, get_metrics_text
from app.db.session import AsyncSessionLocal
import time
import logging

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        status = 500

        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            route = request.scope.get("route")
            endpoint = route.path if route is not None else request.url.path
            request_count.labels(
                method=request.method,
                endpoint=endpoint,
                status=status
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.time() - start_time)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting...")

    try:
        client = await init_redis()
        redis_connected.set(1 if client is not None else 0)
    except Exception as e:
        logger.error(f"Redis connection failed, continuing with in-process cache: {e}")
        redis_connected.set(0)

    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        db_connected.set(1)
        logger.info("Database connected")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        db_connected.set(0)

    performance_cache.start_cleanup()

    yield

    logger.info("Application shutting down...")
    await performance_cache.stop_cleanup()
    await close_redis()
    redis_connected.set(0)
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

app.add_middleware(MetricsMiddleware)
if settings.CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
        allow_methods=["*"],
        allow_headers=["*"],
    )

register_exception_handlers(app)

for module in (
    auth,
    vehicles,
    contact,
    testimonials,
    blog,
    inventory_alerts,
    admin_notifications,
    admin_pricing,
    admin_leads,
    health,
    visitor,
):
    app.include_router(module.router, prefix="/api")


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/readiness", tags=["monitoring"])
async def readiness_check():
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"ready": False, "reason": "Database not available"})

    return {
        "ready": True,
        "cache": "redis" if get_redis() is not None else "memory",
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/api/health",
        "metrics": "/metrics"
    }
