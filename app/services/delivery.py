import httpx
import asyncio
import logging
import time
from app.core.config import settings
from app.core.metrics import integration_deliveries, integration_duration

logger = logging.getLogger(__name__)


async def deliver(channel: str, url: str, retries: int | None = None, **request_kwargs) -> bool:
    """POST to a provider API with exponential backoff; never raises."""

    if retries is None:
        retries = settings.INTEGRATION_RETRIES

    backoff = 1.0
    start = time.time()

    try:
        for attempt in range(1, retries + 1):
            try:
                async with httpx.AsyncClient(timeout=settings.INTEGRATION_TIMEOUT) as client:
                    response = await client.post(url, **request_kwargs)

                    if 200 <= response.status_code < 300:
                        logger.info(f"{channel} delivery succeeded")
                        integration_deliveries.labels(channel=channel, status="success").inc()
                        return True
                    else:
                        logger.warning(
                            f"{channel} delivery failed (attempt {attempt}/{retries}): "
                            f"Status {response.status_code}"
                        )
            except httpx.TimeoutException:
                logger.warning(f"{channel} timeout (attempt {attempt}/{retries})")
            except Exception as e:
                logger.warning(f"{channel} delivery error (attempt {attempt}/{retries}): {e}")

            if attempt < retries:
                await asyncio.sleep(backoff)
                backoff *= 2.0

        logger.error(f"{channel} delivery failed after {retries} attempts")
        integration_deliveries.labels(channel=channel, status="failed").inc()
        return False
    finally:
        integration_duration.labels(channel=channel).observe(time.time() - start)
