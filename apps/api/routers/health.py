"""Health check router — liveness + readiness.

Readiness pings the blob store with a short timeout so a hung Redis shows
up as degraded instead of stalling the probe.
"""

import asyncio

import structlog
from fastapi import APIRouter, Depends

from apps.api.deps import get_blob_store
from apps.api.domains.statements.blob_store import RedisBlobStore

router = APIRouter(tags=["health"])
logger = structlog.get_logger()

REDIS_TIMEOUT_SECONDS = 2


@router.get("/health")
async def health_liveness():
    """Liveness probe — returns 200 if the API process is running."""
    return {"status": "healthy", "service": "api"}


@router.get("/health/ready")
async def health_readiness(store: RedisBlobStore = Depends(get_blob_store)):
    """Readiness probe — checks blob store connectivity."""
    status = {
        "status": "healthy",
        "services": {
            "api": "up",
            "redis": "unknown",
        },
    }

    try:
        loop = asyncio.get_running_loop()
        pong = await asyncio.wait_for(
            loop.run_in_executor(None, store.ping),
            timeout=REDIS_TIMEOUT_SECONDS,
        )

        if pong:
            status["services"]["redis"] = "up"
        else:
            status["services"]["redis"] = "down"
            status["status"] = "degraded"
    except asyncio.TimeoutError:
        status["services"]["redis"] = "timeout"
        status["status"] = "degraded"
        logger.warning("redis_health_timeout", timeout_s=REDIS_TIMEOUT_SECONDS)
    except Exception as e:
        status["services"]["redis"] = "down"
        status["status"] = "degraded"
        logger.warning("redis_health_failed", error=str(e))

    return status
