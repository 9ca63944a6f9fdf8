from fastapi import APIRouter, Depends
import redis
from typing import Dict, Any

from safetrip.api.deps import get_storage
from safetrip.clients.storage import KeyValueStore
from safetrip.core.config import settings

router = APIRouter(prefix="/health", tags=["Health Checks"])


@router.get("/")
async def health_check() -> Dict[str, str]:
    """
    Simple health check to verify the API service is running.
    """
    return {"status": "ok", "service": settings.PROJECT_NAME}


@router.get("/readiness")
def readiness_check(storage: KeyValueStore = Depends(get_storage)) -> Dict[str, Any]:
    """
    Check if the application is ready to accept traffic.

    Only Redis is checked; the backend and feeds are remote collaborators
    whose outages the services already degrade around.
    """
    redis_status = "ok"
    try:
        storage.ping()
    except redis.RedisError as e:
        redis_status = f"error: {str(e)}"

    return {
        "status": "ok" if redis_status == "ok" else "degraded",
        "redis": redis_status,
        "version": settings.VERSION
    }


@router.get("/version")
async def version_info() -> Dict[str, str]:
    """
    Get application version information.
    """
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION
    }
