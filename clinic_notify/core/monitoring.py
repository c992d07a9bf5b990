"""Health checks and monitoring endpoints"""
from fastapi import APIRouter

from clinic_notify.config.redis import get_redis
from clinic_notify.config.settings import get_settings

health_router = APIRouter()


@health_router.get("/")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "clinic-notify"}


@health_router.get("/detailed")
async def detailed_health_check():
    """Detailed health check with dependencies"""
    settings = get_settings()
    checks = {
        "api": "healthy",
        "reminder_sink": settings.REMINDER_SINK,
        "redis": "unknown",
        "overall": "unknown"
    }

    # Redis only backs the celery sink
    if settings.REMINDER_SINK == "celery":
        try:
            redis_client = await get_redis()
            await redis_client.ping()
            checks["redis"] = "healthy"
        except Exception as e:
            checks["redis"] = f"unhealthy: {str(e)}"
    else:
        checks["redis"] = "not_used"

    if checks["redis"].startswith("unhealthy"):
        checks["overall"] = "degraded"
    else:
        checks["overall"] = "healthy"

    return checks
