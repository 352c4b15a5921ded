"""Health and readiness endpoints."""
from fastapi import APIRouter, Request

from briefly.core.redis_client import ping_redis
from briefly.core.settings import get_settings

router = APIRouter()

VERSION = "0.1.0"


@router.get("/health", tags=["meta"])
async def health(request: Request) -> dict[str, object]:
    """Liveness plus a check of the database and Redis; always HTTP 200."""
    settings = get_settings()
    resources = getattr(request.app.state, "resources", None)

    if resources is None:
        return {
            "status": "ok",
            "environment": settings.environment,
            "version": VERSION,
        }

    database_ok = await resources.database.ping()
    redis_ok = await ping_redis(resources.redis)
    queue_length = await resources.queue.get_queue_length(resources.redis) if redis_ok else None
    cache_stats = await resources.cache.get_stats()

    return {
        "status": "ok" if database_ok and redis_ok else "degraded",
        "environment": settings.environment,
        "version": VERSION,
        "database": {"connected": database_ok},
        "redis": {"connected": redis_ok},
        "queue": {"name": resources.queue.queue_name, "pending": queue_length},
        "cache": {
            "hits": cache_stats.hits,
            "misses": cache_stats.misses,
            "sets": cache_stats.sets,
            "errors": cache_stats.errors,
            "hit_ratio": round(cache_stats.hit_ratio * 100, 2),
        },
    }
