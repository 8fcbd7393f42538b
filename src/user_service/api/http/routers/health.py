"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Request, status
from starlette.responses import JSONResponse

from user_service.api.http.app_data import ApplicationDependencies
from user_service.core.storage import RedisRecordCache
from user_service.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe: 200 as long as the process is running."""
    return {"status": "healthy", "service": "user-service"}


@router.get("/ready", response_model=None)
async def readiness(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness probe.

    The database is critical and turns the probe into a 503. A degraded
    cache is reported but the service keeps answering from the store.
    """
    app_deps: ApplicationDependencies = request.app.state.app_dependencies

    db_healthy = app_deps.database_service.health_check()
    cache_healthy = await app_deps.record_cache.ping()

    checks = {
        "database": {"status": "healthy" if db_healthy else "unhealthy"},
        "cache": {
            "status": "healthy" if cache_healthy else "degraded",
            "type": "redis" if isinstance(app_deps.record_cache, RedisRecordCache) else "in-memory",
        },
    }

    body = {"status": "ready" if db_healthy else "not_ready", "checks": checks}
    if not db_healthy:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body


@router.get("/database", response_model=None)
async def health_database(request: Request) -> dict[str, Any] | JSONResponse:
    """Database health check with connection pool status."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    config = get_config()

    healthy = app_deps.database_service.health_check()
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "type": "sqlite" if config.database.is_sqlite else "postgresql",
        "pool": app_deps.database_service.engine.pool.status(),
    }
    if not healthy:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body


@router.get("/cache")
async def health_cache(request: Request) -> dict[str, Any]:
    """Cache health check. Never a 503: requests fall back to the store."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    redis_service = app_deps.redis_service

    if redis_service is None or not redis_service.is_enabled:
        return {
            "status": "disabled",
            "type": "in-memory",
            "note": "Redis is not enabled, using in-memory storage",
        }

    healthy = await redis_service.health_check()
    result: dict[str, Any] = {
        "status": "healthy" if healthy else "degraded",
        "type": "redis" if isinstance(app_deps.record_cache, RedisRecordCache) else "in-memory",
        "url": get_config().redis.sanitized_connection_string,
    }

    info = await redis_service.get_info()
    if info:
        result["info"] = info
    return result
