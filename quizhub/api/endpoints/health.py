"""
Health endpoints
"""

from fastapi import APIRouter, Depends, Request

from quizhub.core.cache import CacheManager, get_cache
from quizhub.core.config import settings
from quizhub.core.database import DatabaseHealthCheck, engine
from quizhub.db.schema_check import verify_schema
from quizhub.models.base import utcnow

router = APIRouter()


@router.get("/detailed")
async def detailed_health(request: Request, cache: CacheManager = Depends(get_cache)):
    """Database, cache, notifier and schema drift report"""
    database = DatabaseHealthCheck.check_connection()
    schema = verify_schema(engine) if database["status"] == "healthy" else None
    notifier = request.app.state.notifier

    healthy = database["status"] == "healthy" and (schema is None or schema["ok"])
    return {
        "status": "healthy" if healthy else "degraded",
        "timestamp": utcnow().isoformat(),
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": database,
        "cache": {"enabled": cache.enabled, "connected": cache.connected},
        "notifier": {"connections": len(notifier.connections)},
        "schema": schema,
    }
