"""Health check endpoints."""

from fastapi import APIRouter, Request

from inkpress.config import get_settings
from inkpress.core.database import AsyncCassandraConnection


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - the process is up."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, str | bool]:
    """Readiness probe - reports the backing stores."""
    settings = get_settings()
    return {
        "status": "ready" if AsyncCassandraConnection.is_connected() else "degraded",
        "cassandra": AsyncCassandraConnection.is_connected(),
        "redis": getattr(request.app.state, "redis", None) is not None,
        "environment": settings.environment,
    }


@router.get("")
async def health() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
