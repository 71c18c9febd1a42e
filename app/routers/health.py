# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies import CacheDep, SettingsDep

router = APIRouter()

VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    database: str
    cache: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep):
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(settings: SettingsDep, cache: CacheDep):
    """
    Readiness check endpoint.

    Returns whether the service is ready to accept requests.
    Checks database and cache connectivity.
    """
    checks = ChecksResponse(database="unknown", cache="unknown")

    # Check database
    if settings.STORAGE_BACKEND == "memory":
        checks.database = "healthy"
    else:
        try:
            from lib.supabase_client import SupabaseClient

            SupabaseClient.ping()
            checks.database = "healthy"
        except Exception as e:
            checks.database = f"unhealthy: {str(e)[:50]}"

    # Check cache
    try:
        cache.set("health:probe", 1, ttl=10)
        checks.cache = "healthy" if cache.get("health:probe") == 1 else "unhealthy: probe lost"
    except Exception as e:
        checks.cache = f"unhealthy: {str(e)[:50]}"

    all_healthy = checks.database == "healthy" and checks.cache == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive.
    Used by Kubernetes/Docker for restart decisions.
    """
    return LivenessResponse(
        status="alive",
        timestamp=_now(),
    )
