"""
Health Check Endpoints

Provides system health and readiness endpoints for:
- Load balancer health checks
- Kubernetes probes
- Monitoring systems
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from haven.config import Settings, get_settings
from haven.infrastructure.database import DatabaseManager, get_db_manager

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    """Readiness check response with component health."""

    ready: bool
    components: dict


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Basic health check endpoint for load balancers",
)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Basic health check.

    Returns 200 if application is running.
    """
    return HealthResponse(
        status="healthy",
        version="0.1.0",
        environment=settings.env,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Readiness check including the row store",
)
async def readiness_check(db: DatabaseManager = Depends(get_db_manager)) -> ReadinessResponse:
    """
    Detailed readiness check.

    The portal is ready when the database answers.
    """
    components = {"database": await db.health_check()}

    return ReadinessResponse(
        ready=all(components.values()),
        components=components,
    )


@router.get(
    "/live",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Kubernetes liveness probe endpoint",
)
async def liveness_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Kubernetes liveness probe.

    Returns 200 if application process is alive.
    """
    return HealthResponse(
        status="alive",
        version="0.1.0",
        environment=settings.env,
    )
