# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

import os
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from app.dependencies import LocalFileStoreDep
from lib.mongo_client import MongoClient

router = APIRouter()

API_VERSION = "1.0.0"


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
    uploads: str


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
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(local_store: LocalFileStoreDep):
    """
    Readiness check endpoint.

    Checks that MongoDB answers a ping and that the uploads directory is
    writable.
    """
    checks = ChecksResponse(database="unknown", uploads="unknown")

    if not MongoClient.is_ready():
        checks.database = "unhealthy: not connected"
    elif await MongoClient.ping():
        checks.database = "healthy"
    else:
        checks.database = "unhealthy: ping failed"

    directory = local_store.directory
    if directory.is_dir() and os.access(directory, os.W_OK):
        checks.uploads = "healthy"
    else:
        checks.uploads = f"unhealthy: {directory} missing or read-only"

    all_healthy = checks.database == "healthy" and checks.uploads == "healthy"

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
    """
    return LivenessResponse(
        status="alive",
        timestamp=_now(),
    )
