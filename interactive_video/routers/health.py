"""
Health Check Router

Provides health check endpoints for monitoring application status.
"""

from fastapi import APIRouter, Depends, HTTPException
from ..models.interaction import HealthCheckResponse
from ..utils.feature_flags import feature_flags
from ..utils.validation import get_validation_status
import os
import sys
import time
from datetime import datetime

router = APIRouter(tags=["Health"])

# Application start time for uptime calculation
_start_time = time.time()


@router.get("/health", response_model=HealthCheckResponse, summary="Basic Health Check")
async def health_check():
    """
    Basic health check endpoint

    Returns application status, version, and environment information.
    This endpoint is used by load balancers and monitoring systems.
    """
    uptime = time.time() - _start_time

    return HealthCheckResponse(
        status="healthy",
        version=os.getenv("APP_VERSION", "1.0.0"),
        environment=os.getenv("ENVIRONMENT", "development"),
        timestamp=datetime.utcnow(),
        uptime=uptime
    )


@router.get("/health/detailed", summary="Detailed Health Check")
async def detailed_health_check(validation_status: dict = Depends(get_validation_status)):
    """
    Detailed health check with dependency validation

    Reports the import schema self-check and the active feature flags.
    """
    uptime = time.time() - _start_time
    is_healthy = (
        validation_status["schema_loaded"] and
        validation_status["validation_working"]
    )

    return {
        "status": "healthy" if is_healthy else "degraded",
        "version": os.getenv("APP_VERSION", "1.0.0"),
        "environment": os.getenv("ENVIRONMENT", "development"),
        "timestamp": datetime.utcnow().isoformat(),
        "uptime": uptime,
        "components": {
            "validation": validation_status,
            "features": feature_flags.get_environment_info(),
        },
        "details": {
            "cors_origins": os.getenv("CORS_ORIGINS", "http://localhost:3000").split(","),
            "python_version": sys.version,
            "startup_time": datetime.fromtimestamp(_start_time).isoformat()
        }
    }


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check(validation_status: dict = Depends(get_validation_status)):
    """
    Kubernetes-style readiness probe

    Returns 200 if the application is ready to serve requests,
    503 if the import schema cannot be used.
    """
    if not validation_status["schema_loaded"]:
        raise HTTPException(
            status_code=503,
            detail=f"Application not ready: {validation_status.get('error', 'schema not loaded')}"
        )
    return {"status": "ready", "timestamp": datetime.utcnow().isoformat()}


@router.get("/health/live", summary="Liveness Check")
async def liveness_check():
    """Kubernetes-style liveness probe"""
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "pid": os.getpid()
    }
