"""
Health check and monitoring endpoints.
"""
import logging
import time

from fastapi import APIRouter

from mentormatch.core.settings import settings
from mentormatch.db import check_database_health
from mentormatch.services.discovery import get_discovery_service
from mentormatch.services.meetings import get_meeting_provisioner

logger = logging.getLogger("mentormatch.health")
router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.environment,
        "version": "1.0.0",
    }


@router.get("/health/detailed")
async def detailed_health_check():
    """Detailed health check with service status."""
    start_time = time.time()

    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.environment,
        "services": {},
    }

    db_health = await check_database_health()
    health_status["services"]["database"] = db_health
    if db_health["status"] != "healthy":
        health_status["status"] = "degraded"

    # Configuration problems in the provider are reported, not raised
    try:
        provisioner = get_meeting_provisioner()
        health_status["services"]["meetings"] = {
            "status": "configured" if provisioner.is_available() else "not_configured",
            "provider": provisioner.PROVIDER_NAME,
        }
    except ValueError as e:
        health_status["services"]["meetings"] = {"status": "error", "error": str(e)}

    discovery = get_discovery_service()
    health_status["services"]["ai_gateway"] = {
        "status": "configured" if discovery.is_available() else "not_configured",
        "model": discovery.model,
    }

    response_time = (time.time() - start_time) * 1000
    health_status["response_time_ms"] = round(response_time, 2)
    return health_status


@router.get("/ready")
async def readiness_check():
    """Kubernetes-style readiness probe."""
    db_health = await check_database_health()
    if db_health["status"] != "healthy":
        return {"status": "not_ready", "reason": "database_unavailable"}
    return {"status": "ready"}


@router.get("/live")
async def liveness_check():
    """Kubernetes-style liveness probe."""
    return {"status": "alive", "timestamp": time.time()}
