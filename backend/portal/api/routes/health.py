"""Health & Readiness Probes — liveness and readiness endpoints.

Invariants:
    - GET /api/health always returns 200 if the process is up (liveness)
    - GET /api/health/ready returns 503 if the database is unreachable (readiness)
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from portal.config import get_settings
from portal.core.envelope import error, success
from portal.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    settings = get_settings()
    return success("Server is running", {
        "status": "healthy",
        "service": "stmadb-portal",
        "version": settings.app_version,
        "environment": settings.environment,
    })


@router.get("/ready")
async def readiness_check():
    """Readiness probe, includes database connectivity."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error("Database unavailable", {
                "status": "not_ready",
                "reason": "database_unavailable",
            }),
        )
    return success("Ready", {"status": "ready", "checks": {"database": "healthy"}})
