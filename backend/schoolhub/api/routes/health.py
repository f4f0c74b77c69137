"""Health & Readiness Checks: liveness, readiness and pool introspection.

Invariants:
    - GET /health/ always returns 200 if the process is up (liveness)
    - GET /health/ready runs SELECT 1; 503 with an error when it fails
    - GET /health/pool reports pool statistics without a database round trip

Design Decisions:
    - db_manager read from the module at call time: it is created in the
      lifespan, after this router is imported
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from schoolhub import __version__
from schoolhub.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness check."""
    return {
        "status": "healthy",
        "service": "schoolhub-api",
        "version": __version__,
    }


@router.get("/ready")
async def readiness_check():
    """Readiness check with database latency and pool statistics."""
    if database.db_manager is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "error": "Database not initialized"},
        )
    result = await database.db_manager.health_check()
    if not result.healthy:
        logger.warning(f"Readiness check failed: {result.error}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=result.to_dict(),
        )
    return result.to_dict()


@router.get("/pool")
async def pool_stats():
    if database.db_manager is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "Database not initialized"},
        )
    return {"poolStats": database.db_manager.pool_stats().to_dict()}
