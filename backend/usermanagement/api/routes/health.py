"""Health & Readiness Probes — liveness and readiness endpoints.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the database is unreachable or the
      schema is behind the newest migration (readiness)
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from usermanagement.infrastructure import database
from usermanagement.infrastructure.schema_migrator import SchemaMigrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "user-directory-api",
        "version": "1.0.0",
    }


def _not_ready(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason},
    )


@router.get("/ready")
async def readiness_check():
    """Readiness probe — database connectivity and schema revision."""
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return _not_ready("database_unavailable")
    try:
        schema_ok = await SchemaMigrator(manager.engine).is_up_to_date()
    except Exception as e:
        logger.error(f"Schema revision check failed: {e}")
        schema_ok = False
    if not schema_ok:
        return _not_ready("schema_outdated")
    return {
        "status": "ready",
        "checks": {"database": "healthy", "schema": "current"},
    }
