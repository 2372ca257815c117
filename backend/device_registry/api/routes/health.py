"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /{api_version}/health/ always returns 200 if process is up (liveness)
    - GET /{api_version}/health/ready returns 503 until registry and tracer are initialized
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from device_registry.config import get_settings
import device_registry.infrastructure.tracing as tracing_module
import device_registry.services.in_memory_registry as registry_module

logger = logging.getLogger(__name__)
router = APIRouter(prefix=f"/{get_settings().api_version}/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": get_settings().service_name,
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe: management service and tracer must be wired."""
    checks = {
        "registry": registry_module.registry is not None,
        "tracing": tracing_module.tracer is not None,
    }
    if not all(checks.values()):
        logger.warning(f"readiness check failed: {checks}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
