"""
Health check endpoints.
"""

import time

from fastapi import APIRouter, Depends

from facturier.api.dependencies import get_app_settings
from facturier.application.dto.responses import HealthResponse
from facturier.config import Settings

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """
    Basic health check.

    Returns service status, uptime and the active storage backend.
    """
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        uptime_seconds=time.time() - _start_time,
        storage_backend=settings.storage.backend,
    )
