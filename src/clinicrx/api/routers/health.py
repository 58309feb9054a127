"""
Health check endpoints.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ...core.config import get_settings
from ..deps import get_template_store
from ..schemas.common import ApiResponse
from ..utils.responses import ok

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger("clinicrx")


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    timestamp: datetime
    version: str
    service: str


@router.get("", response_model=ApiResponse[HealthResponse])
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns the current status of the service.
    """
    settings = get_settings()
    return ok(request, data=HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        version=settings.app_version,
        service=settings.app_name,
    ), message="OK")


@router.get("/live", response_model=ApiResponse[dict])
async def liveness_check(request: Request):
    return ok(request, data={"status": "alive"}, message="OK")


@router.get("/ready", response_model=ApiResponse[dict])
async def readiness_check(request: Request):
    """
    Readiness check endpoint.

    Checks the database connection and that the template store is readable.
    """
    settings = get_settings()
    checks = {}
    all_ok = True

    if settings.database.uri:
        try:
            from motor.motor_asyncio import AsyncIOMotorClient

            client = AsyncIOMotorClient(settings.database.uri, serverSelectionTimeoutMS=5000)
            await client.admin.command("ping")
            checks["database"] = "ok"
        except Exception as e:
            logger.error(f"Database readiness check failed: {e}")
            checks["database"] = f"error: {str(e)[:50]}"
            all_ok = False
    else:
        checks["database"] = "not_configured"
        all_ok = False

    try:
        get_template_store().get(settings.template.header_key)
        checks["template_store"] = "ok"
    except Exception as e:
        logger.error(f"Template store readiness check failed: {e}")
        checks["template_store"] = f"error: {str(e)[:50]}"
        all_ok = False

    return ok(
        request,
        data={"status": "ready" if all_ok else "degraded", "checks": checks},
        message="Ready" if all_ok else "Degraded",
    )
