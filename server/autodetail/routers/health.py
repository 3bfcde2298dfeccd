"""Health check router."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import ping_db
from ..core.dependencies import DatabaseSession
from ..core.observability import SERVICE_NAME
from ..schemas.health import HealthResponse, HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """
    Health check endpoint.

    Reports whether the database answers a trivial query.
    """
    try:
        await ping_db(db)
    except Exception as e:
        logger.error("Health check failed", extra={"error": str(e)})
        response_data = HealthResponse(status=HealthStatus.UNHEALTHY, database="disconnected", error=str(e))
        return JSONResponse(status_code=500, content=response_data.model_dump(mode="json", exclude_none=True))

    response_data = HealthResponse(status=HealthStatus.HEALTHY, database="connected")
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json", exclude_none=True))


@router.get("/info")
async def info() -> dict:
    """Service name, version and environment."""
    return {
        "service": SERVICE_NAME,
        "business": settings.business_name,
        "version": "1.0.0",
        "environment": settings.environment,
    }
