"""Health-related Pydantic schemas."""

from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """Health status enumeration."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: HealthStatus = Field(..., description="Service status")
    database: str = Field(..., description="connected or disconnected")
    error: str | None = Field(None, description="Database error when unhealthy")
