"""
Safe Haven Backend: Shared Response Schemas
=============================================

What:  Error envelope and health payload used across all routers.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body returned by every exception handler.

    Example:
        {
            "success": false,
            "error": "validation_error",
            "message": "'25:00' is not a valid time. Please use HH:MM (24-hour) format",
            "details": {"field": "start_time", "value": "25:00"},
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    mail: str = Field(description="Mail relay: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
