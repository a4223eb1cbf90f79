"""
Common Pydantic schemas used across the API.

This module contains shared schemas for errors and health checks.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorResponse(BaseModel):
    """Standard error response format."""

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "error": "Internal server error",
            "detail": {"message": "Cell (3, 1) is text, expected numeric"},
            "timestamp": "2025-10-15T12:00:00Z",
            "path": "/api/files/parse"
        }
    })

    error: str = Field(..., description="Error message")
    detail: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")
    path: Optional[str] = Field(None, description="Request path that caused the error")


class HealthCheckResponse(BaseModel):
    """Health check response."""

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "status": "healthy",
            "timestamp": "2025-10-15T12:00:00Z",
            "version": "1.0.0"
        }
    })

    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Health check timestamp")
    version: str = Field(..., description="API version")
