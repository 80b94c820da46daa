"""
Shared response schemas.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every domain error: a stable ``code`` plus a human message."""

    message: str = Field(description="Human-readable error message")
    code: str = Field(description="Error kind, e.g. SLOT_TAKEN or OUT_OF_HOURS")
    details: Dict[str, Any] = Field(default_factory=dict)


class ErrorEnvelope(BaseModel):
    detail: ErrorResponse


class DeleteResponse(BaseModel):
    """Standard response for delete operations."""

    success: bool = Field(default=True, description="Deletion success status")
    message: str = Field(description="Human-readable deletion message")


class HealthCheckResponse(BaseModel):
    status: str = Field(description="healthy or degraded")
    service: str
    version: str
    environment: str
    timestamp: datetime
    database: Optional[bool] = None
