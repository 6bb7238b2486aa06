"""
CRUD Gateway: Shared Schemas
=============================
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    message: str


class UploadResponse(BaseModel):
    """
    Returned by POST /buckets/{bucketName}/upload.

    `data` holds Location, ETag, Bucket and Key of the stored object.
    """

    message: str = Field(default="Upload concluído com sucesso")
    data: Dict[str, Any]


class ErrorResponse(BaseModel):
    """Documentation-only model for the JSON error bodies."""

    error: Optional[str] = None
    message: Optional[str] = None
    details: Optional[str] = None


class HealthResponse(BaseModel):
    """
    GET /health body.

    healthy: both pooled stores answered; degraded: at least one did not.
    Object storage is stateless and only reports its configured region.
    """

    status: str = Field(description="healthy or degraded")
    version: str
    relational: str = Field(description="connected or disconnected")
    document: str = Field(description="connected or disconnected")
    object_storage_region: str
    uptime_seconds: float
    checks: List[str] = Field(default_factory=list, description="Failure notes, if any")
