"""API schemas."""
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field


class SiteData(BaseModel):
    """Fetched site"""
    results: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description=(
            "Files keyed by basename. Each holds blob_id and content, plus size on "
            "success or error when the blob could not be fetched"
        ),
    )
    object_id: str = Field(..., description="Resolved site object ID")
    network: str = Field(..., description="Walrus network")
    time_stamp: str = Field(..., description="UTC fetch time (ISO 8601)")


class FetchBlobsResponse(BaseModel):
    """GET /fetch-blobs response"""
    message: str
    data: Union[SiteData, Dict[str, Any]] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Error body"""
    error: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = "ok"
    network: str
