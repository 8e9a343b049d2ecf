"""
API request/response schemas for report endpoints.
"""
from typing import Dict, Any, Optional

from pydantic import BaseModel, Field


class ReportRequest(BaseModel):
    """Analysis result in upstream camelCase form plus the report language."""
    analysis: Dict[str, Any] = Field(..., description="Upstream analysis result")
    language: Optional[str] = Field(None, description="'ar' or 'en'; server default when omitted")


class ReportResponse(BaseModel):
    report_id: str
    filename: str
    media_type: str
    size_bytes: int
    download_url: str
    generated_at: str


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    encoder: str
    generating: bool
