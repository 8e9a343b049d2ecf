"""
API Schemas
"""
from .reports import ReportRequest, ReportResponse, HealthResponse

__all__ = ["ReportRequest", "ReportResponse", "HealthResponse"]
