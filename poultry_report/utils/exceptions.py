"""
Custom Exception Hierarchy

Report-specific exception types carrying a machine-readable code and
structured details for API responses.
"""
from typing import Optional, Dict, Any


class ReportError(Exception):
    """Base exception for all diagnosis report errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class ConflictError(ReportError):
    """A document generation is already running on this renderer."""

    def __init__(self, message: str = "Report generation already in progress"):
        super().__init__(message=message, code="GENERATION_IN_PROGRESS")


class MissingLocalizationError(ReportError):
    """A per-language field has no text for the requested language."""

    def __init__(
        self,
        field: str,
        language: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"No '{language}' text for field '{field}'",
            code="MISSING_LOCALIZATION",
            details={"field": field, "language": language, **(details or {})}
        )
        self.field = field
        self.language = language


class UnsupportedLanguageError(ReportError):
    """Language code outside the supported set."""

    def __init__(self, language: str, supported: Optional[list] = None):
        super().__init__(
            message=f"Unsupported language: {language}",
            code="UNSUPPORTED_LANGUAGE",
            details={"language": language, "supported": supported or []}
        )
        self.language = language


class InvalidAnalysisError(ReportError):
    """The analysis result record is structurally invalid."""

    def __init__(
        self,
        message: str,
        field: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="INVALID_ANALYSIS",
            details={"field": field, **(details or {})}
        )
        self.field = field


class HostUnavailableError(ReportError):
    """The host environment cannot perform the requested action."""

    def __init__(
        self,
        message: str,
        capability: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="HOST_UNAVAILABLE",
            details={"capability": capability, **(details or {})}
        )
        self.capability = capability


class ArtifactNotFoundError(ReportError):
    """Unknown or already revoked artifact handle."""

    def __init__(self, locator: str):
        super().__init__(
            message=f"Artifact not found: {locator}",
            code="ARTIFACT_NOT_FOUND",
            details={"locator": locator}
        )
        self.locator = locator


class ReportGenerationError(ReportError):
    """Errors during document encoding."""

    def __init__(
        self,
        message: str,
        encoder: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="REPORT_ERROR",
            details={"encoder": encoder, **(details or {})}
        )
        self.encoder = encoder
