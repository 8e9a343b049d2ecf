"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    ReportError,
    ConflictError,
    MissingLocalizationError,
    UnsupportedLanguageError,
    InvalidAnalysisError,
    HostUnavailableError,
    ArtifactNotFoundError,
    ReportGenerationError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "ReportError",
    "ConflictError",
    "MissingLocalizationError",
    "UnsupportedLanguageError",
    "InvalidAnalysisError",
    "HostUnavailableError",
    "ArtifactNotFoundError",
    "ReportGenerationError",
]
