"""
Report Generation Module

Renders chicken-health diagnosis reports in Arabic or English:
- Document artifact (PDF) via a pluggable encoder
- Printable HTML page with RTL/LTR layout
"""
from .renderer import ReportRenderer, DocumentArtifact
from .encoders import DocumentEncoder, SimulatedPdfEncoder, ReportLabPdfEncoder, create_encoder
from .host import ArtifactStore, ReportHost, LocalHost, PrintSurface

__all__ = [
    "ReportRenderer",
    "DocumentArtifact",
    "DocumentEncoder",
    "SimulatedPdfEncoder",
    "ReportLabPdfEncoder",
    "create_encoder",
    "ArtifactStore",
    "ReportHost",
    "LocalHost",
    "PrintSurface",
]
