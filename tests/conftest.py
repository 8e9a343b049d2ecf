"""
Pytest Configuration and Fixtures

Shared fixtures for diagnosis report tests.
"""
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Fast placeholder encoder for the API app; set before poultry_report.config loads
os.environ.setdefault("POULTRY_REPORT_SIMULATED_DELAY_SECONDS", "0")
os.environ.setdefault("POULTRY_REPORT_DOCUMENT_ENCODER", "simulated")

from poultry_report.core.analysis import AnalysisResult
from poultry_report.core.reports.host import ArtifactStore, PrintSurface, ReportHost

FIXED_MOMENT = datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)


class RecordingSurface(PrintSurface):
    """Print surface that records what it receives."""

    def __init__(self):
        super().__init__()
        self.html = ""
        self.printed = False

    def write(self, html: str) -> None:
        self.html += html

    def print(self) -> None:
        self.printed = True


class RecordingHost(ReportHost):
    """Host that records save-as calls and hands out recording surfaces."""

    def __init__(self, allow_surfaces: bool = True):
        super().__init__(ArtifactStore())
        self.allow_surfaces = allow_surfaces
        self.saved: List[Dict[str, Any]] = []
        self.surfaces: List[RecordingSurface] = []

    def save_as(self, locator: str, filename: str) -> Path:
        artifact = self.store.resolve(locator)
        self.saved.append({"locator": locator, "filename": filename, "payload": artifact.payload})
        return Path(filename)

    def open_surface(self) -> Optional[PrintSurface]:
        if not self.allow_surfaces:
            return None
        surface = RecordingSurface()
        self.surfaces.append(surface)
        return surface


@pytest.fixture
def analysis_data() -> Dict[str, Any]:
    """Upstream analysis result in camelCase wire form."""
    return {
        "overallConfidence": 87,
        "breed": {
            "name": {"ar": "دجاج لوهمان براون", "en": "Lohmann Brown"},
            "confidence": 92,
        },
        "weight": {
            "estimated": "2.1 kg",
            "method": {
                "ar": "تقدير بصري من أبعاد الجسم",
                "en": "Visual estimate from body dimensions",
            },
            "errorMargin": "±0.2 kg",
        },
        "disease": {
            "name": {"ar": "مرض نيوكاسل", "en": "Newcastle Disease"},
            "probability": 78,
        },
        "treatment": {
            "medication": {"ar": "لقاح نيوكاسل", "en": "Newcastle vaccine"},
            "dosage": {"ar": "قطرة واحدة في العين", "en": "One eye drop per bird"},
            "duration": {"ar": "جرعة واحدة", "en": "Single dose"},
            "warnings": {
                "ar": "اعزل الطيور المصابة فوراً",
                "en": "Isolate affected birds immediately",
            },
        },
    }


@pytest.fixture
def analysis_result(analysis_data) -> AnalysisResult:
    return AnalysisResult.from_dict(analysis_data)


@pytest.fixture
def fixed_moment() -> datetime:
    return FIXED_MOMENT


@pytest.fixture
def fixed_clock(fixed_moment):
    return lambda: fixed_moment


@pytest.fixture
def recording_host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def blocking_host() -> RecordingHost:
    """Host that refuses to open print surfaces (popup blocked)."""
    return RecordingHost(allow_surfaces=False)


@pytest.fixture
def ttf_font_path() -> str:
    """Bitstream Vera TTF bundled with reportlab."""
    import reportlab
    return os.path.join(os.path.dirname(reportlab.__file__), "fonts", "Vera.ttf")
