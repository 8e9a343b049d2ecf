"""
Diagnosis Report Renderer

Turns an AnalysisResult into:
- a downloadable document artifact (via a pluggable encoder)
- a printable HTML page
and drives the host's save-as and print actions.
"""
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Any, Optional, Union
import asyncio
import threading

from poultry_report.core.analysis import AnalysisResult, Language
from poultry_report.core.reports.content import FILENAME_PREFIX, UNKNOWN_TOKEN
from poultry_report.core.reports.encoders import DocumentEncoder, SimulatedPdfEncoder
from poultry_report.core.reports.host import ReportHost, LocalHost
from poultry_report.core.reports.html import render_printable_html
from poultry_report.utils import (
    get_logger,
    ConflictError,
    HostUnavailableError,
    ReportError,
    ReportGenerationError,
)

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DocumentArtifact:
    """Generated document: payload, one-time retrieval handle, filename."""
    payload: bytes
    locator: str
    filename: str
    media_type: str = "application/pdf"
    generated_at: Optional[datetime] = None

    @property
    def size_bytes(self) -> int:
        return len(self.payload)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "locator": self.locator,
            "filename": self.filename,
            "media_type": self.media_type,
            "size_bytes": self.size_bytes,
            "generated_at": self.generated_at.isoformat() if self.generated_at else None,
        }


class ReportRenderer:
    """
    Renders diagnosis reports in Arabic or English.

    Only one document generation may run per instance; an overlapping call
    fails fast with ConflictError instead of queueing.
    """

    def __init__(
        self,
        encoder: Optional[DocumentEncoder] = None,
        host: Optional[ReportHost] = None,
        clock: Optional[Callable[[], datetime]] = None,
        revoke_delay: float = 0.1,
    ):
        self.encoder = encoder or SimulatedPdfEncoder()
        self.host = host or LocalHost()
        self.clock = clock or _utc_now
        self.revoke_delay = revoke_delay
        self._generation_gate = threading.Lock()

        logger.info(f"ReportRenderer initialized, encoder: {self.encoder.name}")

    @property
    def is_generating(self) -> bool:
        return self._generation_gate.locked()

    @contextmanager
    def _generation_slot(self):
        if not self._generation_gate.acquire(blocking=False):
            raise ConflictError()
        try:
            yield
        finally:
            self._generation_gate.release()

    async def generate_report(
        self,
        result: AnalysisResult,
        language: Union[Language, str] = Language.AR
    ) -> DocumentArtifact:
        """
        Encode a document for ``result`` and register a retrieval handle.

        Args:
            result: Diagnosis result
            language: 'ar' (default) or 'en'

        Returns:
            DocumentArtifact with payload, locator and filename

        Raises:
            ConflictError: another generation is in progress on this renderer
            ReportGenerationError: the encoder failed
        """
        language = Language.parse(language)

        with self._generation_slot():
            moment = self.clock()
            try:
                payload = await self.encoder.encode(result, language, moment)
            except ReportError:
                raise
            except Exception as e:
                logger.error(f"Document encoding failed: {e}")
                raise ReportGenerationError(
                    f"Document encoding failed: {e}", encoder=self.encoder.name
                ) from e

            filename = self.build_filename(result, language)
            locator = self.host.create_handle(payload, self.encoder.media_type, filename)

        logger.info(f"Report generated: {filename} ({len(payload)} bytes)", extra={"report_id": locator})
        return DocumentArtifact(
            payload=payload,
            locator=locator,
            filename=filename,
            media_type=self.encoder.media_type,
            generated_at=moment,
        )

    def build_filename(self, result: AnalysisResult, language: Union[Language, str]) -> str:
        """Locale-specific filename; a missing disease name becomes 'unknown'."""
        language = Language.parse(language)
        timestamp = self.clock().date().isoformat()
        disease_name = result.disease.name.get_or(language, UNKNOWN_TOKEN)
        return f"{FILENAME_PREFIX[language]}-{disease_name}-{timestamp}.{self.encoder.extension}"

    def render_printable_document(self, result: AnalysisResult, language: Union[Language, str]) -> str:
        """Complete printable HTML page. Raises MissingLocalizationError on gaps."""
        return render_printable_html(result, Language.parse(language), self.clock())

    async def trigger_download(self, artifact: DocumentArtifact):
        """
        Save the artifact through the host, then release its handle after
        ``revoke_delay`` seconds. Ownership of the handle passes to this call,
        so the handle is released even when the save fails.
        """
        try:
            return self.host.save_as(artifact.locator, artifact.filename)
        finally:
            asyncio.get_running_loop().call_later(
                self.revoke_delay, self.host.revoke_handle, artifact.locator
            )

    def open_print_view(self, result: AnalysisResult, language: Union[Language, str]):
        """
        Open a print surface, write the printable page and print once loaded.

        Raises:
            HostUnavailableError: the host refused to open a surface
        """
        html = self.render_printable_document(result, language)

        surface = self.host.open_surface()
        if surface is None:
            raise HostUnavailableError("Host refused to open a print surface", capability="open_surface")

        surface.on_load(surface.print)
        surface.write(html)
        surface.close()
        return surface
