"""
Document Encoders

Pluggable strategies that turn a diagnosis result into document bytes:
- SimulatedPdfEncoder: fixed placeholder document after a fixed delay
- ReportLabPdfEncoder: real PDF built with reportlab
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
import asyncio
import io
import os
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, KeepTogether

from poultry_report.core.analysis import AnalysisResult, Language
from poultry_report.core.reports.content import (
    ReportLine,
    build_sections,
    format_display_date,
    format_percent,
    label,
)
from poultry_report.utils import get_logger

logger = get_logger(__name__)


class DocumentEncoder(ABC):
    """Turns a result into document bytes."""

    name = "base"
    media_type = "application/pdf"
    extension = "pdf"

    @abstractmethod
    async def encode(self, result: AnalysisResult, language: Language, moment: datetime) -> bytes:
        ...


class SimulatedPdfEncoder(DocumentEncoder):
    """
    Stand-in for real document encoding.

    Waits ``delay_seconds`` and returns a fixed single-page PDF skeleton whose
    only text object is the localized report title.
    """

    name = "simulated"

    def __init__(self, delay_seconds: float = 2.0):
        self.delay_seconds = delay_seconds

    async def encode(self, result: AnalysisResult, language: Language, moment: datetime) -> bytes:
        await asyncio.sleep(self.delay_seconds)
        return self.placeholder_document(language)

    @staticmethod
    def placeholder_document(language: Language) -> bytes:
        title = label(language, "title")
        content = (
            "%PDF-1.4\n"
            "1 0 obj\n"
            "<< /Type /Catalog /Pages 2 0 R >>\n"
            "endobj\n"
            "2 0 obj\n"
            "<< /Type /Pages /Kids [3 0 R] /Count 1 >>\n"
            "endobj\n"
            "3 0 obj\n"
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R >>\n"
            "endobj\n"
            "4 0 obj\n"
            "<< /Length 100 >>\n"
            "stream\n"
            "BT\n"
            "/F1 12 Tf\n"
            "50 750 Td\n"
            f"({title}) Tj\n"
            "ET\n"
            "endstream\n"
            "endobj\n"
            "xref\n"
            "0 5\n"
            "0000000000 65535 f \n"
            "0000000009 00000 n \n"
            "0000000058 00000 n \n"
            "0000000115 00000 n \n"
            "0000000234 00000 n \n"
            "trailer\n"
            "<< /Size 5 /Root 1 0 R >>\n"
            "startxref\n"
            "295\n"
            "%%EOF\n"
        )
        return content.encode("utf-8")


class ReportLabPdfEncoder(DocumentEncoder):
    """
    Builds a real PDF with reportlab from the shared section model.

    Arabic glyphs need a TTF font passed as ``font_path``; without it the
    built-in Helvetica is used. Glyph shaping is left to the font.
    """

    name = "reportlab"

    def __init__(self, font_path: Optional[str] = None):
        self.font_name = "Helvetica"
        self.bold_font_name = "Helvetica-Bold"
        if font_path:
            if not os.path.exists(font_path):
                raise FileNotFoundError(f"PDF font not found: {font_path}")
            # Registration is process-wide; one name per font file
            font_name = f"Report-{Path(font_path).stem}"
            if font_name not in pdfmetrics.getRegisteredFontNames():
                pdfmetrics.registerFont(TTFont(font_name, font_path))
            self.font_name = self.bold_font_name = font_name
            logger.info(f"Registered PDF font {font_path}")
        self._styles = getSampleStyleSheet()

    async def encode(self, result: AnalysisResult, language: Language, moment: datetime) -> bytes:
        return await asyncio.to_thread(self._build, result, language, moment)

    def _paragraph_styles(self, language: Language) -> dict:
        align = TA_RIGHT if language is Language.AR else TA_LEFT
        base = self._styles['Normal']
        return {
            "title": ParagraphStyle(
                name=f"ReportTitle-{language.value}",
                parent=self._styles['Title'],
                fontName=self.bold_font_name,
                fontSize=22,
                spaceAfter=10,
                textColor=HexColor("#1E40AF"),
                alignment=TA_CENTER,
            ),
            "centered": ParagraphStyle(
                name=f"Centered-{language.value}",
                parent=base,
                fontName=self.font_name,
                fontSize=11,
                alignment=TA_CENTER,
            ),
            "section": ParagraphStyle(
                name=f"SectionTitle-{language.value}",
                parent=self._styles['Heading2'],
                fontName=self.bold_font_name,
                fontSize=14,
                spaceBefore=6,
                spaceAfter=8,
                textColor=HexColor("#4361EE"),
                alignment=align,
            ),
            "body": ParagraphStyle(
                name=f"Body-{language.value}",
                parent=base,
                fontName=self.font_name,
                fontSize=11,
                leading=15,
                spaceAfter=4,
                alignment=align,
            ),
        }

    def _line_markup(self, line: ReportLine) -> str:
        value = escape(line.value)
        if line.label is None:
            return f"<b>{value}</b>" if line.emphasis else value
        if line.label_emphasis:
            return f"<b>{escape(line.label)}</b> {value}"
        return f"{escape(line.label)} {value}"

    def _build(self, result: AnalysisResult, language: Language, moment: datetime) -> bytes:
        styles = self._paragraph_styles(language)
        sections = build_sections(result, language)

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=0.75*inch,
            leftMargin=0.75*inch,
            topMargin=0.75*inch,
            bottomMargin=0.75*inch,
            title=label(language, "title"),
        )

        story: List = []

        # Header
        story.append(Paragraph(escape(label(language, "title")), styles["title"]))
        story.append(Paragraph(escape(label(language, "subtitle")), styles["centered"]))
        story.append(Paragraph(format_display_date(moment, language), styles["centered"]))
        story.append(Spacer(1, 20))

        # Confidence
        confidence = Table(
            [[Paragraph(escape(label(language, "confidence_heading")), styles["centered"])],
             [Paragraph(f"<b>{format_percent(result.overall_confidence)}</b>", styles["centered"])]],
            colWidths=[6.5*inch],
        )
        confidence.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, -1), HexColor("#F8F9FA")),
            ('TOPPADDING', (0, 0), (-1, -1), 8),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
        ]))
        story.append(confidence)
        story.append(Spacer(1, 12))

        # Disclaimer
        disclaimer = Table(
            [[Paragraph(
                f"<b>{escape(label(language, 'disclaimer_heading'))}</b> "
                f"{escape(label(language, 'disclaimer'))}",
                styles["body"]
            )]],
            colWidths=[6.5*inch],
        )
        disclaimer.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, -1), HexColor("#FFF3CD")),
            ('BOX', (0, 0), (-1, -1), 0.75, HexColor("#FFEAA7")),
            ('TOPPADDING', (0, 0), (-1, -1), 10),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 10),
        ]))
        story.append(disclaimer)
        story.append(Spacer(1, 20))

        for section in sections:
            elements = [Paragraph(escape(section.title), styles["section"])]
            for line in section.lines:
                elements.append(Paragraph(self._line_markup(line), styles["body"]))
            story.append(KeepTogether(elements))
            story.append(Spacer(1, 14))

        doc.build(story)
        logger.debug(f"reportlab document built ({language.value}, {len(sections)} sections)")
        return buffer.getvalue()


def create_encoder(settings) -> DocumentEncoder:
    """Pick the encoder named by ``settings.document_encoder``."""
    if settings.document_encoder == "reportlab":
        return ReportLabPdfEncoder(font_path=settings.pdf_font_path)
    return SimulatedPdfEncoder(delay_seconds=settings.simulated_delay_seconds)
