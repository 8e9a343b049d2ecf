"""
Poultry Diagnosis Report API - FastAPI Application

Endpoints for:
- Report document generation and one-time download
- QR codes linking to a report download
- Printable HTML view
- Service health
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request, BackgroundTasks
from fastapi.responses import HTMLResponse, Response, StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
from datetime import datetime
from urllib.parse import quote
import io
import socket

import qrcode

# Load environment variables before settings are read
load_dotenv()

from poultry_report import __version__
from poultry_report.config import settings
from poultry_report.core.analysis import AnalysisResult, Language
from poultry_report.core.reports import ArtifactStore, ReportRenderer, LocalHost, create_encoder
from poultry_report.core.reports.host import PRINT_ON_LOAD_SCRIPT
from poultry_report.models import ReportRequest, ReportResponse, HealthResponse
from poultry_report.utils import (
    get_logger,
    setup_logging,
    ReportError,
    ConflictError,
    InvalidAnalysisError,
    UnsupportedLanguageError,
    MissingLocalizationError,
    ArtifactNotFoundError,
)

setup_logging(settings.log_level, settings.log_file)
logger = get_logger(__name__)


# ---- Renderer Singleton ----
_host = LocalHost(
    output_dir=settings.output_dir,
    store=ArtifactStore(ttl_seconds=settings.artifact_ttl_seconds),
)
_renderer = ReportRenderer(
    encoder=create_encoder(settings),
    host=_host,
    revoke_delay=settings.revoke_delay_seconds,
)
START_TIME = datetime.now()


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.renderer = _renderer
    logger.info(f"API ready (encoder: {_renderer.encoder.name}, default language: {settings.default_language})")
    yield
    logger.info(f"Poultry Diagnosis Report API shut down, {len(_host.store)} unclaimed report(s) dropped")


app = FastAPI(
    title="Poultry Diagnosis Report API",
    description="Bilingual (Arabic/English) diagnosis report rendering",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---- Utility Functions ----

def _parse_request(request: ReportRequest):
    """Convert request payload to (AnalysisResult, Language) or raise 400."""
    try:
        language = Language.parse(request.language, default=Language(settings.default_language))
        result = AnalysisResult.from_dict(request.analysis)
    except (InvalidAnalysisError, UnsupportedLanguageError) as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    return result, language


def _content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and the UTF-8 filename."""
    fallback = filename.encode("ascii", "ignore").decode("ascii").strip("-") or "report.pdf"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def _get_local_ip():
    """Get the local IP address of the server on the network."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            # Doesn't need to be reachable
            s.connect(("8.8.8.8", 80))
            return s.getsockname()[0]
    except OSError:
        return "127.0.0.1"


def _download_url(report_id: str, request: Request) -> str:
    path = f"/api/v1/reports/{report_id}/download"
    if settings.public_base_url:
        return settings.public_base_url.rstrip("/") + path

    host_header = request.headers.get("host", "")
    if host_header and not host_header.startswith(("localhost", "127.0.0.1")):
        return f"http://{host_header}{path}"
    return f"http://{_get_local_ip()}:8000{path}"


# ---- API Endpoints ----

@app.get("/", response_model=HealthResponse, tags=["Health"])
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health():
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
        encoder=_renderer.encoder.name,
        generating=_renderer.is_generating,
    )


@app.post("/api/v1/reports/generate", response_model=ReportResponse, tags=["Reports"])
async def generate_report(payload: ReportRequest, request: Request):
    """
    Generate a report document.

    Only one generation runs at a time; an overlapping request gets 409.
    """
    result, language = _parse_request(payload)

    try:
        artifact = await _renderer.generate_report(result, language)
    except ConflictError as e:
        logger.warning("Rejected report request: generation already in progress")
        raise HTTPException(status_code=409, detail=e.to_dict())
    except MissingLocalizationError as e:
        logger.warning(f"Report request missing localized text: {e}")
        raise HTTPException(status_code=422, detail=e.to_dict())
    except ReportError as e:
        logger.error(f"Report generation failed: {e}")
        raise HTTPException(status_code=500, detail=e.to_dict())

    return ReportResponse(
        report_id=artifact.locator,
        filename=artifact.filename,
        media_type=artifact.media_type,
        size_bytes=artifact.size_bytes,
        download_url=_download_url(artifact.locator, request),
        generated_at=artifact.generated_at.isoformat(),
    )


@app.get("/api/v1/reports/{report_id}/download", tags=["Reports"])
async def download_report(report_id: str, background_tasks: BackgroundTasks):
    """
    Download a generated report once; the handle is released after sending.
    """
    try:
        artifact = _host.store.resolve(report_id)
    except ArtifactNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.to_dict())

    background_tasks.add_task(_host.revoke_handle, report_id)
    logger.info(f"Report download served: {artifact.filename}", extra={"report_id": report_id})

    return Response(
        content=artifact.payload,
        media_type=artifact.media_type,
        headers={"Content-Disposition": _content_disposition(artifact.filename or f"{report_id.split(':')[-1]}.pdf")},
    )


@app.get("/api/v1/reports/{report_id}/qr", tags=["Reports"])
async def get_report_qr(report_id: str, request: Request):
    """
    QR code linking to the report download, so a phone on the same network
    can fetch the document.
    """
    if report_id not in _host.store:
        raise HTTPException(status_code=404, detail="Report not found")

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(_download_url(report_id, request))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    img_byte_arr = io.BytesIO()
    img.save(img_byte_arr, format='PNG')
    img_byte_arr.seek(0)

    return StreamingResponse(img_byte_arr, media_type="image/png")


@app.post("/api/v1/reports/print", response_class=HTMLResponse, tags=["Reports"])
async def print_report(payload: ReportRequest):
    """
    Printable HTML page; the browser opens its print dialog once loaded.
    """
    result, language = _parse_request(payload)

    try:
        html = _renderer.render_printable_document(result, language)
    except MissingLocalizationError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())

    return HTMLResponse(html.replace("</body>", f"{PRINT_ON_LOAD_SCRIPT}\n</body>", 1))


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
