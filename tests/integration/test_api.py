"""
Integration Tests for the FastAPI Backend

Tests for report endpoints and health checks.
Uses async httpx for ASGI app testing.
"""
import asyncio
from urllib.parse import quote

import httpx
import pytest

from poultry_report import main
from poultry_report.core.reports import ArtifactStore, ReportLabPdfEncoder, SimulatedPdfEncoder
from poultry_report.main import app


@pytest.fixture
async def async_client():
    """Create async test client."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


@pytest.fixture(autouse=True)
def fast_encoder(monkeypatch):
    monkeypatch.setattr(main._renderer, "encoder", SimulatedPdfEncoder(delay_seconds=0))


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    async def test_root_endpoint(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data

    async def test_health_endpoint(self, async_client):
        response = await async_client.get("/health")
        assert response.status_code == 200
        assert response.json()["generating"] is False


class TestGenerateEndpoint:
    """Tests for report generation."""

    async def test_generate_english(self, async_client, analysis_data):
        response = await async_client.post("/api/v1/reports/generate", json={
            "analysis": analysis_data,
            "language": "en",
        })
        assert response.status_code == 200

        data = response.json()
        assert data["report_id"].startswith("blob:")
        assert data["filename"].startswith("diagnosis-report-Newcastle Disease-")
        assert data["filename"].endswith(".pdf")
        assert data["media_type"] == "application/pdf"
        assert data["download_url"].endswith(f"/api/v1/reports/{data['report_id']}/download")

    async def test_generate_defaults_to_arabic(self, async_client, analysis_data):
        response = await async_client.post("/api/v1/reports/generate", json={"analysis": analysis_data})
        assert response.status_code == 200
        assert response.json()["filename"].startswith("تقرير-التشخيص-مرض نيوكاسل-")

    async def test_unsupported_language(self, async_client, analysis_data):
        response = await async_client.post("/api/v1/reports/generate", json={
            "analysis": analysis_data,
            "language": "fr",
        })
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "UNSUPPORTED_LANGUAGE"

    async def test_invalid_analysis(self, async_client, analysis_data):
        del analysis_data["disease"]
        response = await async_client.post("/api/v1/reports/generate", json={"analysis": analysis_data})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "INVALID_ANALYSIS"

    async def test_overlapping_requests_conflict(self, async_client, analysis_data, monkeypatch):
        monkeypatch.setattr(main._renderer, "encoder", SimulatedPdfEncoder(delay_seconds=0.2))
        body = {"analysis": analysis_data, "language": "en"}

        first, second = await asyncio.gather(
            async_client.post("/api/v1/reports/generate", json=body),
            async_client.post("/api/v1/reports/generate", json=body),
        )

        assert sorted([first.status_code, second.status_code]) == [200, 409]
        conflict = first if first.status_code == 409 else second
        assert conflict.json()["detail"]["error"] == "GENERATION_IN_PROGRESS"

        again = await async_client.post("/api/v1/reports/generate", json=body)
        assert again.status_code == 200

    async def test_reportlab_missing_localization(self, async_client, analysis_data, monkeypatch):
        monkeypatch.setattr(main._renderer, "encoder", ReportLabPdfEncoder())
        del analysis_data["treatment"]["dosage"]["en"]

        response = await async_client.post("/api/v1/reports/generate", json={
            "analysis": analysis_data,
            "language": "en",
        })
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error"] == "MISSING_LOCALIZATION"
        assert detail["details"]["field"] == "treatment.dosage"
        assert not main._renderer.is_generating

    async def test_reportlab_arabic(self, async_client, analysis_data, monkeypatch, ttf_font_path):
        monkeypatch.setattr(main._renderer, "encoder", ReportLabPdfEncoder(font_path=ttf_font_path))

        response = await async_client.post("/api/v1/reports/generate", json={
            "analysis": analysis_data,
            "language": "ar",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["filename"].startswith("تقرير-التشخيص-مرض نيوكاسل-")
        assert data["size_bytes"] > 1000


class TestDownloadEndpoint:
    """Tests for one-time download."""

    async def test_download_once(self, async_client, analysis_data):
        generated = (await async_client.post("/api/v1/reports/generate", json={
            "analysis": analysis_data,
            "language": "en",
        })).json()

        response = await async_client.get(f"/api/v1/reports/{generated['report_id']}/download")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
        assert quote(generated["filename"]) in response.headers["content-disposition"]

        second = await async_client.get(f"/api/v1/reports/{generated['report_id']}/download")
        assert second.status_code == 404

    async def test_download_unknown(self, async_client):
        response = await async_client.get("/api/v1/reports/blob:nonexistent/download")
        assert response.status_code == 404

    async def test_unclaimed_report_expires(self, async_client, analysis_data, monkeypatch):
        now = [0.0]
        monkeypatch.setattr(main._host, "store", ArtifactStore(ttl_seconds=60, clock=lambda: now[0]))

        for _ in range(5):
            response = await async_client.post("/api/v1/reports/generate", json={"analysis": analysis_data})
            assert response.status_code == 200
        report_id = response.json()["report_id"]
        assert len(main._host.store) == 5

        now[0] = 61.0
        assert len(main._host.store) == 0
        response = await async_client.get(f"/api/v1/reports/{report_id}/download")
        assert response.status_code == 404


class TestQrEndpoint:

    async def test_qr_png(self, async_client, analysis_data):
        generated = (await async_client.post("/api/v1/reports/generate", json={
            "analysis": analysis_data,
        })).json()

        response = await async_client.get(f"/api/v1/reports/{generated['report_id']}/qr")
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content[:8] == b"\x89PNG\r\n\x1a\n"

    async def test_qr_unknown(self, async_client):
        response = await async_client.get("/api/v1/reports/blob:nonexistent/qr")
        assert response.status_code == 404


class TestPrintEndpoint:

    async def test_print_view_arabic(self, async_client, analysis_data):
        response = await async_client.post("/api/v1/reports/print", json={
            "analysis": analysis_data,
            "language": "ar",
        })
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")

        html = response.text
        assert '<html dir="rtl" lang="ar">' in html
        assert html.count('class="section"') == 4
        assert "window.print()" in html

    async def test_print_missing_localization(self, async_client, analysis_data):
        analysis_data["treatment"]["dosage"] = {"ar": "قطرة واحدة"}
        response = await async_client.post("/api/v1/reports/print", json={
            "analysis": analysis_data,
            "language": "en",
        })
        assert response.status_code == 422
        assert response.json()["detail"]["details"]["field"] == "treatment.dosage"


class TestLocalIp:

    def test_socket_closed_when_offline(self, monkeypatch):
        opened = []

        class OfflineSocket:
            def __init__(self, *args):
                self.closed = False
                opened.append(self)

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                self.closed = True

            def connect(self, address):
                raise OSError("Network is unreachable")

        monkeypatch.setattr(main.socket, "socket", OfflineSocket)

        assert main._get_local_ip() == "127.0.0.1"
        assert len(opened) == 1 and opened[0].closed
