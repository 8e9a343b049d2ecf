"""
Unit Tests for Logging and Exception Utilities
"""
import logging

from poultry_report.utils import (
    ConflictError,
    HostUnavailableError,
    MissingLocalizationError,
    ReportError,
    setup_logging,
)
from poultry_report.utils.logging import StructuredFormatter


class TestExceptions:

    def test_hierarchy(self):
        for exc in (ConflictError(), MissingLocalizationError("breed.name", "ar"),
                    HostUnavailableError("blocked", capability="open_surface")):
            assert isinstance(exc, ReportError)

    def test_to_dict(self):
        data = MissingLocalizationError("disease.name", "en").to_dict()
        assert data == {
            "error": "MISSING_LOCALIZATION",
            "message": "No 'en' text for field 'disease.name'",
            "details": {"field": "disease.name", "language": "en"},
        }

    def test_conflict_message(self):
        assert str(ConflictError()) == "Report generation already in progress"


class TestLogging:

    def test_formatter_without_color(self):
        record = logging.LogRecord("poultry_report.test", logging.WARNING, __file__, 1, "popup blocked", None, None)
        line = StructuredFormatter(use_color=False).format(record)

        assert "WARNING" in line
        assert "[poultry_report.test] popup blocked" in line
        assert "\033[" not in line

    def test_formatter_tags_report_id(self):
        record = logging.LogRecord("poultry_report.test", logging.INFO, __file__, 1, "report saved", None, None)
        record.report_id = "blob:abc123"
        line = StructuredFormatter(use_color=False).format(record)

        assert "[poultry_report.test] [report=blob:abc123] report saved" in line

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "report.log"
        setup_logging("DEBUG", str(log_file))
        logging.getLogger("poultry_report.test").info("report saved")

        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "report saved" in log_file.read_text(encoding="utf-8")
        setup_logging("INFO")
