"""
Service configuration loaded from the environment and the project ``.env``.
"""
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="POULTRY_REPORT_",
        env_file=".env",
        extra="ignore",
    )

    default_language: Literal["ar", "en"] = "ar"

    # Document encoding
    document_encoder: Literal["simulated", "reportlab"] = "simulated"
    simulated_delay_seconds: float = Field(2.0, ge=0)
    pdf_font_path: Optional[str] = None  # TTF with Arabic glyphs for reportlab

    # Host environment
    output_dir: str = "reports"
    revoke_delay_seconds: float = Field(0.1, ge=0)
    artifact_ttl_seconds: Optional[float] = Field(600.0, gt=0)  # unclaimed reports are dropped after this
    public_base_url: Optional[str] = None  # e.g. http://192.168.1.5:8000

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


settings = Settings()
