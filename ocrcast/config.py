"""
Configuration management using Pydantic Settings.
Supports environment variables and .env files.
"""

from functools import lru_cache
from typing import List, Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TesseractSettings(BaseSettings):
    """Local Tesseract engine configuration."""

    model_config = SettingsConfigDict(env_prefix="TESSERACT_")

    data_dir: str = "tessdata"
    language: str = "jpn"


class LensSettings(BaseSettings):
    """Remote Google Lens configuration."""

    model_config = SettingsConfigDict(env_prefix="LENS_")

    backend: Literal["protobuf", "web"] = "protobuf"

    # Protobuf endpoint
    endpoint: str = "https://lensfrontend-pa.googleapis.com/v1/crupload"
    content_type: str = "application/x-protobuf"
    api_key_header: str = "X-Goog-Api-Key"
    api_key: str = ""

    # Client context
    language: str = "en"
    region: str = "US"
    time_zone: str = ""
    app_id: str = ""

    # Legacy HTML upload endpoint
    web_upload_url: str = "https://lens.google.com/v3/upload"
    web_response_pattern: str = r">AF_initDataCallback\((\{key: 'ds:1'.*?)\);</script>"

    timeout_seconds: float = 30.0
    max_connections: int = 100


class NormalizationSettings(BaseSettings):
    """Text normalization policy."""

    model_config = SettingsConfigDict(env_prefix="NORMALIZATION_")

    strip_whitespace: bool = True


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 9090
    api_debug: bool = False
    api_cors_origins: List[str] = ["http://localhost:3000"]

    # Processing
    max_image_size_mb: int = 20
    echo_text_in_response: bool = False
    debug_output_path: Optional[str] = Field(
        default=None,
        description="Write the last transformed image here (debugging aid)"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Nested settings
    tesseract: TesseractSettings = Field(default_factory=TesseractSettings)
    lens: LensSettings = Field(default_factory=LensSettings)
    normalization: NormalizationSettings = Field(default_factory=NormalizationSettings)

    @field_validator("api_cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v

    @property
    def max_image_size_bytes(self) -> int:
        return self.max_image_size_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
