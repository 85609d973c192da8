"""Configuration and settings management."""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator
from pathlib import Path
import shutil

from .error_handler import ConfigurationError

class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"

    # Camera settings
    CAMERA_INDEX: int = 0
    CAMERA_FRAME_WIDTH: int = 1280
    CAMERA_FRAME_HEIGHT: int = 720
    PREVIEW_JPEG_QUALITY: int = 90

    # OCR settings
    TESSERACT_PATH: Optional[str] = None
    OCR_LANGUAGE: str = "eng"
    RECOGNITION_TIMEOUT_S: Optional[float] = None

    @field_validator('TESSERACT_PATH', 'RECOGNITION_TIMEOUT_S', mode='before')
    @classmethod
    def validate_optional(cls, v):
        """Convert empty/whitespace strings to None."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        """Convert empty/whitespace strings to default."""
        if isinstance(v, str) and not v.strip():
            return "INFO"
        return v

    @field_validator('OCR_LANGUAGE', mode='before')
    @classmethod
    def validate_language(cls, v):
        """Convert empty/whitespace strings to default."""
        if isinstance(v, str) and not v.strip():
            return "eng"
        return v

    @field_validator('RECOGNITION_TIMEOUT_S')
    @classmethod
    def validate_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("RECOGNITION_TIMEOUT_S must be positive")
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

# Global settings instance
settings = Settings()

def resolve_tesseract_path() -> str:
    """Get Tesseract path, with fallback to common locations."""
    if settings.TESSERACT_PATH and Path(settings.TESSERACT_PATH).exists():
        return settings.TESSERACT_PATH

    tesseract_path = shutil.which("tesseract")
    if tesseract_path:
        return tesseract_path

    common_paths = [
        "/opt/homebrew/bin/tesseract",  # Apple Silicon Homebrew
        "/usr/local/bin/tesseract",     # Intel Homebrew
        "/usr/bin/tesseract",           # System package
        "C:/Program Files/Tesseract-OCR/tesseract.exe",
    ]

    for path in common_paths:
        if Path(path).exists():
            return path

    raise ConfigurationError(
        "Tesseract not found. Install it (e.g. brew install tesseract / apt install tesseract-ocr) "
        "or set TESSERACT_PATH",
        details={"configured_path": settings.TESSERACT_PATH},
    )
