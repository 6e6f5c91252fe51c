"""
Verity Configuration Module
===========================
Centralized configuration management using Pydantic Settings.
All environment variables are validated and typed.
"""

from functools import lru_cache
from types import MappingProxyType

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Uses Pydantic v2 settings management for type safety and validation.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # === OCR Configuration ===
    tesseract_path: str = Field(
        default="tesseract",
        description="Path to Tesseract OCR binary"
    )
    ocr_confidence_threshold: float = Field(
        default=40.0,
        description="Minimum acceptable OCR confidence (0-100)"
    )
    ocr_dpi: int = Field(default=200, description="Rasterization DPI for scanned pages")
    ocr_denoise: bool = Field(default=True, description="Apply denoising before OCR")
    ocr_timeout_seconds: float = Field(
        default=120.0,
        description="Overall time budget for rasterization + recognition"
    )

    # === Extraction Configuration ===
    extraction_timeout_seconds: float = Field(
        default=30.0,
        description="Time budget for parsing a document container"
    )
    min_direct_words: int = Field(
        default=50,
        description="Direct extraction below this word count escalates to OCR"
    )
    min_viable_words: int = Field(
        default=10,
        description="Final word count below this is an unreadable document"
    )

    # === Deviation Templates ===
    default_template: str = Field(
        default="freelance_general",
        description="Fair template used when none (or an unknown one) is requested"
    )

    # === Upload Limits ===
    max_file_size_mb: int = Field(default=50, description="Maximum file size in MB")

    # === Server Configuration ===
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Debug mode")

    # === Logging ===
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("ocr_confidence_threshold")
    @classmethod
    def check_confidence_range(cls, v: float) -> float:
        """Tesseract reports confidence on a 0-100 scale."""
        if not 0 <= v <= 100:
            raise ValueError("ocr_confidence_threshold must be between 0 and 100")
        return v

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are loaded only once.
    """
    settings = Settings()
    return settings


# Risk band definitions (upper bound inclusive)
RISK_LEVELS = MappingProxyType({
    "low": {
        "max": 30,
        "label": "Low Risk",
        "recommendation": (
            "This contract appears generally safe to sign. Review highlighted "
            "items for your own due diligence."
        ),
    },
    "moderate": {
        "max": 50,
        "label": "Moderate Risk",
        "recommendation": (
            "Some concerning terms found. Review carefully and consider "
            "requesting modifications to flagged clauses."
        ),
    },
    "high": {
        "max": 70,
        "label": "High Risk",
        "recommendation": (
            "Multiple risky terms detected. We strongly recommend negotiating "
            "changes before signing."
        ),
    },
    "critical": {
        "max": 100,
        "label": "Critical Risk",
        "recommendation": (
            "This contract contains potentially void clauses and highly unfair "
            "terms. DO NOT sign as-is. Negotiate or walk away."
        ),
    },
})

# Marker placed between per-page OCR texts
PAGE_BREAK_MARKER = "\n\n--- Page Break ---\n\n"
