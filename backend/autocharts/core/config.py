"""
Centralized configuration management.

Engine limits and API settings are loaded and validated here.
"""
import os
import logging
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Application settings with validation."""

    # Upload limits
    max_file_size_mb: int = Field(default=50, ge=1, le=1000, description="Maximum upload size in MB")
    max_dataset_rows: int = Field(default=5000, ge=100, le=100000, description="Maximum rows echoed back by /upload")
    max_file_rows: int = Field(default=1000000, ge=1000, description="Maximum rows in an uploaded file")
    max_file_columns: int = Field(default=1000, ge=10, description="Maximum columns in an uploaded file")

    # Rate limiting
    rate_limit_per_minute: int = Field(default=10, ge=1, le=1000, description="Upload rate limit per minute per IP")

    # CORS
    allowed_origins: str = Field(
        default="http://localhost:4200,http://localhost:3000",
        description="Comma-separated list of allowed CORS origins"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Engine
    max_auto_charts: int = Field(default=12, ge=1, le=100, description="Cap on automatically generated charts")
    profile_sample_size: int = Field(
        default=0, ge=0,
        description="Values per column used for type voting (0 = every value)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v.upper()

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def type_sample_size(self) -> Optional[int]:
        """Sample size for the profiler, or None to vote over every value."""
        return self.profile_sample_size or None

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            max_file_size_mb=int(os.getenv("MAX_FILE_SIZE_MB", "50")),
            max_dataset_rows=int(os.getenv("MAX_DATASET_ROWS", "5000")),
            max_file_rows=int(os.getenv("MAX_FILE_ROWS", "1000000")),
            max_file_columns=int(os.getenv("MAX_FILE_COLUMNS", "1000")),
            rate_limit_per_minute=int(os.getenv("RATE_LIMIT_PER_MINUTE", "10")),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "http://localhost:4200,http://localhost:3000"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            max_auto_charts=int(os.getenv("MAX_AUTO_CHARTS", "12")),
            profile_sample_size=int(os.getenv("PROFILE_SAMPLE_SIZE", "0")),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info("Configuration loaded and validated successfully")
    return _settings


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    global _settings
    _settings = None
    return get_settings()
