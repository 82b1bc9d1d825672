"""
HTML to PDF API Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

SERVICE_NAME = "HTML to PDF API"


class ApiSettings(BaseSettings):
    """
    API service configuration with validation.

    All settings can be overridden via environment variables
    (or a local .env file).
    """

    model_config = SettingsConfigDict(
        env_prefix="",  # No prefix, use exact env var names
        env_file=".env",
        case_sensitive=False,  # PORT = port
        extra="ignore",
    )

    # === Server ===
    host: str = Field(default="0.0.0.0", description="Interface to bind the API server to")
    port: int = Field(default=3000, ge=1, le=65535, description="API server port")
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    # === Uploads ===
    upload_dir: Path = Field(default=Path("uploads"), description="Temp directory for uploaded HTML files")
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1,
        description="Maximum accepted upload size in bytes (10MB)"
    )

    # === Rendering ===
    max_concurrent_renders: int = Field(
        default=0,
        ge=0,
        le=100,
        description="Maximum simultaneous browser renders (0 = unbounded)"
    )
    playwright_headless: bool = Field(default=True, description="Launch Chromium headless")

    # === CORS ===
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return v_upper

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration is suitable for production.

        Returns list of warning messages.
        """
        issues = []

        if self.is_production:
            if "*" in self.cors_origins_list:
                issues.append("WARNING: CORS_ORIGINS allows any origin in production")
            if self.max_concurrent_renders == 0:
                issues.append("WARNING: MAX_CONCURRENT_RENDERS is unbounded; each render launches a browser")

        return issues


@lru_cache()
def get_settings() -> ApiSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for performance.
    """
    return ApiSettings()


def validate_config_on_startup(settings: ApiSettings) -> None:
    """
    Log the loaded configuration and any production warnings.
    """
    for issue in settings.validate_production_config():
        logger.warning(issue)

    logger.info(f"Configuration loaded: environment={settings.environment}")
    logger.info(f"  port={settings.port}")
    logger.info(f"  upload_dir={settings.upload_dir}")
    logger.info(f"  max_upload_bytes={settings.max_upload_bytes}")
    logger.info(f"  max_concurrent_renders={settings.max_concurrent_renders or 'unbounded'}")
    logger.info(f"  playwright_headless={settings.playwright_headless}")
