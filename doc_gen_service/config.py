"""
Doc Gen Service Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings


DEFAULT_TEMPLATE_PATH = str(Path(__file__).parent / "templates")
DEFAULT_API_KEY = "api-key"


class DocGenSettings(BaseSettings):
    """
    Doc gen service configuration with validation.

    All settings can be overridden via environment variables.
    Validation happens at startup to fail fast on misconfiguration.
    """

    # === Environment ===
    environment: str = Field(
        default="local",
        description="Environment: local, development, staging, production"
    )
    log_level: str = Field(default="INFO", description="Root log level")

    # === Security ===
    doc_gen_api_key: str = Field(
        default=DEFAULT_API_KEY,
        min_length=1,
        description="Shared secret expected in the x-api-key header"
    )

    # === Templates ===
    template_path: str = Field(
        default=DEFAULT_TEMPLATE_PATH,
        description="Directory containing the report templates"
    )

    # === Rate limiting ===
    rate_limit_enabled: bool = Field(default=False)
    rate_limit_window_ms: int = Field(
        default=60000,
        ge=1000,
        description="Rate limit window in milliseconds"
    )
    rate_limit_limit: int = Field(
        default=100,
        ge=1,
        description="Requests allowed per client within one window"
    )

    # === Concurrency & timeouts ===
    max_concurrent_reports: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum concurrent report generations (1-50)"
    )
    playwright_headless: bool = Field(default=True)
    playwright_timeout_ms: int = Field(
        default=30000,
        ge=1000,
        description="Per-operation browser timeout in milliseconds"
    )
    generation_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Upper bound on a single report generation"
    )

    # === Page sizing (CSS pixels, 96 per inch) ===
    page_width_px: int = Field(default=816, gt=0)
    page_height_px: int = Field(default=1056, gt=0)
    page_margin_top_px: int = Field(default=48, ge=0)
    page_margin_bottom_px: int = Field(default=48, ge=0)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"local", "development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is understood by the logging module."""
        v_upper = v.upper()
        if v_upper not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return v_upper

    @model_validator(mode="after")
    def validate_page_budget(self) -> "DocGenSettings":
        """Margins must leave room for content."""
        if self.page_margin_top_px + self.page_margin_bottom_px >= self.page_height_px:
            raise ValueError("Page margins leave no room for content")
        return self

    @property
    def is_local(self) -> bool:
        """Check if running on a developer machine."""
        return self.environment == "local"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def page_budget_px(self) -> int:
        """Vertical space available for content on one page."""
        return self.page_height_px - self.page_margin_top_px - self.page_margin_bottom_px

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration is suitable for production.

        Returns list of warning/error messages.
        """
        issues = []

        if self.is_production:
            if self.doc_gen_api_key == DEFAULT_API_KEY:
                issues.append("CRITICAL: DOC_GEN_API_KEY must be changed in production")
            if not self.rate_limit_enabled:
                issues.append("WARNING: rate limiting is disabled")

        return issues

    class Config:
        env_prefix = ""  # No prefix, use exact env var names
        case_sensitive = False  # DOC_GEN_API_KEY = doc_gen_api_key
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> DocGenSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for performance.
    Use this function to access configuration throughout the app.
    """
    return DocGenSettings()


def validate_config_on_startup() -> None:
    """
    Validate configuration at application startup.

    Raises ValueError with details if config is invalid.
    Logs warnings for non-critical issues.
    """
    logger = logging.getLogger(__name__)

    try:
        settings = get_settings()
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    issues = settings.validate_production_config()

    for issue in issues:
        if issue.startswith("CRITICAL"):
            raise ValueError(issue)
        else:
            logger.warning(issue)

    logger.info(f"Configuration loaded: environment={settings.environment}")
    logger.info(f"  max_concurrent_reports={settings.max_concurrent_reports}")
    logger.info(
        f"  page={settings.page_width_px}x{settings.page_height_px}px "
        f"budget={settings.page_budget_px}px"
    )
    logger.info(f"  rate_limit_enabled={settings.rate_limit_enabled}")


# Convenience exports
settings = get_settings()
