"""
Configuration module for the Fresco API proxy.

This module uses Pydantic Settings to load and validate environment variables
for the upstream Fresco API, client credentials, session handling and CORS.

Settings are loaded once at startup (see ``get_settings``) and are frozen
afterwards, so every component can share the same instance safely.

Environment variables are loaded from .env file or system environment.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Holds the upstream API location, the client credentials used for
    Basic authentication, and the web server settings the proxy runs with.
    """

    # =========================================================================
    # Upstream API Configuration
    # =========================================================================

    API_URL: str = Field(
        ...,
        description="Fresco API base URL (e.g., https://api.fresconews.com)",
        min_length=1,
    )

    API_VERSION: str = Field(
        default="v2",
        description="API version prefix appended to API_URL (e.g., v2)",
        min_length=1,
    )

    API_CLIENT_ID: str = Field(
        ...,
        description="Client identifier used for Basic authentication",
        min_length=1,
    )

    API_CLIENT_SECRET: str = Field(
        ...,
        description="Client secret used for Basic authentication",
        min_length=1,
    )

    API_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Timeout applied to every upstream request",
        gt=0,
        le=300,
    )

    API_TOKEN_PATH: str = Field(
        default="/auth/token",
        description="Path (under the versioned base URL) used to refresh bearer tokens",
    )

    DEV: bool = Field(
        default=False,
        description="Development mode, enables per-request diagnostic logging",
    )

    # =========================================================================
    # Web Server Configuration
    # =========================================================================

    SESSION_SECRET: str = Field(
        ...,
        description="Secret key for signing session cookies (must be cryptographically secure)",
        min_length=32,
    )

    SESSION_COOKIE: str = Field(
        default="session",
        description="Name of the session cookie",
    )

    SESSION_HTTPS_ONLY: bool = Field(
        default=True,
        description="Only send the session cookie over https",
    )

    PROXY_PREFIX: str = Field(
        default="/api",
        description="Path prefix the proxy router is mounted under",
    )

    ALLOWED_ORIGINS: Optional[str] = Field(
        None,
        description="Comma-separated list of allowed CORS origins (leave empty for no CORS)",
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # =========================================================================
    # Pydantic Settings Configuration
    # =========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def api_base_url(self) -> str:
        """
        Versioned base URL every proxied path is appended to.

        Returns:
            ``API_URL/API_VERSION`` without trailing slash.
        """
        return f"{self.API_URL}/{self.API_VERSION}"

    @property
    def allowed_origins_list(self) -> List[str]:
        """
        Parse and return ALLOWED_ORIGINS as a list.

        Returns:
            List of allowed origin URLs, or empty list if not configured.
        """
        if not self.ALLOWED_ORIGINS:
            return []

        return [
            origin.strip()
            for origin in self.ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("API_URL")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """
        Validate that API_URL is an http(s) URL and drop trailing slashes.

        Raises:
            ValueError: If the URL scheme is not http or https
        """
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid API_URL: '{v}'. Expected an http:// or https:// URL"
            )
        return v.rstrip("/")

    @field_validator("API_VERSION")
    @classmethod
    def validate_api_version(cls, v: str) -> str:
        v = v.strip().strip("/")
        if not v:
            raise ValueError("API_VERSION cannot be empty")
        return v

    @field_validator("API_TOKEN_PATH", "PROXY_PREFIX")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Normalize paths to a leading slash and no trailing slash."""
        v = v.strip().strip("/")
        return f"/{v}" if v else ""

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate LOG_LEVEL is a standard logging level name.

        Raises:
            ValueError: If the level is unknown
        """
        level = v.strip().upper()
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

        if level not in allowed_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {allowed_levels}, got: {v}"
            )

        return level


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    This function is cached so that the settings are loaded only once
    during the application lifecycle.

    Returns:
        Settings instance with all configuration loaded and validated.

    Raises:
        ValidationError: If required environment variables are missing
                        or invalid.
    """
    return Settings()


# =============================================================================
# Configuration Helpers
# =============================================================================

def validate_configuration(settings: Settings) -> dict:
    """
    Validate critical configuration settings and return a status report.

    Called during application startup; errors are logged but do not stop
    the service since pydantic has already rejected malformed values.

    Returns:
        Dictionary with validation status and any warnings.
    """
    errors = []
    warnings = []

    if settings.API_CLIENT_ID == settings.API_CLIENT_SECRET:
        errors.append("API_CLIENT_ID and API_CLIENT_SECRET must differ")

    if settings.DEV:
        warnings.append("DEV is enabled, request diagnostics (including Authorization) will be logged")

    if settings.API_URL.startswith("http://") and not settings.DEV:
        warnings.append("API_URL is not using https outside development")

    if "localhost" in settings.API_URL or "127.0.0.1" in settings.API_URL:
        warnings.append("API_URL points to localhost (may cause issues in containers)")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "api_base_url": settings.api_base_url,
    }


def log_configuration_report(settings: Settings, logger: logging.Logger) -> None:
    """Log the outcome of ``validate_configuration``."""
    report = validate_configuration(settings)

    for error in report["errors"]:
        logger.error(f"Configuration error: {error}")

    for warning in report["warnings"]:
        logger.warning(f"Configuration warning: {warning}")
