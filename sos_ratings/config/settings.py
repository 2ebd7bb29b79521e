import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # ESPN Endpoints
    core_api_base_url: str = Field(
        "https://sports.core.api.espn.com/v2",
        description="Base URL of the paginated ESPN core API (team listings).",
    )
    site_api_base_url: str = Field(
        "https://site.api.espn.com/apis/site/v2",
        description="Base URL of the ESPN site API (team schedules).",
    )

    # HTTP Configuration
    request_timeout: float = Field(
        30.0, gt=0, description="Per-request timeout in seconds."
    )
    user_agent: str = Field(
        "sos-ratings/0.1 (+https://github.com/sos-ratings)",
        description="User-Agent header sent with every request.",
    )

    # Fetch Settings
    max_concurrency: int = Field(
        8, ge=1, description="Default number of schedule fetches kept in flight."
    )
    page_limit: int = Field(
        1000, ge=1, description="Page size requested from the team listing."
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
