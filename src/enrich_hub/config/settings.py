"""
Configuration management for EnrichHub.

This module provides environment-based configuration using Pydantic BaseSettings,
so the row ceiling, worker count and output locations can be tuned per
deployment without code changes.

The row ceiling has exactly one authoritative value, ``MAX_ENRICHMENT_ROWS``.
It is the default of ``Settings.row_ceiling`` and the number quoted by
``describe_row_limit()``, so the enforced limit and the limit shown to users
cannot drift apart.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("ENRICH_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE

# Maximum number of data rows a single enrichment run accepts.
MAX_ENRICHMENT_ROWS = 25_000

# Rows between two progress notifications.
DEFAULT_PROGRESS_INTERVAL = 1000


def describe_row_limit(limit: Optional[int] = None) -> str:
    """
    User-facing description of the row ceiling.

    Args:
        limit: Ceiling to describe; defaults to ``MAX_ENRICHMENT_ROWS``

    Returns:
        Sentence quoting the limit, e.g. "Maximum 25,000 rows supported."
    """
    value = MAX_ENRICHMENT_ROWS if limit is None else limit
    return f"Maximum {value:,} rows supported."


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are automatically loaded with the ENRICH_ prefix.
    For example, ENRICH_ROW_CEILING overrides the row_ceiling setting.

    Fields without prefix:
    - LOG_LEVEL: Logging level (uppercase)
    - ENVIRONMENT: Deployment environment (dev, staging, prod)
    """

    ENVIRONMENT: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        validation_alias="ENVIRONMENT",
        description="Deployment environment",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )

    app_name: str = Field(default="EnrichHub", description="Application name")

    # Enrichment run limits
    row_ceiling: int = Field(
        default=MAX_ENRICHMENT_ROWS,
        ge=1,
        description="Maximum number of data rows accepted by one enrichment run",
    )
    progress_interval: int = Field(
        default=DEFAULT_PROGRESS_INTERVAL,
        ge=1,
        description="Rows processed between progress notifications (batch size)",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        description="Worker threads used to enrich row batches (1 = sequential)",
    )

    # Output locations
    output_dir: str = Field(
        default="output/",
        description="Directory for enriched CSV files and unmatched-domain reports",
    )
    blocked_domains_config: str = Field(
        default="config/blocked_domains.yml",
        description="YAML file listing domains excluded from unique-domain extraction",
    )

    # Upstream API key pool (RapidAPI-style providers)
    api_keys: List[str] = Field(
        default_factory=list,
        description="API keys rotated by KeyRotatingClient; JSON list in ENRICH_API_KEYS",
    )
    api_host: str = Field(default="", description="Value of the x-rapidapi-host header")
    api_timeout: int = Field(default=30, ge=1, description="HTTP timeout in seconds")

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Store log level in upper case."""
        return v.strip().upper() or "INFO"

    @field_validator("api_keys", mode="after")
    @classmethod
    def drop_blank_keys(cls, v: List[str]) -> List[str]:
        """Ignore blank entries so a trailing comma does not create an empty key."""
        return [key.strip() for key in v if key and key.strip()]

    model_config = SettingsConfigDict(
        env_prefix="ENRICH_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded once and reused across
    the application lifecycle.

    Returns:
        Settings instance with loaded configuration
    """
    settings = Settings()
    logger.debug(
        "configuration.loaded",
        environment=settings.ENVIRONMENT,
        row_ceiling=settings.row_ceiling,
        max_workers=settings.max_workers,
    )
    return settings
