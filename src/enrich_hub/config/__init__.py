"""Configuration management for EnrichHub.

This module provides centralized configuration loaded from environment variables
with validation using Pydantic BaseSettings.

Usage:
    >>> from enrich_hub.config import get_settings
    >>> settings = get_settings()
    >>> settings.row_ceiling
    25000
"""

from enrich_hub.config.blocklist_loader import (
    DEFAULT_BLOCKED_DOMAINS,
    BlocklistConfigError,
    load_blocked_domains,
)
from enrich_hub.config.settings import (
    MAX_ENRICHMENT_ROWS,
    Settings,
    describe_row_limit,
    get_settings,
)

__all__ = [
    "BlocklistConfigError",
    "DEFAULT_BLOCKED_DOMAINS",
    "MAX_ENRICHMENT_ROWS",
    "Settings",
    "describe_row_limit",
    "get_settings",
    "load_blocked_domains",
]
