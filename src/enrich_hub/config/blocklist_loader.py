"""
YAML loader for the blocked-domain list used by unique-domain extraction.

Social networks and messaging platforms show up in uploaded URL columns far
more often than company websites do, and they never identify a company.
Domains listed here are counted as invalid instead of being extracted.

File format::

    blocked_domains:
      - x.com
      - linkedin.com

Behavior:
- Missing file: built-in DEFAULT_BLOCKED_DOMAINS, logged at debug level
- Empty file or empty list: no domains blocked
- Invalid YAML or wrong shape: BlocklistConfigError
"""

import os
from pathlib import Path
from typing import List, Optional

import structlog
import yaml

logger = structlog.get_logger(__name__)

DEFAULT_BLOCKED_DOMAINS: List[str] = [
    "x.com",
    "twitter.com",
    "linkedin.com",
    "whatsapp.com",
    "facebook.com",
    "fb.com",
    "tiktok.com",
    "youtube.com",
    "snapchat.com",
    "discord.com",
    "telegram.org",
    "slack.com",
    "reddit.com",
    "pinterest.com",
]

# Environment variable for a custom blocklist path
BLOCKLIST_PATH_ENV_VAR = "ENRICH_BLOCKED_DOMAINS_CONFIG"


class BlocklistConfigError(Exception):
    """Raised when the blocked-domain YAML file cannot be parsed."""

    pass


def _resolve_path(path: Optional[str]) -> Optional[Path]:
    if path:
        return Path(path)
    env_path = os.environ.get(BLOCKLIST_PATH_ENV_VAR)
    if env_path:
        return Path(env_path)
    return None


def load_blocked_domains(path: Optional[str] = None) -> List[str]:
    """
    Load the blocked-domain list.

    Args:
        path: YAML file to read. Falls back to ENRICH_BLOCKED_DOMAINS_CONFIG,
            then to the built-in defaults.

    Returns:
        Lower-cased, de-duplicated domains in file order.

    Raises:
        BlocklistConfigError: If YAML syntax or structure is invalid.
    """
    file_path = _resolve_path(path)
    if file_path is None or not file_path.exists():
        logger.debug(
            "blocklist_loader.file_not_found",
            file_path=str(file_path) if file_path else None,
            fallback_count=len(DEFAULT_BLOCKED_DOMAINS),
        )
        return list(DEFAULT_BLOCKED_DOMAINS)

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise BlocklistConfigError(
            f"Invalid YAML in blocklist file {file_path}: {e}"
        ) from e

    if data is None:
        return []
    if not isinstance(data, dict):
        raise BlocklistConfigError(
            f"Blocklist file {file_path} must contain a mapping, got {type(data).__name__}"
        )

    entries = data.get("blocked_domains") or []
    if not isinstance(entries, list):
        raise BlocklistConfigError(
            f"'blocked_domains' in {file_path} must be a list"
        )

    domains: List[str] = []
    for entry in entries:
        domain = str(entry).strip().lower()
        if domain and domain not in domains:
            domains.append(domain)

    logger.info(
        "blocklist_loader.loaded",
        file_path=str(file_path),
        count=len(domains),
    )
    return domains
