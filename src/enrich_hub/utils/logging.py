"""Structured logging for EnrichHub using structlog.

Run-level events go through ``get_logger(__name__)``; plain stdlib loggers
used by the I/O helpers share the same handlers. structlog events are
rendered as JSON lines with:
- ISO-8601 timestamps
- logger name and level
- redaction of sensitive fields (API keys, tokens, passwords, secrets)
- stdout output plus an optional daily-rotated log file

Configuration:
- LOG_LEVEL: taken from Settings (falls back to the LOG_LEVEL env var)
- ENRICH_LOG_TO_FILE: enable file logging (1, true, yes). Default: disabled
- ENRICH_LOG_FILE_DIR: directory for log files. Default: logs/

Usage:
    >>> from enrich_hub.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("enrichment_run.started", total_rows=1200, source_column="Email")
"""

import logging
import os
import re
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional

import structlog
from structlog.types import EventDict, Processor

from enrich_hub.config import get_settings

SENSITIVE_PATTERNS = [
    re.compile(r".*password.*", re.IGNORECASE),
    re.compile(r".*token.*", re.IGNORECASE),
    re.compile(r".*api_?key.*", re.IGNORECASE),
    re.compile(r".*secret.*", re.IGNORECASE),
]

REDACTED_VALUE = "[REDACTED]"

_configured = False


def _is_sensitive(key: str) -> bool:
    return any(pattern.match(key) for pattern in SENSITIVE_PATTERNS)


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Redact sensitive values from a dictionary before logging.

    Nested dictionaries are sanitized recursively.

    Example:
        >>> sanitize_for_logging({"api_key": "abc123", "host": "example.p.rapidapi.com"})
        {'api_key': '[REDACTED]', 'host': 'example.p.rapidapi.com'}
    """
    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if _is_sensitive(key):
            sanitized[key] = REDACTED_VALUE
        elif isinstance(value, dict):
            sanitized[key] = sanitize_for_logging(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    """Structlog processor that redacts sensitive keys in the event dict."""
    return sanitize_for_logging(dict(event_dict))


def _get_log_level() -> int:
    try:
        level_name = get_settings().LOG_LEVEL.upper()
    except Exception:
        # Invalid ENRICH_* values must not prevent logging from starting
        level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _should_log_to_file() -> bool:
    return os.getenv("ENRICH_LOG_TO_FILE", "").lower() in ("1", "true", "yes")


def _get_log_file_path() -> Path:
    log_dir = Path(os.getenv("ENRICH_LOG_FILE_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"enrich-hub-{datetime.now().strftime('%Y%m%d')}.log"


def configure_logging() -> None:
    """Configure stdlib handlers and the structlog processor chain once."""
    global _configured
    if _configured:
        return

    level = _get_log_level()
    root = logging.getLogger()
    root.setLevel(level)

    stdout_handler = logging.StreamHandler()
    stdout_handler.setLevel(level)
    stdout_handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(stdout_handler)

    if _should_log_to_file():
        file_handler = TimedRotatingFileHandler(
            filename=str(_get_log_file_path()),
            when="midnight",
            interval=1,
            backupCount=30,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(file_handler)

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


configure_logging()


def get_logger(name: str) -> Any:
    """Get a structlog BoundLogger for ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)


def bind_context(logger_name: Optional[str] = None, **kwargs: Any) -> Any:
    """Create a logger with bound context fields.

    Pass ``logger_name`` (usually ``__name__``) so events carry the calling
    module as their ``logger`` field.

    Example:
        >>> logger = bind_context(__name__, run_id="run_1a2b", source_column="Website")
        >>> logger.info("enrichment_run.batch_done", processed=1000)
    """
    logger = structlog.get_logger(logger_name) if logger_name else structlog.get_logger()
    return logger.bind(**kwargs)
