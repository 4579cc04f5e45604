"""Outbound HTTP connectors used by upstream collaborators."""

from enrich_hub.io.connectors.key_pool import (
    ApiKeyPool,
    KeyPoolExhaustedError,
    KeyRotatingClient,
)

__all__ = ["ApiKeyPool", "KeyPoolExhaustedError", "KeyRotatingClient"]
