"""Command-line interface for EnrichHub."""
