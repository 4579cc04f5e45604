"""
EnrichHub - Bulk CSV company enrichment.

Matches the rows of an arbitrary uploaded table against a reference set of
company records by domain and merges company attributes into each row,
producing a schema-stable output table.
"""

__version__ = "0.1.0"
