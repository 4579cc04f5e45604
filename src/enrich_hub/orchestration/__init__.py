"""
EnrichHub orchestration package.

Wires the table codecs, reference collection and domain enrichment logic into
a single enrichment run with size bounds, progress reporting and cancellation.
"""

from enrich_hub.orchestration.run_controller import EnrichmentRunController

__all__ = ["EnrichmentRunController"]
