"""
Enrichment infrastructure helpers.

Components:
- normalize_domain: canonical join key from an e-mail or URL-like value
- ProgressReporter: tqdm progress and completion logging for long runs
- write_enriched_csv / export_unmatched_domains: output artifacts on disk
"""

from enrich_hub.infrastructure.enrichment.normalizer import normalize_domain

__all__ = ["normalize_domain"]
