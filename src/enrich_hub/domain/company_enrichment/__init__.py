"""
Company enrichment domain package.

Matches uploaded table rows to reference company records by canonical domain
and merges company attributes into each row.
"""

from .exceptions import (
    DecodeError,
    EmptyReferenceCollection,
    EnrichmentError,
    InternalFailure,
    NoSourceColumnSelected,
    RowCeilingExceeded,
    RunCancelled,
)
from .models import (
    ENRICHMENT_COLUMNS,
    CompanyRecord,
    CompanySummary,
    EnrichedRow,
    EnrichmentOutcome,
    EnrichmentRun,
    RunStatus,
)
from .observability import EnrichmentStats
from .schema import synthesize_headers
from .service import DomainIndex, build_domain_index, enrich_row

__all__ = [
    "CompanyRecord",
    "CompanySummary",
    "DecodeError",
    "DomainIndex",
    "ENRICHMENT_COLUMNS",
    "EmptyReferenceCollection",
    "EnrichedRow",
    "EnrichmentError",
    "EnrichmentOutcome",
    "EnrichmentRun",
    "EnrichmentStats",
    "InternalFailure",
    "NoSourceColumnSelected",
    "RowCeilingExceeded",
    "RunCancelled",
    "RunStatus",
    "build_domain_index",
    "enrich_row",
    "synthesize_headers",
]
