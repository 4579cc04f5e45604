"""
Company enrichment service layer with pure transformation functions.

This module provides the core business logic of the enrichment join:
building the domain index from the reference collection and enriching one
source row at a time. Every function here is pure with respect to its inputs;
the index is read-only once built, so rows can be enriched in any order or in
parallel.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from enrich_hub.infrastructure.enrichment.normalizer import normalize_domain

from .exceptions import InternalFailure
from .models import (
    CONFIDENCE_SCORE_COLUMN,
    CONTACT_FIELDS,
    MATCHED_DOMAIN_COLUMN,
    PRODUCT_TYPES_COLUMN,
    SUMMARY_FIELD_ALIASES,
    CompanyRecord,
    CompanySummary,
    EnrichedRow,
    SourceRow,
    product_column,
)
from .observability import EnrichmentStats

logger = logging.getLogger(__name__)

# Collision policy for reference records sharing a canonical domain
DUPLICATE_DOMAIN_POLICY = "last_write_wins"


@dataclass(frozen=True)
class DomainIndex:
    """
    Read-only mapping from canonical domain to exactly one CompanyRecord.

    Attributes:
        companies: canonical domain -> record
        skipped: Records without a usable domain
        overwritten: Records replaced by a later record with the same domain
    """

    companies: Dict[str, CompanyRecord]
    skipped: int = 0
    overwritten: int = 0

    def get(self, domain: Optional[str]) -> Optional[CompanyRecord]:
        if domain is None:
            return None
        return self.companies.get(domain)

    def __contains__(self, domain: object) -> bool:
        return domain in self.companies

    def __len__(self) -> int:
        return len(self.companies)


def build_domain_index(records: Iterable[CompanyRecord]) -> DomainIndex:
    """
    Build the domain index used for row matching.

    Each record's domain goes through the same normalizer as the source
    cells. When two records share a canonical domain, the later one replaces
    the earlier one (DUPLICATE_DOMAIN_POLICY).

    Args:
        records: Reference collection in insertion order

    Returns:
        DomainIndex with O(1) lookup

    Example:
        >>> index = build_domain_index([
        ...     CompanyRecord(domain="https://www.Acme.com/", name="Acme old"),
        ...     CompanyRecord(domain="acme.com", name="Acme new"),
        ... ])
        >>> index.get("acme.com").name
        'Acme new'
        >>> index.overwritten
        1
    """
    companies: Dict[str, CompanyRecord] = {}
    skipped = 0
    overwritten = 0

    for record in records:
        domain = normalize_domain(record.domain) if record.domain else None
        if domain is None:
            skipped += 1
            continue
        if domain in companies:
            overwritten += 1
            logger.debug(
                "Duplicate reference domain, later record wins",
                extra={"domain": domain, "policy": DUPLICATE_DOMAIN_POLICY},
            )
        companies[domain] = record

    if overwritten:
        logger.info(
            "Reference collection contained duplicate domains",
            extra={"overwritten": overwritten, "policy": DUPLICATE_DOMAIN_POLICY},
        )

    return DomainIndex(companies=companies, skipped=skipped, overwritten=overwritten)


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def resolve_alias(summary: CompanySummary, candidates: Sequence[str]) -> Optional[str]:
    """
    Return the first present value among ``candidates`` (first-present-wins).

    Example:
        >>> s = CompanySummary(company_summary="", profile_summary="Jewelry maker")
        >>> resolve_alias(s, ("company_summary", "profile_summary"))
        'Jewelry maker'
    """
    for key in candidates:
        value = summary.lookup(key)
        if _is_present(value):
            return value if isinstance(value, str) else str(value)
    return None


def format_confidence_score(score: Any) -> str:
    """Render a confidence score as text; integral floats drop the ``.0``."""
    if isinstance(score, float) and score.is_integer():
        return str(int(score))
    return str(score)


def clean_product_types(product_types: Sequence[Any]) -> List[str]:
    """Keep the non-empty string items of ``product_types`` in order."""
    return [pt for pt in product_types if isinstance(pt, str) and pt]


def format_product_phrase(products: Sequence[str]) -> str:
    """
    Join product names into an English list phrase.

    Examples:
        >>> format_product_phrase(["rings"])
        'rings'
        >>> format_product_phrase(["rings", "necklaces"])
        'rings and necklaces'
        >>> format_product_phrase(["rings", "necklaces", "bracelets"])
        'rings, necklaces, and bracelets'
    """
    if not products:
        return ""
    if len(products) == 1:
        return products[0]
    if len(products) == 2:
        return f"{products[0]} and {products[1]}"
    return f"{', '.join(products[:-1])}, and {products[-1]}"


def _summary_values(summary: CompanySummary) -> Tuple[Dict[str, str], int]:
    values: Dict[str, str] = {}

    for column, candidates in SUMMARY_FIELD_ALIASES:
        resolved = resolve_alias(summary, candidates)
        if resolved is not None:
            values[column] = resolved

    if summary.confidence_score is not None:
        values[CONFIDENCE_SCORE_COLUMN] = format_confidence_score(
            summary.confidence_score
        )

    products = clean_product_types(summary.product_types)
    if products:
        values[PRODUCT_TYPES_COLUMN] = format_product_phrase(products)
        for position, product in enumerate(products, start=1):
            values[product_column(position)] = product

    return values, len(products)


def enrich_row(
    row: SourceRow,
    source_column: str,
    index: DomainIndex,
    row_index: int = 0,
) -> EnrichedRow:
    """
    Enrich one source row from the domain index.

    The source cell is normalized to a domain and looked up. On a match the
    company's summary fields, product columns and contact fields are merged
    into a copy of the row; enrichment values overwrite a same-named source
    column rather than being dropped. ``Matched Domain`` is always written:
    the canonical domain on a match, an empty string otherwise.

    Args:
        row: Source row (column -> text); left untouched
        source_column: Column holding the e-mail or URL to match on
        index: Prebuilt domain index
        row_index: 0-based position of the row, carried into the result

    Returns:
        EnrichedRow with all original fields plus enrichment fields
    """
    value = row.get(source_column) or ""
    domain = normalize_domain(value)
    values: Dict[str, str] = dict(row)

    company = index.get(domain)
    if company is None:
        values[MATCHED_DOMAIN_COLUMN] = ""
        return EnrichedRow(
            row_index=row_index,
            values=values,
            matched=False,
            matched_domain="",
            domain=domain,
        )

    product_count = 0
    if company.summary is not None:
        summary_values, product_count = _summary_values(company.summary)
        values.update(summary_values)

    for column, attribute in CONTACT_FIELDS:
        contact = getattr(company, attribute)
        if _is_present(contact):
            values[column] = contact

    values[MATCHED_DOMAIN_COLUMN] = domain

    return EnrichedRow(
        row_index=row_index,
        values=values,
        matched=True,
        matched_domain=domain,
        product_count=product_count,
        domain=domain,
    )


def enrich_batch(
    rows: Sequence[SourceRow],
    source_column: str,
    index: DomainIndex,
    start_index: int = 0,
) -> Tuple[List[EnrichedRow], EnrichmentStats]:
    """
    Enrich a contiguous slice of rows and count the outcomes locally.

    Args:
        rows: Slice of the source table
        source_column: Join column
        index: Prebuilt domain index
        start_index: Position of ``rows[0]`` in the full table

    Returns:
        Tuple of (enriched rows in slice order, stats for this slice only)

    Raises:
        InternalFailure: If any row cannot be enriched; carries its row index
    """
    stats = EnrichmentStats()
    enriched: List[EnrichedRow] = []

    for offset, row in enumerate(rows):
        row_index = start_index + offset
        try:
            result = enrich_row(row, source_column, index, row_index=row_index)
        except Exception as e:
            raise InternalFailure(
                f"Failed to enrich row: {type(e).__name__}: {e}", row_index=row_index
            ) from e
        if result.matched:
            company = index.get(result.matched_domain)
            stats.record_match(
                has_summary=company is not None and company.summary is not None,
                product_count=result.product_count,
            )
        else:
            stats.record_miss(result.domain)
        enriched.append(result)

    return enriched, stats
