"""
Unique domain extraction from an uploaded URL column.

Used to turn a raw export (CRM dump, scraped list) into a de-duplicated list
of company domains before qualification. Social-network and messaging hosts
are dropped because they never identify a company.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from enrich_hub.config.blocklist_loader import DEFAULT_BLOCKED_DOMAINS
from enrich_hub.infrastructure.enrichment.normalizer import normalize_domain
from enrich_hub.utils.logging import get_logger

from .models import SourceRow

logger = get_logger(__name__)

DOMAIN_COLUMN = "Domain"


@dataclass
class DomainExtractionResult:
    """
    Outcome of unique-domain extraction.

    Attributes:
        domains: Unique domains, sorted
        total: Rows inspected
        invalid: Rows whose domain is blocked
        empty: Rows with no value, no dot, or no parseable host
    """

    domains: List[str] = field(default_factory=list)
    total: int = 0
    invalid: int = 0
    empty: int = 0

    @property
    def unique(self) -> int:
        return len(self.domains)

    def to_table(self) -> Tuple[List[str], List[Dict[str, str]]]:
        """Single-column table (``Domain``) ready for the CSV encoder."""
        return [DOMAIN_COLUMN], [{DOMAIN_COLUMN: domain} for domain in self.domains]

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "unique": self.unique,
            "invalid": self.invalid,
            "empty": self.empty,
        }


def is_blocked(domain: str, blocked_domains: Iterable[str]) -> bool:
    """
    True when ``domain`` is a blocked domain or one of its subdomains.

    Examples:
        >>> is_blocked("uk.linkedin.com", ["linkedin.com"])
        True
        >>> is_blocked("box.com", ["x.com"])
        False
    """
    return any(domain == b or domain.endswith("." + b) for b in blocked_domains)


def extract_unique_domains(
    rows: Sequence[SourceRow],
    column: str,
    blocked_domains: Optional[Iterable[str]] = None,
) -> DomainExtractionResult:
    """
    Collect the unique, non-blocked domains found in ``column``.

    Args:
        rows: Decoded table rows
        column: Column holding URLs (e-mail addresses are accepted too)
        blocked_domains: Domains to exclude; defaults to DEFAULT_BLOCKED_DOMAINS

    Returns:
        DomainExtractionResult with sorted domains and per-category counters
    """
    blocked = [
        b.lower()
        for b in (DEFAULT_BLOCKED_DOMAINS if blocked_domains is None else blocked_domains)
    ]
    result = DomainExtractionResult()
    unique = set()

    for row in rows:
        result.total += 1
        value = (row.get(column) or "").strip()

        if not value or "." not in value:
            result.empty += 1
            continue

        domain = normalize_domain(value)
        if domain is None:
            result.empty += 1
            continue

        if is_blocked(domain, blocked):
            result.invalid += 1
            continue

        unique.add(domain)

    result.domains = sorted(unique)

    logger.info("domain_extraction.completed", column=column, **result.to_dict())
    return result
