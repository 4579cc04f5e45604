"""
Enrichment statistics for run observability and unmatched-domain review.

Row batches may be enriched on worker threads, so counters are never shared.
Each batch builds its own EnrichmentStats and the run combines them with
``merge``, which is associative and commutative: any reduction order yields
the same totals.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


@dataclass
class EnrichmentStats:
    """
    Counters for one batch or one whole run.

    Attributes:
        total_rows: Rows enriched
        matched: Rows whose domain was found in the index
        unmatched: Rows without a match (includes unparseable and empty values)
        unparseable: Rows whose source value yielded no domain at all
        matched_without_summary: Matches whose company has no summary
        product_columns: Highest PRODUCT<n> index populated by enrichment
        unmatched_domains: Extracted but unknown domain -> occurrence count

    Examples:
        >>> stats = EnrichmentStats(total_rows=4, matched=3, unmatched=1)
        >>> stats.match_rate
        0.75
    """

    total_rows: int = 0
    matched: int = 0
    unmatched: int = 0
    unparseable: int = 0
    matched_without_summary: int = 0
    product_columns: int = 0
    unmatched_domains: Dict[str, int] = field(default_factory=dict)

    @property
    def match_rate(self) -> float:
        """Matched rows as a fraction of all rows (0.0 when empty)."""
        if self.total_rows == 0:
            return 0.0
        return self.matched / self.total_rows

    def record_match(self, has_summary: bool, product_count: int) -> None:
        self.total_rows += 1
        self.matched += 1
        if not has_summary:
            self.matched_without_summary += 1
        self.product_columns = max(self.product_columns, product_count)

    def record_miss(self, domain: Optional[str]) -> None:
        self.total_rows += 1
        self.unmatched += 1
        if domain is None:
            self.unparseable += 1
        else:
            self.unmatched_domains[domain] = self.unmatched_domains.get(domain, 0) + 1

    def merge(self, other: "EnrichmentStats") -> "EnrichmentStats":
        """
        Combine two stats objects into a new one.

        Args:
            other: Stats from another batch

        Returns:
            New EnrichmentStats with summed counters
        """
        merged_domains = self.unmatched_domains.copy()
        for domain, count in other.unmatched_domains.items():
            merged_domains[domain] = merged_domains.get(domain, 0) + count

        return EnrichmentStats(
            total_rows=self.total_rows + other.total_rows,
            matched=self.matched + other.matched,
            unmatched=self.unmatched + other.unmatched,
            unparseable=self.unparseable + other.unparseable,
            matched_without_summary=self.matched_without_summary
            + other.matched_without_summary,
            product_columns=max(self.product_columns, other.product_columns),
            unmatched_domains=merged_domains,
        )

    @classmethod
    def combine(cls, parts: Iterable["EnrichmentStats"]) -> "EnrichmentStats":
        """Reduce any number of stats objects, starting from an empty one."""
        total = cls()
        for part in parts:
            total = total.merge(part)
        return total

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON logging.

        Returns:
            Dictionary with all counters and the computed match rate
        """
        return {
            "total_rows": self.total_rows,
            "matched": self.matched,
            "unmatched": self.unmatched,
            "match_rate": round(self.match_rate, 4),
            "unparseable": self.unparseable,
            "matched_without_summary": self.matched_without_summary,
            "product_columns": self.product_columns,
            "distinct_unmatched_domains": len(self.unmatched_domains),
        }

    def unmatched_domain_records(self) -> List["UnmatchedDomainRecord"]:
        """Unknown domains, most frequent first, ties broken alphabetically."""
        ordered = sorted(self.unmatched_domains.items(), key=lambda kv: (-kv[1], kv[0]))
        return [UnmatchedDomainRecord(domain, count) for domain, count in ordered]


@dataclass
class UnmatchedDomainRecord:
    """
    Domain extracted from the upload that no reference company carries.

    Exported for review: frequent unknown domains are usually companies
    missing from the reference collection.
    """

    domain: str
    occurrence_count: int = 1

    @staticmethod
    def csv_headers() -> List[str]:
        """Return CSV column headers."""
        return ["domain", "occurrence_count"]

    def to_csv_row(self) -> List[str]:
        """Convert to CSV row values."""
        return [self.domain, str(self.occurrence_count)]
