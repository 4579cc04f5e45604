"""
Data models for the company enrichment domain.

This module defines the data contracts for:
1. Reference company records and their qualification summary (pydantic v2)
2. Enriched output rows and the canonical enrichment columns
3. The enrichment run lifecycle (pending -> running -> completed/rejected/failed)
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .observability import EnrichmentStats

logger = logging.getLogger(__name__)

# Type alias for one decoded table row (column name -> cell text)
SourceRow = Mapping[str, str]

# ===== Output columns =====

COMPANY_SUMMARY_COLUMN = "Company Summary"
COMPANY_INDUSTRY_COLUMN = "Company Industry"
SALES_OPENER_COLUMN = "Sales Opener Sentence"
CLASSIFICATION_COLUMN = "Classification"
CONFIDENCE_SCORE_COLUMN = "Confidence Score"
PRODUCT_TYPES_COLUMN = "Product Types"
SALES_ACTION_COLUMN = "Sales Action"
EMAIL_COLUMN = "Email"
PHONE_COLUMN = "Phone"
INSTAGRAM_COLUMN = "Instagram"
MATCHED_DOMAIN_COLUMN = "Matched Domain"

# Prefix of the positionally indexed product columns (PRODUCT1, PRODUCT2, ...)
PRODUCT_COLUMN_PREFIX = "PRODUCT"

ENRICHMENT_COLUMNS: Tuple[str, ...] = (
    COMPANY_SUMMARY_COLUMN,
    COMPANY_INDUSTRY_COLUMN,
    SALES_OPENER_COLUMN,
    CLASSIFICATION_COLUMN,
    CONFIDENCE_SCORE_COLUMN,
    PRODUCT_TYPES_COLUMN,
    SALES_ACTION_COLUMN,
    EMAIL_COLUMN,
    PHONE_COLUMN,
    INSTAGRAM_COLUMN,
    MATCHED_DOMAIN_COLUMN,
)

# Output column -> candidate summary keys, evaluated first-present-wins
SUMMARY_FIELD_ALIASES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (COMPANY_SUMMARY_COLUMN, ("company_summary", "profile_summary")),
    (COMPANY_INDUSTRY_COLUMN, ("company_industry", "profile_industry", "industry")),
    (SALES_OPENER_COLUMN, ("sales_opener_sentence",)),
    (CLASSIFICATION_COLUMN, ("classification",)),
    (SALES_ACTION_COLUMN, ("sales_action",)),
)

# Output column -> CompanyRecord attribute for contact fields
CONTACT_FIELDS: Tuple[Tuple[str, str], ...] = (
    (EMAIL_COLUMN, "email"),
    (PHONE_COLUMN, "phone"),
    (INSTAGRAM_COLUMN, "instagram"),
)


def product_column(position: int) -> str:
    """Name of the 1-based indexed product column, e.g. ``PRODUCT3``."""
    return f"{PRODUCT_COLUMN_PREFIX}{position}"


# ===== Reference records =====


class CompanySummary(BaseModel):
    """
    Qualification summary attached to a company record.

    Produced upstream by the qualification service; consumed read-only here.
    Two generations of the upstream prompt wrote different key names
    (``company_summary`` vs ``profile_summary``), so both are kept and
    resolved through SUMMARY_FIELD_ALIASES.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    company_summary: Optional[str] = None
    profile_summary: Optional[str] = None
    company_industry: Optional[str] = None
    profile_industry: Optional[str] = None
    industry: Optional[str] = None
    sales_opener_sentence: Optional[str] = None
    classification: Optional[str] = None
    confidence_score: Optional[Union[int, float, str]] = None
    product_types: List[Any] = Field(default_factory=list)
    sales_action: Optional[str] = None

    @field_validator("product_types", mode="before")
    @classmethod
    def coerce_product_types(cls, v: Any) -> List[Any]:
        """Treat a missing or non-sequence value as no products."""
        if v is None:
            return []
        if isinstance(v, (list, tuple)):
            return list(v)
        logger.warning(
            "Ignoring non-sequence product_types of type %s", type(v).__name__
        )
        return []

    def lookup(self, key: str) -> Any:
        """Return a declared or extra summary value by key, or None."""
        if key in type(self).model_fields:
            return getattr(self, key)
        return (self.model_extra or {}).get(key)


class CompanyRecord(BaseModel):
    """
    Reference company entity matched against uploaded rows.

    ``domain`` is the join key after normalization. Records without one are
    kept in the collection but never enter the domain index.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    domain: Optional[str] = Field(None, description="Company website domain (join key)")
    name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = None
    phone: Optional[str] = None
    instagram: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("instagram", "social_handle"),
        description="Social handle copied into the Instagram column",
    )
    summary: Optional[CompanySummary] = None

    @field_validator("email", "phone", "instagram", mode="before")
    @classmethod
    def stringify_contact(cls, v: Any) -> Optional[str]:
        """Phone numbers often arrive as integers from spreadsheets."""
        if v is None:
            return None
        return v if isinstance(v, str) else str(v)


# ===== Enrichment output =====


@dataclass(frozen=True)
class EnrichedRow:
    """
    One output row, created once per source row and never mutated.

    Attributes:
        row_index: 0-based position of the source row in the input table
        values: Original cells plus enrichment cells (column -> text)
        matched: Whether the extracted domain was found in the index
        matched_domain: Canonical domain on a match, "" otherwise (never None)
        product_count: Number of PRODUCT<n> columns populated by enrichment
        domain: Normalized domain extracted from the source cell, if any
    """

    row_index: int
    values: Dict[str, str]
    matched: bool
    matched_domain: str = ""
    product_count: int = 0
    domain: Optional[str] = None

    def get(self, column: str, default: str = "") -> str:
        return self.values.get(column, default)


# ===== Run lifecycle =====


class RunStatus(str, Enum):
    """Lifecycle states of an enrichment run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    REJECTED = "rejected"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.REJECTED, RunStatus.FAILED)


_ALLOWED_TRANSITIONS: Dict[RunStatus, Tuple[RunStatus, ...]] = {
    RunStatus.PENDING: (RunStatus.RUNNING, RunStatus.REJECTED),
    RunStatus.RUNNING: (RunStatus.COMPLETED, RunStatus.FAILED),
}


class InvalidRunTransition(RuntimeError):
    """Raised when a run is moved along an edge the lifecycle does not allow."""


@dataclass
class EnrichmentRun:
    """
    State of one enrichment run.

    A run starts ``pending``, is either rejected before any row is processed
    or moves to ``running``, and ends ``completed`` or ``failed``. Every
    transition happens at most once; runs are discarded after output is
    produced.
    """

    source_column: Optional[str]
    row_ceiling: int
    total_rows: int = 0
    matched: int = 0
    unmatched: int = 0
    status: RunStatus = RunStatus.PENDING
    reason: Optional[str] = None
    history: List[RunStatus] = field(default_factory=lambda: [RunStatus.PENDING])

    def transition(self, target: RunStatus, reason: Optional[str] = None) -> None:
        allowed = _ALLOWED_TRANSITIONS.get(self.status, ())
        if target not in allowed:
            raise InvalidRunTransition(
                f"Cannot move enrichment run from {self.status.value} to {target.value}"
            )
        self.status = target
        self.reason = reason
        self.history.append(target)


@dataclass
class EnrichmentOutcome:
    """
    Structured result of a submitted enrichment run.

    On ``completed`` the headers, rows, counters and serialized CSV are
    populated. On ``rejected``/``failed`` they are empty and ``reason`` plus
    ``error_type`` describe why; no partial output is ever exposed.
    """

    status: RunStatus
    row_ceiling: int
    reason: Optional[str] = None
    error_type: Optional[str] = None
    row_index: Optional[int] = None
    headers: List[str] = field(default_factory=list)
    rows: List[EnrichedRow] = field(default_factory=list)
    matched: int = 0
    unmatched: int = 0
    csv_text: str = ""
    stats: Optional[EnrichmentStats] = None

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.COMPLETED

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    def summary_message(self) -> str:
        """Human-readable status line for CLIs and notifications."""
        if self.succeeded:
            return (
                f"Enriched {self.total_rows} rows. Matched {self.matched} companies, "
                f"{self.unmatched} unmatched."
            )
        return f"Enrichment {self.status.value}: {self.reason}"

    def as_records(self) -> List[Dict[str, str]]:
        """Rows as plain dicts restricted to the final header order."""
        return [{h: row.get(h) for h in self.headers} for row in self.rows]


def coerce_rows(rows: Sequence[SourceRow]) -> List[Dict[str, str]]:
    """Copy rows into plain dicts so callers cannot mutate run input."""
    return [dict(row) for row in rows]
