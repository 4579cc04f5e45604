"""
CSV artifacts produced by enrichment runs.

This module provides infrastructure-layer file I/O for:
- the enriched table offered to the user as a download (enriched_<date>.csv)
- the unmatched-domain report used to spot companies missing from the
  reference collection (unmatched_domains_<timestamp>_<suffix>.csv)
"""

import csv
import logging
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional

from enrich_hub.domain.company_enrichment.observability import (
    EnrichmentStats,
    UnmatchedDomainRecord,
)

logger = logging.getLogger(__name__)


def _ensure_dir(output_dir: str) -> Path:
    output_path = Path(output_dir)
    try:
        output_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(
            "Failed to create output directory",
            extra={"output_dir": str(output_path), "error": str(e)},
        )
        raise
    return output_path


def enriched_filename(prefix: str = "enriched", on: Optional[date] = None) -> str:
    """Download name for an output table, e.g. ``enriched_2026-10-18.csv``."""
    day = on or datetime.now(timezone.utc).date()
    return f"{prefix}_{day.isoformat()}.csv"


def write_enriched_csv(
    csv_text: str,
    output_dir: str = "output/",
    prefix: str = "enriched",
    on: Optional[date] = None,
) -> Path:
    """
    Write a serialized table to ``<output_dir>/<prefix>_<YYYY-MM-DD>.csv``.

    An existing file of the same name is never overwritten; ``_1``, ``_2``...
    suffixes are appended instead.

    Args:
        csv_text: Output of the CSV encoder
        output_dir: Target directory, created if missing
        prefix: File name prefix ("enriched", "unique-domains", ...)
        on: Date used in the file name (default: today, UTC)

    Returns:
        Path of the written file

    Raises:
        OSError: If directory creation or file writing fails
    """
    output_path = _ensure_dir(output_dir)

    stem = Path(enriched_filename(prefix, on)).stem
    filepath = output_path / f"{stem}.csv"
    counter = 1
    while filepath.exists():
        filepath = output_path / f"{stem}_{counter}.csv"
        counter += 1

    try:
        with filepath.open("w", newline="", encoding="utf-8") as f:
            f.write(csv_text)
    except OSError as e:
        logger.error(
            "Failed to write CSV file",
            extra={"filepath": str(filepath), "error": str(e)},
        )
        raise

    logger.info(
        "Wrote enriched CSV",
        extra={"filepath": str(filepath), "bytes": len(csv_text.encode("utf-8"))},
    )
    return filepath


def write_unmatched_domains_csv(
    rows: List[List[str]],
    output_dir: str = "output/",
) -> Optional[Path]:
    """
    Write unmatched domains to a CSV file.

    Args:
        rows: CSV row values (from UnmatchedDomainRecord.to_csv_row())
        output_dir: Directory for CSV output

    Returns:
        Path to created CSV file, or None if no rows to export

    Raises:
        OSError: If directory creation or file writing fails
    """
    if not rows:
        logger.info("No unmatched domains to export")
        return None

    output_path = _ensure_dir(output_dir)

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    suffix = uuid.uuid4().hex[:8]
    filepath = output_path / f"unmatched_domains_{timestamp}_{suffix}.csv"

    try:
        with filepath.open("w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(UnmatchedDomainRecord.csv_headers())
            writer.writerows(rows)
    except OSError as e:
        logger.error(
            "Failed to write CSV file",
            extra={"filepath": str(filepath), "error": str(e)},
        )
        raise

    logger.info(
        "Exported unmatched domains to CSV",
        extra={"filepath": str(filepath), "count": len(rows)},
    )
    return filepath


def export_unmatched_domains(
    stats: EnrichmentStats,
    output_dir: str = "output/",
) -> Optional[Path]:
    """
    Export the unmatched domains recorded in run statistics.

    Args:
        stats: Statistics of a completed run
        output_dir: Directory for CSV output

    Returns:
        Path to created CSV file, or None if every extracted domain matched
    """
    records = stats.unmatched_domain_records()
    if not records:
        logger.debug("No unmatched domains recorded in stats")
        return None

    return write_unmatched_domains_csv(
        [record.to_csv_row() for record in records], output_dir
    )
