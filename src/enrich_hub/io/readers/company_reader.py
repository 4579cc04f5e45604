"""
Reference collection provider backed by a JSON export.

The reference collection normally lives in an external store; the CLI and
tests read a JSON snapshot of it instead. The file holds either a list of
company objects or an object with a ``companies`` list. Every item is
validated into a CompanyRecord before a run starts, so malformed records are
reported here rather than halfway through an enrichment run.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Union

from pydantic import ValidationError

from enrich_hub.domain.company_enrichment.models import CompanyRecord

logger = logging.getLogger(__name__)


class CompanyRecordsLoadError(Exception):
    """Raised when the reference collection file cannot be read or validated."""

    pass


def parse_company_records(payload: Any) -> List[CompanyRecord]:
    """
    Validate a decoded JSON payload into CompanyRecord objects.

    Args:
        payload: List of company dicts, or ``{"companies": [...]}``

    Returns:
        Records in payload order

    Raises:
        CompanyRecordsLoadError: If the shape is wrong or an item is invalid
    """
    if isinstance(payload, dict):
        payload = payload.get("companies")

    if not isinstance(payload, list):
        raise CompanyRecordsLoadError(
            "Reference collection must be a JSON list or an object with a 'companies' list"
        )

    records: List[CompanyRecord] = []
    for position, item in enumerate(payload):
        try:
            records.append(CompanyRecord.model_validate(item))
        except ValidationError as e:
            raise CompanyRecordsLoadError(
                f"Invalid company record at position {position}: {e}"
            ) from e

    return records


def load_company_records(path: Union[str, Path]) -> List[CompanyRecord]:
    """
    Load the reference collection from a JSON file.

    Args:
        path: JSON file path

    Returns:
        Validated CompanyRecord list

    Raises:
        FileNotFoundError: If the file does not exist
        CompanyRecordsLoadError: If the file is not valid JSON or not a valid collection
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Company records file not found: {file_path}")

    try:
        with file_path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise CompanyRecordsLoadError(f"Invalid JSON in {file_path}: {e}") from e

    records = parse_company_records(payload)
    logger.info(
        "Loaded reference collection",
        extra={"path": str(file_path), "records": len(records)},
    )
    return records
