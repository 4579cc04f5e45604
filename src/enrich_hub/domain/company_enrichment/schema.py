"""
Output header synthesis for enriched tables.

The number of PRODUCT<n> columns depends on the data: it is only known once
every row has been enriched. Header synthesis is therefore a second pass over
the complete set of enriched rows; output must not be streamed before it runs.
"""

import re
from typing import Iterable, List, Mapping, Sequence, Union

from .models import ENRICHMENT_COLUMNS, EnrichedRow, product_column

_PRODUCT_COLUMN_RE = re.compile(r"^PRODUCT([1-9][0-9]*)$")

RowLike = Union[EnrichedRow, Mapping[str, str]]


def _row_values(row: RowLike) -> Mapping[str, str]:
    return row.values if isinstance(row, EnrichedRow) else row


def max_product_index(rows: Iterable[RowLike]) -> int:
    """
    Highest PRODUCT<n> index holding a non-empty value in any row.

    Returns:
        ``k`` such that PRODUCT1..PRODUCTk cover every populated product cell,
        0 when no row has one.
    """
    highest = 0
    for row in rows:
        for column, value in _row_values(row).items():
            if not value:
                continue
            match = _PRODUCT_COLUMN_RE.match(column)
            if match:
                highest = max(highest, int(match.group(1)))
    return highest


def synthesize_headers(
    original_headers: Sequence[str], enriched_rows: Sequence[RowLike]
) -> List[str]:
    """
    Compute the final, stable output header order.

    Order:
    1. ``original_headers`` as uploaded
    2. Canonical enrichment columns not already present
    3. PRODUCT1..PRODUCTk not already present, in increasing index order

    A column that already exists in the upload is never duplicated; the
    enricher writes into it instead.

    Args:
        original_headers: Headers of the decoded source table
        enriched_rows: Every enriched row of the run

    Returns:
        Header list without duplicates; identical for identical input.

    Example:
        >>> synthesize_headers(["Name", "Email"], [])[:4]
        ['Name', 'Email', 'Company Summary', 'Company Industry']
    """
    headers: List[str] = []
    seen = set()

    def _append(column: str) -> None:
        if column not in seen:
            seen.add(column)
            headers.append(column)

    for column in original_headers:
        _append(column)

    for column in ENRICHMENT_COLUMNS:
        _append(column)

    for position in range(1, max_product_index(enriched_rows) + 1):
        _append(product_column(position))

    return headers
