"""
CSV table codec for uploaded and enriched tables.

This module wraps pandas CSV reading and writing so that both directions use
the same dialect (comma delimiter, double-quote quoting, doubled quotes as
escape). Every cell is handled as text: no type inference, no NA detection,
so "007", "NA" and "" survive a decode/encode round trip unchanged.

Decoding reads every line, the header included, as plain records so that
header names are never rewritten by pandas.
"""

import io
import logging
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

import pandas as pd

from enrich_hub.domain.company_enrichment.exceptions import DecodeError
from enrich_hub.domain.company_enrichment.models import EnrichedRow

logger = logging.getLogger(__name__)

_BOM = "\ufeff"

RowLike = Union[EnrichedRow, Mapping[str, Any]]


def _read_records(text: str, **kwargs: Any) -> pd.DataFrame:
    return pd.read_csv(
        io.StringIO(text),
        header=None,
        dtype=object,
        keep_default_na=False,
        na_filter=False,
        skip_blank_lines=True,
        engine="python",
        **kwargs,
    )


def _text(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return value if isinstance(value, str) else str(value)


def decode_csv(raw_text: str) -> Tuple[List[str], List[Dict[str, str]]]:
    """
    Parse CSV text into headers and rows.

    The first non-blank line is the header, taken literally: blank names stay
    blank and no suffixes are added. When a name repeats, the column keeps the
    position of its first occurrence and each row takes the value of the
    rightmost cell with that name. Quoted fields may contain commas, quotes
    and line breaks. Rows shorter than the header are padded with empty
    strings, cells beyond the header width are dropped, and blank lines are
    ignored.

    Args:
        raw_text: Full text of the uploaded file

    Returns:
        Tuple of (headers in file order, rows as column -> text dicts)

    Raises:
        DecodeError: If the text is empty, malformed, or has no data rows
    """
    if raw_text is None or not str(raw_text).strip():
        raise DecodeError("CSV file is empty or invalid")

    text = raw_text[1:] if raw_text.startswith(_BOM) else raw_text

    try:
        width = _read_records(text, nrows=1).shape[1]
        df = _read_records(text, on_bad_lines=lambda fields: fields[:width])
    except pd.errors.EmptyDataError:
        raise DecodeError("CSV file is empty or invalid")
    except pd.errors.ParserError as e:
        raise DecodeError(f"Failed to parse CSV file: {e}")
    except (ValueError, UnicodeError) as e:
        raise DecodeError(f"Failed to parse CSV file: {e}")

    records = [
        [_text(value) for value in record]
        for record in df.itertuples(index=False, name=None)
    ]
    if not records or not records[0]:
        raise DecodeError("CSV file has no header row")

    names = records[0]
    headers = list(dict.fromkeys(names))
    if len(records) < 2:
        raise DecodeError("CSV file has a header but no data rows")
    if len(headers) < len(names):
        logger.warning(
            "Duplicate CSV header names collapsed",
            extra={"columns": len(names), "unique_columns": len(headers)},
        )

    rows: List[Dict[str, str]] = []
    for record in records[1:]:
        row = dict.fromkeys(headers, "")
        for name, value in zip(names, record):
            row[name] = value
        rows.append(row)

    logger.info(
        "Decoded CSV table",
        extra={"columns": len(headers), "rows": len(rows)},
    )
    return headers, rows


def _cell(row: RowLike, column: str) -> str:
    if isinstance(row, EnrichedRow):
        value: Any = row.values.get(column)
    else:
        value = row.get(column)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def encode_csv(headers: Sequence[str], rows: Sequence[RowLike]) -> str:
    """
    Serialize rows to CSV text in ``headers`` order.

    Cells missing from a row are written as empty strings. Values containing
    the delimiter, quote character or line breaks are quoted so that
    ``decode_csv(encode_csv(headers, rows))`` returns the same rows.

    Args:
        headers: Output column order
        rows: EnrichedRow objects or plain mappings

    Returns:
        CSV text with ``\\n`` line endings
    """
    data = [[_cell(row, column) for column in headers] for row in rows]
    df = pd.DataFrame(data, columns=list(headers), dtype=object)
    return df.to_csv(index=False, lineterminator="\n")
