"""Readers for uploaded tables and reference collections."""

from enrich_hub.io.readers.company_reader import (
    CompanyRecordsLoadError,
    load_company_records,
)
from enrich_hub.io.readers.csv_table import decode_csv, encode_csv

__all__ = [
    "CompanyRecordsLoadError",
    "decode_csv",
    "encode_csv",
    "load_company_records",
]
