"""
CLI for unique-domain extraction.

Reads a CSV upload, collects the distinct company domains of one column and
writes them as a single-column ``Domain`` table. Social-network hosts listed
in the blocklist (settings.blocked_domains_config) are skipped.

Usage:
    python -m enrich_hub.cli domains --input export.csv --column URL
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from enrich_hub.config.blocklist_loader import BlocklistConfigError, load_blocked_domains
from enrich_hub.config.settings import PROJECT_ROOT, get_settings
from enrich_hub.domain.company_enrichment.domain_extraction import extract_unique_domains
from enrich_hub.domain.company_enrichment.exceptions import DecodeError
from enrich_hub.infrastructure.enrichment.csv_exporter import write_enriched_csv
from enrich_hub.io.readers.csv_table import decode_csv, encode_csv


def _blocklist_path(configured: str) -> Path:
    path = Path(configured)
    return path if path.is_absolute() else PROJECT_ROOT / path


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Extract unique domains from the command line.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = argparse.ArgumentParser(
        prog="enrich_hub.cli domains",
        description="Extract unique company domains from a CSV column",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--input", required=True, help="CSV file to read")
    parser.add_argument("--column", required=True, help="Column containing URLs")
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for the domain list (default: settings.output_dir)",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    output_dir = args.output_dir or settings.output_dir

    try:
        raw_text = Path(args.input).read_text(encoding="utf-8")
        headers, rows = decode_csv(raw_text)
    except (OSError, UnicodeDecodeError, DecodeError) as e:
        print(f"❌ Failed to read input file: {e}", file=sys.stderr)
        return 1

    if args.column not in headers:
        print(
            f"❌ Column '{args.column}' not found. Available: {', '.join(headers)}",
            file=sys.stderr,
        )
        return 1

    try:
        blocked = load_blocked_domains(str(_blocklist_path(settings.blocked_domains_config)))
    except BlocklistConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    result = extract_unique_domains(rows, args.column, blocked)
    if not result.domains:
        print("No valid domains found in the selected column.")
        return 0

    table_headers, table_rows = result.to_table()
    try:
        output_path = write_enriched_csv(
            encode_csv(table_headers, table_rows), output_dir, prefix="unique-domains"
        )
    except OSError as e:
        print(f"❌ Failed to write output: {e}", file=sys.stderr)
        return 1

    print(
        f"✅ Found {result.unique} unique domains from {result.total} total entries "
        f"({result.invalid} invalid, {result.empty} empty)"
    )
    print(f"   Output: {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
