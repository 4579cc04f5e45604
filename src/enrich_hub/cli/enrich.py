"""
CLI for enrichment runs.

Usage:
    python -m enrich_hub.cli enrich --input leads.csv --column Email \
        --companies companies.json

    python -m enrich_hub.cli enrich --input leads.csv --column Website \
        --companies companies.json --workers 4 --export-unmatched --verbose

Exit codes:
    0  run completed, enriched CSV written
    1  run rejected or failed, or an input file could not be read
    2  invalid command line
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from enrich_hub.config.settings import describe_row_limit, get_settings
from enrich_hub.infrastructure.enrichment.csv_exporter import (
    export_unmatched_domains,
    write_enriched_csv,
)
from enrich_hub.io.readers.company_reader import (
    CompanyRecordsLoadError,
    load_company_records,
)
from enrich_hub.orchestration.run_controller import EnrichmentRunController
from enrich_hub.utils.logging import get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="enrich_hub.cli enrich",
        description="Enrich a CSV table with company data matched by domain",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    # Required arguments
    parser.add_argument("--input", required=True, help="CSV file to enrich")
    parser.add_argument(
        "--column",
        required=True,
        help="Column containing e-mail addresses or website URLs",
    )
    parser.add_argument(
        "--companies",
        required=True,
        help="JSON file with the reference company collection",
    )

    # Optional arguments
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for output files (default: settings.output_dir)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for row batches (default: settings.max_workers)",
    )
    parser.add_argument(
        "--export-unmatched",
        action="store_true",
        help="Also write a CSV of extracted domains that matched no company",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show a progress bar",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run one enrichment from the command line.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = build_parser().parse_args(argv)
    settings = get_settings()
    output_dir = args.output_dir or settings.output_dir

    try:
        raw_text = Path(args.input).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"❌ Failed to read input file: {e}", file=sys.stderr)
        return 1

    try:
        companies = load_company_records(args.companies)
    except (FileNotFoundError, CompanyRecordsLoadError) as e:
        print(f"❌ Failed to load companies: {e}", file=sys.stderr)
        return 1

    controller = EnrichmentRunController(
        settings,
        max_workers=args.workers,
        verbose=args.verbose,
    )
    outcome = controller.submit(raw_text, args.column, companies)

    if not outcome.succeeded:
        print(f"❌ {outcome.summary_message()}", file=sys.stderr)
        if outcome.error_type == "RowCeilingExceeded":
            print(describe_row_limit(outcome.row_ceiling), file=sys.stderr)
        return 1

    try:
        output_path = write_enriched_csv(outcome.csv_text, output_dir)
        unmatched_path = (
            export_unmatched_domains(outcome.stats, output_dir)
            if args.export_unmatched
            else None
        )
    except OSError as e:
        print(f"❌ Failed to write output: {e}", file=sys.stderr)
        return 1

    print(f"✅ {outcome.summary_message()}")
    print(f"   Output: {output_path}")
    if unmatched_path is not None:
        print(f"   Unmatched domains: {unmatched_path}")

    logger.info(
        "cli.enrich.completed",
        output=str(output_path),
        unmatched_report=str(unmatched_path) if unmatched_path else None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
