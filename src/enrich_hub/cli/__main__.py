"""
Unified CLI entry point for EnrichHub.

Usage:
    python -m enrich_hub.cli <command> [options]

Available commands:
    enrich   - Enrich a CSV table with company data matched by domain
    domains  - Extract the unique company domains from a CSV column

Examples:
    # Enrich an upload on the Email column
    python -m enrich_hub.cli enrich --input leads.csv --column Email --companies companies.json

    # Four worker threads, export the domains that matched no company
    python -m enrich_hub.cli enrich --input leads.csv --column Website \\
        --companies companies.json --workers 4 --export-unmatched

    # Unique domains of a URL column
    python -m enrich_hub.cli domains --input export.csv --column URL
"""

import argparse
import sys
from typing import List, Optional


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point with subcommand routing.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = argparse.ArgumentParser(
        prog="enrich_hub.cli",
        description="EnrichHub CLI - bulk CSV company enrichment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
        help="Command to execute",
    )

    subparsers.add_parser(
        "enrich",
        help="Enrich a CSV table with matched company data",
        description="Match every row to a reference company by domain",
        add_help=False,  # Let the delegated module handle help
    )
    subparsers.add_parser(
        "domains",
        help="Extract unique domains from a CSV column",
        description="De-duplicate company domains, skipping social networks",
        add_help=False,  # Let the delegated module handle help
    )

    args, remaining_args = parser.parse_known_args(argv)

    if args.command == "enrich":
        from enrich_hub.cli.enrich import main as enrich_main

        return enrich_main(remaining_args)

    elif args.command == "domains":
        from enrich_hub.cli.domains import main as domains_main

        return domains_main(remaining_args)

    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
