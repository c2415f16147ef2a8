"""Command line interface.

Usage:
    mezzofanti extract myapp some_dependency --output priv/mezzofanti

Scans the named packages (application and dependencies) for translate()
calls, merges the messages into one catalog and writes one POT template per
domain into the output directory, replacing stale templates.

Exit Codes:
    0: Catalog written
    1: Some units failed to scan (catalog still written), or variable
       inconsistencies were found with --strict
    2: Usage or I/O error

Python 3.13+.
"""

from __future__ import annotations

import argparse
import logging
import sys
import warnings
from collections.abc import Sequence
from pathlib import Path

from mezzofanti.constants import DEFAULT_OUTPUT_DIR
from mezzofanti.errors import VariableConsistencyWarning
from mezzofanti.extraction import Extractor, PotCatalogWriter, discover_units

__all__ = ["main", "parse_args"]

logger = logging.getLogger(__name__)


def parse_args(args: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="mezzofanti",
        description="Extract translatable messages from Python packages.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    extract = commands.add_parser(
        "extract",
        help="scan packages and write POT templates",
        description="Scan packages for translate() calls and write one POT file per domain.",
    )
    extract.add_argument(
        "packages",
        nargs="+",
        metavar="PACKAGE",
        help="importable package or module names (application and dependencies)",
    )
    extract.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path(DEFAULT_OUTPUT_DIR),
        help=f"destination directory (default: {DEFAULT_OUTPUT_DIR})",
    )
    extract.add_argument(
        "--root",
        type=Path,
        default=Path.cwd(),
        help="project root; source references are relative to it (default: cwd)",
    )
    extract.add_argument(
        "-j",
        "--workers",
        type=int,
        default=1,
        help="number of scan threads (default: 1)",
    )
    extract.add_argument(
        "--strict",
        action="store_true",
        help="exit with status 1 on variable consistency warnings",
    )
    extract.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="increase log verbosity (-v info, -vv debug)",
    )
    return parser.parse_args(args)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def run_extract(parsed: argparse.Namespace) -> int:
    """Run the extract command; return the exit code."""
    if parsed.workers < 1:
        print("[ERROR] --workers must be at least 1", file=sys.stderr)
        return 2

    units, discovery_failures = discover_units(parsed.packages)
    with warnings.catch_warnings():
        # Reported below, once, with the rest of the summary
        warnings.simplefilter("ignore", VariableConsistencyWarning)
        catalog = Extractor(
            units, root=parsed.root, max_workers=parsed.workers, failures=discovery_failures
        ).extract_all()

    try:
        written = PotCatalogWriter().write(catalog, parsed.output)
    except (OSError, ValueError) as e:
        print(f"[ERROR] Cannot write catalog: {e}", file=sys.stderr)
        return 2

    print(
        f"Extracted {len(catalog)} messages in {len(catalog.domains())} domains "
        f"from {len(units)} modules into {parsed.output}"
    )
    for path in written:
        print(f"  {path}")
    for failure in catalog.failures:
        print(f"[FAILED] {failure}", file=sys.stderr)
    for warning in catalog.warnings:
        print(f"[WARNING] {warning}", file=sys.stderr)

    if catalog.failures:
        return 1
    if parsed.strict and catalog.warnings:
        return 1
    return 0


def main(args: Sequence[str] | None = None) -> int:
    """Main entry point.

    Args:
        args: Command line arguments (None uses sys.argv)

    Returns:
        Exit code
    """
    parsed = parse_args(args)
    _configure_logging(parsed.verbose)
    logger.debug("Arguments: %s", parsed)
    match parsed.command:
        case "extract":
            return run_extract(parsed)
        case _:
            return 2


if __name__ == "__main__":
    sys.exit(main())
