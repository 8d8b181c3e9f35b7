from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from wofbot.app import download_distributions, list_inventory, reconcile_wikidata
from wofbot.config import configure_logging
from wofbot.domain.model import ForeignSource

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Link Who's On First records to Wikidata")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser("reconcile", help="Add missing Who's On First IDs")
    reconcile.add_argument(
        "--dataset",
        dest="datasets",
        type=Path,
        action="append",
        help="Path to a decompressed WOF SQLite file (repeatable; defaults to downloads)",
    )
    reconcile.add_argument(
        "--source",
        dest="sources",
        action="append",
        choices=[source.value for source in ForeignSource],
        help="Concordance source to reconcile (repeatable, default: wd:id)",
    )
    reconcile.add_argument(
        "--validate-types",
        action="store_true",
        help="Reject entities whose instance-of claims conflict with the placetype",
    )
    reconcile.add_argument(
        "--limit",
        type=int,
        help="Maximum number of candidates to process",
    )
    reconcile.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve candidates without logging in or editing",
    )
    reconcile.add_argument(
        "--download",
        action="store_true",
        help="Fetch changed distributions before reconciling (ignored with --dataset)",
    )

    subparsers.add_parser("inventory", help="List the latest distribution per repo")
    subparsers.add_parser(
        "download",
        help="Download changed distributions and decompress them",
    )

    return parser.parse_args(list(argv))


def _parse_sources(values: Sequence[str] | None) -> tuple[ForeignSource, ...]:
    if not values:
        return (ForeignSource.WIKIDATA,)
    return tuple(dict.fromkeys(ForeignSource(value) for value in values))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "reconcile" and parsed_args.limit is not None:
            if parsed_args.limit < 0:
                raise ValueError("Limit must be non-negative")  # noqa: TRY301
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "reconcile":
            result = reconcile_wikidata(
                datasets=parsed_args.datasets,
                sources=_parse_sources(parsed_args.sources),
                validate_types=parsed_args.validate_types,
                limit=parsed_args.limit,
                dry_run=parsed_args.dry_run,
                download=parsed_args.download,
            )
            log.info("Reconciliation finished: %s", result.summary())
        elif parsed_args.command == "inventory":
            for item in list_inventory():
                log.info("%s %s %s", item.repo, item.name_compressed, item.last_modified)
        elif parsed_args.command == "download":
            for path in download_distributions():
                log.info("Dataset ready: %s", path)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
