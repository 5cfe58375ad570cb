"""Build the search index artifact from the site's sources.

Usage:
    portfolio-search-build --data-dir src --output dist/search-index.json
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import asdict
import logging
from pathlib import Path
import sys
import time

import orjson
from pydantic import ValidationError

from portfolio_search.adapters.sources import discover_sources
from portfolio_search.config import Settings
from portfolio_search.observability.logging import configure_logging
from portfolio_search.search.normalizer import IndexBuilder


logger = logging.getLogger(__name__)


def build_argument_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build search-index.json from content, pages and image listings")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=settings.data_dir,
        help=f"Directory holding content/, pages/ and data/ (default: {settings.data_dir})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=settings.index_path,
        help=f"Where to write the index (default: {settings.index_path})",
    )
    parser.add_argument(
        "--ignore-listing",
        action="append",
        default=None,
        metavar="BASENAME",
        help="Listing file basename to leave out of the index (repeatable)",
    )
    parser.add_argument(
        "--ignore-page",
        action="append",
        default=None,
        metavar="ROUTE",
        help="Routed page to leave out of the index (repeatable)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Build and report without writing the artifact",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = Settings()
    except ValidationError as exc:
        sys.stderr.write(f"Invalid configuration: {exc}\n")
        return 1

    configure_logging(settings.log_level, settings.json_logs, stream=sys.stderr)
    args = build_argument_parser(settings).parse_args(argv)

    data_dir: Path = args.data_dir.expanduser()
    if not data_dir.is_dir():
        logger.error("Data directory not found: %s", data_dir)
        return 1

    start = time.perf_counter()
    bundle = discover_sources(data_dir)
    builder = IndexBuilder(
        text_max_length=settings.text_max_length,
        ignore_page_paths=args.ignore_page if args.ignore_page is not None else settings.get_ignore_page_paths(),
        ignore_listings=args.ignore_listing if args.ignore_listing is not None else settings.get_ignore_listings(),
    )
    builder.add_sources(
        content_entries=bundle.content_entries,
        routed_pages=bundle.routed_pages,
        section_listings=bundle.section_listings,
        collection_listings=bundle.collection_listings,
    )
    index = builder.build()

    output: Path | None = None
    if not args.dry_run:
        try:
            output = index.write(args.output)
        except OSError as exc:
            logger.error("Failed to write index to %s: %s", args.output, exc)
            return 1

    summary = {
        **asdict(builder.stats()),
        "documents": len(index),
        "errors": bundle.errors,
        "output": str(output) if output else None,
        "duration_s": round(time.perf_counter() - start, 3),
    }
    sys.stdout.write(orjson.dumps(summary, option=orjson.OPT_SORT_KEYS).decode("utf-8") + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
