"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from linkcrawler.config import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, DEFAULT_WORKERS, CrawlConfig
from linkcrawler.core import TRACE, CrawlState
from linkcrawler.errors import SeedURLError
from linkcrawler.pool import crawl

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s %(levelname)5s]: %(message)s"
VERBOSITY_LEVELS = {0: logging.ERROR, 1: logging.INFO, 2: logging.DEBUG}


def verbosity_level(verbosity: int) -> int:
    """Map the number of -v flags to a logging level."""
    return VERBOSITY_LEVELS.get(verbosity, TRACE)


def setup_logging(verbosity: int) -> None:
    level = verbosity_level(verbosity)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # urllib3 logs every connection at DEBUG; only show it at trace verbosity
    if level > TRACE:
        logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="linkcrawler",
        description="Crawl links breadth-first from an entrypoint and report, per URL, "
                    "how often it was linked and the last HTTP status seen.",
    )
    parser.add_argument("entrypoint", help="The URL to start crawling from (e.g. https://example.com)")
    parser.add_argument(
        "-r", "--restrict-on-domain",
        action="store_true",
        help="Only crawl URLs on the same domain as the entrypoint",
    )
    parser.add_argument(
        "-l", "--limit",
        type=int,
        default=0,
        help="Maximum number of distinct URLs to discover (default: 0, unlimited)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug, -vvv trace). Default logs errors only",
    )
    parser.add_argument(
        "-w", "--workers",
        type=int,
        default=DEFAULT_WORKERS,
        help=f"Number of concurrent workers (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--out", default="-", help="Output file path, or '-' for stdout (default: -)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    return parser.parse_args(argv)


def write_report(state: CrawlState, out: str, pretty: bool) -> None:
    """Dump the ledger as JSON to a file or stdout."""
    json_text = json.dumps(state.to_dict(), ensure_ascii=False, indent=2 if pretty else None)

    if out == "-":
        print(json_text)
        return

    output_path = Path(out)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json_text + "\n", encoding="utf-8")
    logger.info("Results written to: %s", output_path)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = CrawlConfig.from_args(args)
    except ValueError as e:
        logger.error("Invalid options: %s", e)
        return 2

    try:
        state = crawl(config)
    except SeedURLError as e:
        logger.critical("%s", e)
        return 2
    except KeyboardInterrupt:
        logger.error("Interrupted by user")
        return 130

    write_report(state, args.out, args.pretty)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
