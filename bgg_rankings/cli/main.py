"""
Main CLI entry point for the BGG rankings crawler.
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from ..config import DEFAULT_ATTEMPTS, DEFAULT_DELAY_SECONDS, DEFAULT_LIMIT, DEFAULT_OUTPUT_FILE, OUTPUT_FIELDS
from ..dataset import GameDataset
from ..error_handling import StartPageError
from ..logging_config import setup_logging
from ..models import Game
from ..scraper import BGGRankingsCollector, HttpFetcher

logger = logging.getLogger(__name__)

SHOW_COLUMNS = [
    ("rank", "Rank", 5),
    ("title", "Title", 36),
    ("year", "Year", 5),
    ("geek_rating", "Geek", 6),
    ("avg_rating", "Avg", 5),
    ("min_players", "Min P", 5),
    ("max_players", "Max P", 5),
    ("min_best_players", "Best-", 5),
    ("max_best_players", "Best+", 5),
    ("min_playing_time", "Min T", 5),
    ("max_playing_time", "Max T", 5),
    ("weight", "Weight", 6),
]


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _non_negative_float(value: str) -> float:
    number = float(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return number


def _range_filter(value: str):
    parts = value.split(":")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError("expected FIELD:OP:VALUE, e.g. weight:gte:2.5")
    return tuple(parts)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Crawl BoardGameGeek rankings into a JSON dataset")
    subparsers = parser.add_subparsers(dest="command")

    crawl = subparsers.add_parser("crawl", help="Crawl the rankings and write the dataset")
    crawl.add_argument("-l", "--limit", type=_positive_int, default=DEFAULT_LIMIT,
                       help=f"Number of top-ranked games to collect (default: {DEFAULT_LIMIT})")
    crawl.add_argument("-a", "--all-pages", action="store_true",
                       help="Follow pagination to the last page and keep every game")
    crawl.add_argument("-d", "--delay", type=_non_negative_float, default=DEFAULT_DELAY_SECONDS,
                       help=f"Minimum seconds between requests (default: {DEFAULT_DELAY_SECONDS})")
    crawl.add_argument("-o", "--out", default=DEFAULT_OUTPUT_FILE,
                       help="Output JSON path (default: boardgames.json)")
    crawl.add_argument("--attempts", type=_positive_int, default=DEFAULT_ATTEMPTS,
                       help=f"Attempts per page before giving up on it (default: {DEFAULT_ATTEMPTS})")
    crawl.add_argument("--log-file", type=str, default=None, help="Custom log file name or absolute path")

    show = subparsers.add_parser("show", help="Search, filter and sort an existing dataset")
    show.add_argument("path", nargs="?", default=DEFAULT_OUTPUT_FILE, help="Dataset JSON path")
    show.add_argument("-s", "--search", default="", help="Case-insensitive text matched against title and year")
    show.add_argument("-f", "--filter", dest="filters", action="append", type=_range_filter, default=[],
                      metavar="FIELD:OP:VALUE", help="Range filter, OP is gte or lte (repeatable)")
    show.add_argument("--sort", default="rank", choices=OUTPUT_FIELDS, help="Sort field (default: rank)")
    show.add_argument("--desc", action="store_true", help="Sort descending")
    show.add_argument("--top", type=_positive_int, default=None, help="Only print the first N rows")
    return parser


def _format_cell(value, width: int) -> str:
    text = "" if value is None else str(value)
    if len(text) > width:
        text = text[:width - 1] + "…"
    return text.ljust(width)


def print_games(games: List[Game]) -> None:
    print(" ".join(_format_cell(label, width) for _, label, width in SHOW_COLUMNS))
    print("-" * (sum(width for _, _, width in SHOW_COLUMNS) + len(SHOW_COLUMNS) - 1))
    for game in games:
        print(" ".join(_format_cell(getattr(game, key), width) for key, _, width in SHOW_COLUMNS))


def run_crawl(args: argparse.Namespace) -> int:
    # Build a default per-run log filename when not provided
    if args.log_file:
        log_file = args.log_file
    else:
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        scope = "all" if args.all_pages else args.limit
        log_file = f"crawl_{ts}_lim{scope}.log"
    setup_logging(log_file)

    with HttpFetcher(delay_seconds=args.delay) as fetcher:
        collector = BGGRankingsCollector(fetcher=fetcher, attempts=args.attempts)
        try:
            result = collector.collect(limit=args.limit, all_pages=args.all_pages)
        except StartPageError as e:
            logger.error(f"Could not reach the rankings start page: {e}")
            return 1

    out_path = GameDataset(result.games).save(args.out)

    print("\n" + "=" * 60)
    print("CRAWL RESULTS")
    print("=" * 60)
    print(f"Pages crawled: {result.pages_crawled}")
    print(f"Games written: {len(result.games)}")
    print(f"Enriched with details: {result.enriched}")
    if result.failed_ranks:
        print(f"Detail fetch failures: {len(result.failed_ranks)} (ranks {', '.join(map(str, result.failed_ranks))})")
    if result.listing_error:
        print(f"Pagination stopped early: {result.listing_error}")
    if result.cancelled:
        print("Crawl was cancelled; partial results were written")
    print(f"Output: {out_path}")
    print("=" * 60)
    return 0


def run_show(args: argparse.Namespace) -> int:
    try:
        dataset = GameDataset.load(args.path)
        games = dataset.query(search=args.search, filters=args.filters,
                              sort_key=args.sort, descending=args.desc)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    shown = games[:args.top] if args.top else games
    print_games(shown)
    print(f"\n{dataset.summary(games)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    # Crawling is the default command
    if not argv or argv[0] not in ("crawl", "show", "-h", "--help"):
        argv = ["crawl", *argv]
    args = parser.parse_args(argv)

    try:
        if args.command == "show":
            return run_show(args)
        return run_crawl(args)
    except KeyboardInterrupt:
        print("\nProcess interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
