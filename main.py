import sys
import asyncio
import argparse
from typing import List, Optional

# --- Settings/Logging ---
from sos_ratings.logging.setup import setup_logging
from sos_ratings.config.settings import settings

setup_logging()

from loguru import logger

# --- End Settings/Logging ---

from sos_ratings.models.enums import SortKey
from sos_ratings.models.season import SeasonQuery
from sos_ratings.scrapers.espn_scraper import EspnScraper
from sos_ratings.scrapers.base_scraper import ScraperError, DiscoveryError
from sos_ratings.calculation.rating_engine import compute_ratings
from sos_ratings.presentation.table import build_table_rows, render_table

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sos-ratings",
        description="Rank a league's teams by strength-of-schedule adjusted offense and defense.",
    )
    parser.add_argument(
        "-c",
        "--max-concurrency",
        type=positive_int,
        default=settings.max_concurrency,
        help="Schedules fetched at the same time (default: %(default)s)",
    )
    parser.add_argument("-s", "--sport", required=True, help="e.g. football")
    parser.add_argument("-l", "--league", required=True, help="e.g. college-football")
    parser.add_argument("-S", "--season", type=int, required=True, help="e.g. 2024")
    parser.add_argument("-g", "--group", type=int, help="Restrict to a group, e.g. 80 for FBS")
    parser.add_argument("-t", "--top", type=positive_int, help="Only show the first N rows")
    parser.add_argument("-r", "--reverse", action="store_true", help="Reverse the ordering")
    sort_group = parser.add_mutually_exclusive_group()
    sort_group.add_argument(
        "-d", "--defense", action="store_true", help="Sort by defense rating"
    )
    sort_group.add_argument(
        "-o", "--offense", action="store_true", help="Sort by offense rating"
    )
    return parser.parse_args(argv)


def sort_key_from_args(args: argparse.Namespace) -> SortKey:
    if args.defense:
        return SortKey.DEFENSE
    if args.offense:
        return SortKey.OFFENSE
    return SortKey.OVERALL


async def run(args: argparse.Namespace, console: Optional[Console] = None) -> int:
    """Discovers teams, fetches their schedules, rates them and prints the table."""
    console = console or Console()
    query = SeasonQuery(
        sport=args.sport, league=args.league, season=args.season, group=args.group
    )

    async with EspnScraper() as scraper:
        try:
            team_ids = await scraper.discover_team_ids(query)
        except DiscoveryError as e:
            logger.error(f"Team discovery failed: {e}")
            return 1

        with Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=Console(stderr=True),
            transient=True,
        ) as progress:
            task = progress.add_task("Fetching schedules", total=len(team_ids))
            schedules = await scraper.fetch_schedules(
                query,
                sorted(team_ids),
                concurrency_limit=args.max_concurrency,
                on_progress=lambda: progress.advance(task),
            )

    ratings = compute_ratings(schedules)
    rows = build_table_rows(
        ratings,
        sort_by=sort_key_from_args(args),
        reverse=args.reverse,
        top=args.top,
    )
    console.print(render_table(rows))
    return 0


def cli(argv: Optional[List[str]] = None) -> None:
    """Console script entry point."""
    args = parse_args(argv)
    try:
        exit_code = asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        exit_code = 130
    except ScraperError as e:
        logger.error(f"Aborting: {e}")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
