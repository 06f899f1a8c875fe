"""
Job Aggregator - Main Entry Point

This is the command-line interface of the aggregation pipeline.
It can be called directly from the terminal or from a scheduler (cron).

Usage:
    python -m job_aggregator.aggregator.main [OPTIONS]

Options:
    --force-refresh       Ignore the cache and scrape every source now
    --company TEXT        Only show jobs of this company (repeatable)
    --location TEXT       Only show jobs at this location (repeatable)
    --search TEXT         Case-insensitive search in company, title, location, description
    --reconcile           Reconcile the store (PostgreSQL if DATABASE_URL is set, else in memory)
    --timeout SECONDS     Abandon sources still running after this many seconds
    --cache-status        Print the cache status and exit
    --invalidate          Delete the cache entry and exit
    --config PATH         Sources configuration file (default: config/sources.yml)
    --output FORMAT       "summary" (default) or "json"
    --verbose             Enable debug logging
    --help                Show this message and exit

Examples:
    # Serve from cache when fresh, scrape otherwise:
    python -m job_aggregator.aggregator.main

    # Scrape now and update the database:
    python -m job_aggregator.aggregator.main --force-refresh --reconcile

    # Air France jobs mentioning "technicien", as JSON:
    python -m job_aggregator.aggregator.main --company "Air France" --search technicien --output json

Exit Codes:
    0: Success
    1: Some sources failed (partial result served)
    2: Fatal error (every source failed with no cache, configuration error, database error)
    130: Interrupted
"""

import argparse
import dataclasses
import json
import logging
import sys
from typing import Any, Optional

from dotenv import load_dotenv

from ..cache.persistent_cache import PersistentCache
from ..query.service import JobQueryService
from ..settings import Settings
from ..store.base import JobStore
from ..store.db_operations import DatabaseError, PostgresJobStore
from ..store.memory import InMemoryJobStore

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='Aggregate job postings from employer career sites',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--force-refresh',
        action='store_true',
        help='Ignore the cache and scrape every source now',
        dest='force_refresh'
    )

    parser.add_argument(
        '--company',
        action='append',
        help='Only show jobs of this company (repeatable)',
        dest='companies',
        default=[]
    )

    parser.add_argument(
        '--location',
        action='append',
        help='Only show jobs at this location (repeatable)',
        dest='locations',
        default=[]
    )

    parser.add_argument(
        '--search',
        type=str,
        help='Case-insensitive search in company, title, location and description',
        default=None
    )

    parser.add_argument(
        '--reconcile',
        action='store_true',
        help='Reconcile the store with the scraped result'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        help='Abandon sources still running after this many seconds',
        default=None
    )

    parser.add_argument(
        '--cache-status',
        action='store_true',
        help='Print the cache status and exit',
        dest='cache_status'
    )

    parser.add_argument(
        '--invalidate',
        action='store_true',
        help='Delete the cache entry and exit'
    )

    parser.add_argument(
        '--config',
        type=str,
        help='Sources configuration file (default: config/sources.yml)',
        default=None
    )

    parser.add_argument(
        '--output',
        choices=['summary', 'json'],
        help='Output format',
        default='summary'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def build_store(settings: Settings) -> JobStore:
    """PostgreSQL store when DATABASE_URL is set, in-memory store otherwise."""
    if settings.database_url:
        logger.info("Connecting to database")
        return PostgresJobStore(settings.database_url)

    logger.warning("DATABASE_URL not set, reconciling an in-memory store")
    return InMemoryJobStore()


def exit_code_for(response: dict[str, Any]) -> int:
    """0 when every source succeeded, 1 on partial failure, 2 when nothing could be served."""
    if not response['errors']:
        return 0
    if response['totalCount'] == 0 and response['lastUpdated'] is None:
        return 2
    return 1


def print_summary(response: dict[str, Any]) -> None:
    print(
        f"{response['totalCount']} jobs (source: {response['source']}, "
        f"last updated: {response['lastUpdated'] or 'never'})"
    )
    for status in response['sourceStatus']:
        line = f"  {status['source']:<16} {status['status']:<9} {status['jobCount']:>4} jobs"
        if status['message']:
            line += f"  {status['message']}"
        print(line)
    for job in response['jobs']:
        print(
            f"- {job['companyName']} | {job['jobTitle']} | {job['location']} | "
            f"{job['publishDate'] or 'n/a'} | {job['url']}"
        )


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the job aggregator.

    Returns:
        Exit code (0 = success, 1 = partial failure, 2 = fatal error)
    """
    args = parse_args(argv)

    # Set logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    try:
        settings = Settings.from_env(load_env_file=False)
        if args.timeout is not None:
            settings = dataclasses.replace(settings, aggregator_timeout_seconds=args.timeout)

        if args.cache_status or args.invalidate:
            cache = PersistentCache(settings.cache_dir, ttl_seconds=settings.cache_ttl_seconds)
            if args.invalidate:
                cache.invalidate()
            print(json.dumps(cache.status().to_dict(), indent=2))
            return 0

        store = build_store(settings) if args.reconcile else None
        service = JobQueryService.from_settings(
            settings,
            config_path=args.config,
            store=store,
            connect_store=args.reconcile,
        )

        response = service.get_jobs(
            companies=args.companies,
            locations=args.locations,
            search=args.search,
            force_refresh=args.force_refresh,
        )

        if args.output == 'json':
            print(json.dumps(response, ensure_ascii=False, indent=2))
        else:
            print_summary(response)

        exit_code = exit_code_for(response)
        if exit_code == 1:
            logger.warning(
                f"Completed with {len(response['errors'])} failed source(s)"
            )
        elif exit_code == 2:
            logger.error("Every source failed and no cached result is available")
        return exit_code

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 2  # Fatal error

    except DatabaseError as e:
        logger.error(f"Database error: {e}")
        return 2  # Fatal error

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130  # Standard Unix exit code for SIGINT

    except Exception as e:
        logger.error(
            "Unexpected fatal error",
            extra={
                'error': str(e),
                'error_type': type(e).__name__,
            },
            exc_info=True
        )
        return 2  # Fatal error


if __name__ == '__main__':
    sys.exit(main())
