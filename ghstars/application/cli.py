"""Command-line entry point: sync starred repositories and optionally export them."""

import argparse
import logging
import sqlite3
import sys
from typing import List, Optional

from ghstars.application.exporter import JsonExporter
from ghstars.application.sync_service import SyncService
from ghstars.config import Config, ConfigurationError
from ghstars.infrastructure.database import DatabaseRepository
from ghstars.infrastructure.github_client import GitHubAPIError, GitHubClient
from ghstars.infrastructure.readme_resolver import ReadmeResolver

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghstars",
        description="Mirror your GitHub stars into a local SQLite database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Fetch new stars into data.ghstars
  %(prog)s --get-readme             # Also store README contents
  %(prog)s --skip-update --json     # Export the existing database offline

Configuration:
  GITHUB_TOKEN   personal access token (required unless --skip-update)
  GHSTARS_DB     database file used when --db is not given
        """,
    )
    parser.add_argument("--db", default=None, help="Database file (default: data.ghstars)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--skip-update",
        action="store_true",
        help="Do not update the database (offline, use existing data)",
    )
    parser.add_argument("--json", action="store_true", help="JSON export to stdout")
    parser.add_argument("--get-readme", action="store_true", help="Fetch and store README contents")
    parser.add_argument("--store-private", action="store_true", help="Store private starred repositories")
    return parser


def configure_logging(debug: bool):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def run(config: Config) -> int:
    """Execute one run for an already validated configuration."""
    if config.fetch_readme:
        logger.info("Fetching READMEs enabled")
    if config.json_export:
        logger.info("JSON export enabled")

    with DatabaseRepository(config.db_path) as db_repository:
        db_repository.initialize_schema()

        if config.skip_update:
            logger.info("Skipping update (offline mode)")
        else:
            logger.info("Fetching stars from github.com...")
            github_client = GitHubClient(token=config.token)
            try:
                service = SyncService(
                    github_client,
                    db_repository,
                    readme_resolver=ReadmeResolver(github_client),
                    store_private=config.store_private,
                    fetch_readme=config.fetch_readme,
                )
                service.sync()
            finally:
                github_client.close()

        if config.json_export:
            JsonExporter(db_repository).export(sys.stdout)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, check preconditions and run."""
    args = build_parser().parse_args(argv)
    configure_logging(args.debug)

    try:
        config = Config.from_args(args)
        config.validate()
        return run(config)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    except GitHubAPIError as e:
        logger.error(f"Fetching stars failed: {e}")
        return 1
    except sqlite3.Error as e:
        logger.error(f"Database error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
