"""Weekly report export script.

Loads a collection snapshot, validates it, and writes the three weekly
report tables:

    data/reports/stats_<weekStart>.csv
    data/reports/event_log_<weekStart>.csv
    data/reports/boss_log_<weekStart>.csv

Usage:
    # Report for the week of the Guild Stats collection
    python scripts/export_report.py data/raw/data_2024-06-10.json

    # Accept datasets collected on the wrong day
    python scripts/export_report.py data/raw/data_2024-06-10.json --force

    # Report as of a given instant (ISO 8601)
    python scripts/export_report.py data/raw/data_2024-06-10.json \
        --collection-time 2024-06-16T20:00:00Z

Example:
    $ python scripts/export_report.py data/raw/data_2024-06-10.json
    [INFO] Loaded 15 datasets from data/raw/data_2024-06-10.json
    [INFO] Building reports for week 2024-06-10 (30 members)
    [INFO] Exported 30 records to data/reports/stats_2024-06-10.csv
    [INFO] Exported 48 records to data/reports/event_log_2024-06-10.csv
    [INFO] Exported 60 records to data/reports/boss_log_2024-06-10.csv
"""

import argparse
import sys
from pathlib import Path

from guildexport.ingestion.store import AggregationStore, SnapshotParseError
from guildexport.reports.pipeline import export_report
from guildexport.reports.report_builder import ReportBuilder
from guildexport.reports.validate import IncompleteCollectionError, StaleCollectionError
from guildexport.shared.config import Config
from guildexport.shared.files import load_text
from guildexport.shared.game_calendar import GameCalendar, parse_timestamp
from guildexport.shared.utils import setup_logger


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Export the weekly guild reports from a collection snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "snapshot",
        type=Path,
        help="Collection snapshot (data_<weekStart>.json)",
        metavar="SNAPSHOT",
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Config.REPORTS_DIR,
        help="Directory for the report tables. Default: data/reports",
        metavar="DIR",
    )

    parser.add_argument(
        "--collection-time",
        type=str,
        help="Report instant (ISO 8601). Default: Guild Stats collection time",
        metavar="TIMESTAMP",
    )

    parser.add_argument(
        "--force",
        action="store_true",
        help="Proceed even if datasets were collected on the wrong day",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args()


def print_to_stdout(name: str, content: str) -> None:
    """Alternate delivery of a table that could not be saved."""
    print(f"----- {name} -----")
    print(content)


def ask_to_continue(message: str) -> bool:
    if not sys.stdin.isatty():
        return False
    return input(f"{message} [y/N] ").strip().lower() in ("y", "yes")


def main() -> int:
    """Main export script."""
    args = parse_args()

    logger = setup_logger(
        "export_report",
        level="DEBUG" if args.verbose else Config.LOG_LEVEL,
    )

    try:
        Config.validate()
        calendar = GameCalendar()

        loaded = load_text(args.snapshot)
        if not loaded.ok:
            logger.error("Could not read %s", args.snapshot)
            return 1

        try:
            store = AggregationStore.loads(loaded.content, calendar=calendar)
        except SnapshotParseError as e:
            logger.error("%s", e)
            return 1
        logger.info("Loaded %d datasets from %s", len(store), args.snapshot)

        if args.collection_time:
            try:
                collection_time = parse_timestamp(args.collection_time)
            except ValueError:
                logger.error("Invalid collection time. Use ISO 8601, e.g. 2024-06-16T20:00:00Z")
                return 1
        elif "guildStats" in store:
            collection_time = store["guildStats"].coordinate.timestamp
        else:
            logger.error("Guild Stats not collected; pass --collection-time")
            return 1

        builder = ReportBuilder(store, collection_time, calendar=calendar)
        try:
            result = builder.build(allow_stale=args.force)
        except StaleCollectionError as e:
            logger.error("%s", e)
            logger.error("Re-collect the data, or pass --force to proceed anyway")
            return 1
        except IncompleteCollectionError as e:
            logger.error("%s", e)
            return 1

        for enemy in result.missing_battle_logs:
            logger.warning("Clash of Worlds Battle Log missing: %s", enemy)

        outcome = export_report(
            result,
            output_dir=args.output_dir,
            fallback=print_to_stdout,
            confirm=ask_to_continue,
        )
        if not outcome.completed:
            logger.error("Export stopped: %s", outcome.failure)
            return 1

        logger.info("✓ Export complete: %d files in %s", len(outcome.written), args.output_dir)
        return 0

    except KeyboardInterrupt:
        logger.warning("Export interrupted by user")
        return 130

    except Exception as e:
        logger.exception("Unexpected error during export: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
