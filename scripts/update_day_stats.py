"""Patch one day of an exported Member Stats table.

The weekly report is collected on Sunday, before Sunday is over. After the
day has ended, collect Guild Stats again (any later day) and patch Sunday's
values into the table in place.

Usage:
    python scripts/update_day_stats.py data/raw/data_2024-06-17.json \
        data/reports/stats_2024-06-10.csv

    # Patch another weekday (Sunday = 0, Monday = 1, ...)
    python scripts/update_day_stats.py SNAPSHOT STATS_CSV --weekday 6
"""

import argparse
import sys
from pathlib import Path

from guildexport.ingestion.store import AggregationStore, SnapshotParseError
from guildexport.reports.day_stats import update_day_stats
from guildexport.reports.validate import IncompleteCollectionError
from guildexport.shared.config import Config
from guildexport.shared.files import load_text, save_text
from guildexport.shared.utils import setup_logger


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Patch one weekday of an exported Member Stats table",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("snapshot", type=Path, help="Snapshot holding a fresh Guild Stats")
    parser.add_argument("stats_csv", type=Path, help="Member Stats table to patch in place")

    parser.add_argument(
        "--weekday",
        type=int,
        default=Config.COLLECTION_WEEKDAY,
        choices=range(7),
        help="Day to patch (Sunday = 0). Default: the collection weekday",
        metavar="N",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args()


def main() -> int:
    """Main patch script."""
    args = parse_args()

    logger = setup_logger(
        "update_day_stats",
        level="DEBUG" if args.verbose else Config.LOG_LEVEL,
    )

    try:
        snapshot = load_text(args.snapshot)
        stats = load_text(args.stats_csv)
        if not snapshot.ok or not stats.ok:
            logger.error("Could not read the snapshot or the stats table")
            return 1

        try:
            store = AggregationStore.loads(snapshot.content)
            patched = update_day_stats(store, stats.content, weekday=args.weekday)
        except (SnapshotParseError, IncompleteCollectionError) as e:
            logger.error("%s", e)
            return 1

        if not save_text(args.stats_csv, patched):
            logger.error("File saving failed: %s", args.stats_csv)
            return 1

        logger.info("✓ Updated %s", args.stats_csv)
        return 0

    except KeyboardInterrupt:
        logger.warning("Update interrupted by user")
        return 130

    except Exception as e:
        logger.exception("Unexpected error during update: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
