"""Replay captured API responses into a collection snapshot.

Each input file holds one batched API response envelope, or a JSON list of
them, as captured from the game client:

    {"results": [{"ident": "clanGetInfo", "result": {"response": {...}}}, ...]}

Usage:
    # Build data/raw/data_<weekStart>.json from captured responses
    python scripts/replay_responses.py captures/*.json

    # Keep every raw fragment for debugging unknown payloads
    python scripts/replay_responses.py captures/*.json --log-data

Example:
    $ python scripts/replay_responses.py captures/sunday.json
    [INFO] Collected Guild Info
    [INFO] Collected Guild Stats
    [INFO] Replayed 2 envelopes, 14 datasets stored
    [INFO] Exported data to data/raw/data_2024-06-10.json
"""

import argparse
import json
import sys
from pathlib import Path

from guildexport.ingestion.collectors import ResponseCollector
from guildexport.shared.config import Config
from guildexport.shared.files import load_text
from guildexport.shared.utils import setup_logger


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Replay captured Hero Wars API responses into a snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "inputs",
        nargs="+",
        type=Path,
        help="Captured response files (one envelope or a list of envelopes each)",
        metavar="FILE",
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Config.DATA_DIR / "raw",
        help="Directory for the snapshot. Default: data/raw",
        metavar="DIR",
    )

    parser.add_argument(
        "--log-data",
        action="store_true",
        help="Also export every raw response fragment (logged_data_<week>.json)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args()


def main() -> int:
    """Main replay script."""
    args = parse_args()

    logger = setup_logger(
        "replay_responses",
        level="DEBUG" if args.verbose else Config.LOG_LEVEL,
    )

    try:
        Config.validate()
        collector = ResponseCollector(
            output_dir=args.output_dir,
            data_logging_enabled=args.log_data or None,
        )

        envelopes = 0
        stored = 0
        for path in args.inputs:
            loaded = load_text(path)
            if not loaded.ok:
                logger.error("Could not read %s", path)
                return 1
            try:
                content = json.loads(loaded.content)
            except json.JSONDecodeError as e:
                logger.error("Invalid JSON format in %s: %s", path, e)
                return 1

            for envelope in content if isinstance(content, list) else [content]:
                stored += collector.add_response(envelope)
                envelopes += 1

        logger.info("Replayed %d envelopes, %d datasets stored", envelopes, stored)

        if len(collector.store) == 0:
            logger.warning("No datasets collected")
            return 1

        record = collector.store.get("guildStats")
        collection_time = record.coordinate.timestamp if record is not None else None

        if collector.export_snapshot(collection_time) is None:
            logger.error("Snapshot could not be saved to %s", collector.output_dir)
            return 1
        if collector.data_logging_enabled and collector.export_logged_data(collection_time) is None:
            logger.error("Logged data could not be saved to %s", collector.output_dir)
            return 1

        return 0

    except KeyboardInterrupt:
        logger.warning("Replay interrupted by user")
        return 130

    except Exception as e:
        logger.exception("Unexpected error during replay: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
