"""Capture session over intercepted API responses.

The transport layer (browser hook, proxy, replay file) hands every batched
API response to `ResponseCollector.add_response()`. The collector feeds the
fragments into an `AggregationStore` and, when data logging is enabled,
keeps a copy of every raw fragment for debugging unknown payloads.

Example:
    >>> from pathlib import Path
    >>> collector = ResponseCollector(output_dir=Path("data/raw"))
    >>> collector.add_response({"results": [{"ident": "clanGetInfo", "result": {"response": {...}}}]})
    >>> path = collector.export_snapshot()
    >>> # Creates: data/raw/data_2024-06-10.json
"""

import json
from datetime import datetime
from pathlib import Path

import pytz

from guildexport.ingestion.classifier import classify
from guildexport.ingestion.store import AggregationStore, is_well_formed_item
from guildexport.shared.config import Config
from guildexport.shared.files import save_text
from guildexport.shared.game_calendar import GameCalendar
from guildexport.shared.utils import setup_logger


class ResponseCollector:
    """Collects API responses for one session.

    Attributes:
        store: Datasets collected so far.
        data_logging_enabled: Keep every raw fragment in `logged_data`.
        logged_data: (identifier, payload) pairs seen while logging was on.
    """

    def __init__(
        self,
        output_dir: Path | None = None,
        store: AggregationStore | None = None,
        calendar: GameCalendar | None = None,
        data_logging_enabled: bool | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            output_dir: Directory for JSON exports (created if missing).
            store: Store to fill (default: a new empty store).
            calendar: Game calendar used for time stamps and file names.
            data_logging_enabled: Initial debug toggle (default: from Config).
            log_file: Optional path for file-based logging.
        """
        self.output_dir = output_dir or Config.DATA_DIR / "raw"
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.calendar = calendar or GameCalendar()
        self.store = store if store is not None else AggregationStore(calendar=self.calendar)
        self.data_logging_enabled = (
            Config.DATA_LOGGING_ENABLED if data_logging_enabled is None else data_logging_enabled
        )
        self.logged_data: list[tuple[str, object]] = []
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def toggle_data_logging(self) -> bool:
        """Flip the data logging toggle and return the new state."""
        self.data_logging_enabled = not self.data_logging_enabled
        self.logger.info(
            "Data Logging: %s", "Enabled" if self.data_logging_enabled else "Disabled"
        )
        return self.data_logging_enabled

    def clear_logged_data(self) -> None:
        self.logged_data.clear()

    def add_response(self, envelope, clock: datetime | None = None) -> int:
        """Ingest one batched API response.

        Returns:
            Number of fragments stored.
        """
        clock = clock or datetime.now(pytz.UTC)
        stored = self.store.ingest_envelope(envelope, clock)

        if self.data_logging_enabled and isinstance(envelope, dict):
            for item in envelope.get("results") or []:
                if not is_well_formed_item(item):
                    continue
                ident = item["ident"]
                payload = item["result"]["response"]
                if classify(ident, payload, self.store.catalog, self.store.named_index) is None:
                    self.logger.info("Unknown response: <%s>", ident)
                self.logged_data.append((ident, payload))

        return stored

    # -------------------------------------------------------
    # Exports
    # -------------------------------------------------------
    def export_json(
        self, content, name: str, collection_time: datetime | None = None
    ) -> Path | None:
        """Write `content` as JSON to {output_dir}/{name}_{weekStart}.json.

        Returns:
            The written path, or None if the file could not be written.
        """
        week_start = self.calendar.week_dates(collection_time or datetime.now(pytz.UTC))[0]
        path = self.output_dir / f"{name}_{week_start}.json"
        if not save_text(path, json.dumps(content, ensure_ascii=False)):
            return None
        self.logger.info("Exported %s to %s", name, path)
        return path

    def export_snapshot(self, collection_time: datetime | None = None) -> Path | None:
        """Export every collected dataset (``data_<weekStart>.json``)."""
        return self.export_json(self.store.to_snapshot(), "data", collection_time)

    def export_logged_data(self, collection_time: datetime | None = None) -> Path | None:
        """Export the raw fragments seen while logging (``logged_data_<weekStart>.json``)."""
        return self.export_json(
            [[ident, payload] for ident, payload in self.logged_data],
            "logged_data",
            collection_time,
        )
