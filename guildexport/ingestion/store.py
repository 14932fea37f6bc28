"""Accumulation-aware store of collected datasets.

One `AggregationStore` holds everything collected during a session, keyed by
dataset id. Overwrite datasets keep only the latest payload; accumulation
datasets (e.g. the Clash of Worlds battle log, loaded once per match) keep
every payload in arrival order.

Snapshot format (``data_<weekStart>.json``):

    [
        {
            "name": "guildStats",
            "description": "Guild Stats",
            "datetime": {"timestamp": "2024-06-16T20:00:00.000Z", "dayInWeek": 0, "weekId": 2841},
            "data": {...}
        },
        ...
    ]
"""

import json
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import pytz

from guildexport.ingestion.catalog import DATASET_CATALOG, NAMED_DATASETS, DatasetDescriptor
from guildexport.ingestion.classifier import classify
from guildexport.shared.game_calendar import (
    CalendarCoordinate,
    GameCalendar,
    format_timestamp,
    parse_timestamp,
)
from guildexport.shared.utils import setup_logger, to_utc


class SnapshotParseError(ValueError):
    """Raised when a snapshot cannot be loaded."""


@dataclass
class DatasetRecord:
    """One collected dataset.

    `payload` is the raw response for overwrite datasets and a list of raw
    responses for accumulation datasets.
    """

    dataset_id: str
    description: str
    coordinate: CalendarCoordinate
    payload: object

    def to_dict(self) -> dict:
        return {
            "name": self.dataset_id,
            "description": self.description,
            "datetime": {
                "timestamp": format_timestamp(self.coordinate.timestamp),
                "dayInWeek": self.coordinate.day_in_week,
                "weekId": self.coordinate.week_id,
            },
            "data": self.payload,
        }


class AggregationStore:
    """Keyed mapping from dataset id to its collected record."""

    def __init__(
        self,
        catalog: Sequence[DatasetDescriptor] = DATASET_CATALOG,
        named_index: dict[str, DatasetDescriptor] | None = None,
        calendar: GameCalendar | None = None,
        log_file: Path | None = None,
    ) -> None:
        self.catalog = tuple(catalog)
        if named_index is None:
            named_index = (
                NAMED_DATASETS
                if catalog is DATASET_CATALOG
                else {info.id: info for info in self.catalog if info.named}
            )
        self.named_index = named_index
        self.calendar = calendar or GameCalendar()
        self.records: dict[str, DatasetRecord] = {}
        self.logger = setup_logger(self.__class__.__name__, log_file)

    # -------------------------------------------------------
    # Mapping protocol
    # -------------------------------------------------------
    def __contains__(self, dataset_id: str) -> bool:
        return dataset_id in self.records

    def __getitem__(self, dataset_id: str) -> DatasetRecord:
        return self.records[dataset_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def get(self, dataset_id: str) -> DatasetRecord | None:
        return self.records.get(dataset_id)

    def payload(self, dataset_id: str, default=None):
        record = self.records.get(dataset_id)
        return default if record is None else record.payload

    def values(self) -> list[DatasetRecord]:
        return list(self.records.values())

    def clear(self) -> None:
        self.records.clear()

    # -------------------------------------------------------
    # Ingest
    # -------------------------------------------------------
    def ingest(
        self,
        identifier: str | None,
        payload,
        clock: datetime | None = None,
    ) -> DatasetRecord | None:
        """Classify one response fragment and store it.

        Args:
            identifier: Fragment identifier (`ident`).
            payload: Fragment body (`result.response`).
            clock: Ingest time (default: now).

        Returns:
            The updated record, or None if the fragment matched no dataset.
        """
        info = classify(identifier, payload, self.catalog, self.named_index)
        if info is None:
            self.logger.debug("Unclassified response: <%s>", identifier)
            return None

        coordinate = self.calendar.day_info(clock or datetime.now(pytz.UTC))

        if info.accumulation:
            record = self.records.get(info.id)
            if record is not None:
                record.payload.append(payload)
            else:
                record = DatasetRecord(info.id, info.description, coordinate, [payload])
                self.records[info.id] = record
        else:
            record = DatasetRecord(info.id, info.description, coordinate, payload)
            self.records[info.id] = record

        self.logger.info("Collected %s", info.description)
        return record

    def ingest_envelope(self, envelope, clock: datetime | None = None) -> int:
        """Ingest every fragment of a batched API response.

        Expected shape::

            {"results": [{"ident": "...", "result": {"response": ...}}, ...]}

        Malformed envelopes and items are logged and skipped.

        Returns:
            Number of fragments that were classified and stored.
        """
        if not isinstance(envelope, dict) or not isinstance(envelope.get("results"), list):
            self.logger.warning("Informal data: %r", envelope)
            return 0

        clock = clock or datetime.now(pytz.UTC)
        stored = 0
        for item in envelope["results"]:
            if not is_well_formed_item(item):
                self.logger.warning("Informal data: %r", item)
                continue
            if self.ingest(item["ident"], item["result"]["response"], clock) is not None:
                stored += 1
        return stored

    # -------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------
    def to_snapshot(self) -> list[dict]:
        return [record.to_dict() for record in self.records.values()]

    def dumps(self) -> str:
        return json.dumps(self.to_snapshot(), ensure_ascii=False)

    @classmethod
    def from_snapshot(
        cls,
        items: list[dict],
        calendar: GameCalendar | None = None,
        **kwargs,
    ) -> "AggregationStore":
        """Rebuild a store from snapshot items.

        Raises:
            SnapshotParseError: If an item lacks the expected fields.
        """
        store = cls(calendar=calendar, **kwargs)
        if not isinstance(items, list):
            raise SnapshotParseError(
                f"An unexpected error occurred: snapshot must be a list, got {type(items).__name__}"
            )
        for item in items:
            try:
                stamp = item["datetime"]
                timestamp = parse_timestamp(stamp["timestamp"])
                computed = store.calendar.day_info(timestamp)
                coordinate = CalendarCoordinate(
                    timestamp=to_utc(timestamp),
                    day_in_week=int(stamp.get("dayInWeek", computed.day_in_week)),
                    week_id=int(stamp.get("weekId", computed.week_id)),
                    week_start=computed.week_start,
                    week_end=computed.week_end,
                )
                record = DatasetRecord(
                    dataset_id=item["name"],
                    description=item.get("description", item["name"]),
                    coordinate=coordinate,
                    payload=item["data"],
                )
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                raise SnapshotParseError(f"An unexpected error occurred: {exc!r}") from exc
            store.records[record.dataset_id] = record
        return store

    @classmethod
    def loads(cls, content: str, calendar: GameCalendar | None = None, **kwargs) -> "AggregationStore":
        """Rebuild a store from snapshot JSON text.

        Raises:
            SnapshotParseError: On invalid JSON or an invalid snapshot layout.
        """
        try:
            items = json.loads(content)
        except json.JSONDecodeError as exc:
            raise SnapshotParseError(f"Invalid JSON format: {exc}") from exc
        return cls.from_snapshot(items, calendar=calendar, **kwargs)


def is_well_formed_item(item) -> bool:
    """True if an envelope item carries `ident` and `result.response`."""
    return (
        isinstance(item, dict)
        and "ident" in item
        and isinstance(item.get("result"), dict)
        and "response" in item["result"]
    )
