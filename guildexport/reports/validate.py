"""
Collection Validation

Checks run before any report is built:
- every needed dataset was collected
- every dataset was captured on the collection day of the reported week
- the guild war leaderboard shown is the one of last week's league
"""

from collections.abc import Sequence
from datetime import datetime

from guildexport.ingestion.catalog import DATASET_CATALOG, DatasetDescriptor
from guildexport.ingestion.store import AggregationStore
from guildexport.shared.game_calendar import GameCalendar
from guildexport.shared.utils import to_number


class IncompleteCollectionError(ValueError):
    """The collected data cannot produce a report.

    Attributes:
        missing: Descriptions of the datasets (or items) that are missing or invalid.
    """

    def __init__(self, message: str, missing: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)


class StaleCollectionError(IncompleteCollectionError):
    """Datasets were collected on the wrong day; the user may proceed anyway."""

    @property
    def entries(self) -> list[str]:
        return self.missing


class LeaderboardMismatchError(IncompleteCollectionError):
    """The stored leaderboard is not last week's league page."""


def _bullet_list(items: Sequence[str]) -> str:
    return "\n- " + "\n- ".join(items)


# -----------------------------
# Completeness
# -----------------------------

def find_missing_datasets(
    store: AggregationStore,
    catalog: Sequence[DatasetDescriptor] = DATASET_CATALOG,
) -> list[str]:
    """Descriptions of needed datasets that are absent or empty."""
    missing = []
    for info in catalog:
        if not info.needed:
            continue
        record = store.get(info.id)
        if record is None:
            missing.append(info.description)
        elif isinstance(record.payload, list) and len(record.payload) == 0:
            missing.append(info.description)
    return missing


def check_collected(
    store: AggregationStore,
    catalog: Sequence[DatasetDescriptor] = DATASET_CATALOG,
) -> None:
    """
    Raises:
        IncompleteCollectionError: listing every missing dataset.
    """
    missing = find_missing_datasets(store, catalog)
    if missing:
        raise IncompleteCollectionError(
            f"The following data has not been collected:\n{_bullet_list(missing)}",
            missing,
        )


# -----------------------------
# Collection day and week
# -----------------------------

def find_stale_datasets(
    store: AggregationStore,
    calendar: GameCalendar,
    collection_time: datetime,
    collection_weekday: int = 0,
    grace_weekday: int = 1,
) -> list[str]:
    """Descriptions of records not captured on the collection day of the report week.

    A record is valid when it was captured on `collection_weekday` and either
    the report runs on that same weekday of the same week, or the report runs
    on `grace_weekday` of the following week.
    """
    now = calendar.day_info(collection_time)
    invalid = []
    for record in store.values():
        coordinate = record.coordinate
        on_collection_day = coordinate.day_in_week == collection_weekday
        same_week = coordinate.week_id == now.week_id and now.day_in_week == collection_weekday
        next_week_grace = coordinate.week_id + 1 == now.week_id and now.day_in_week == grace_weekday
        if not (on_collection_day and (same_week or next_week_grace)):
            invalid.append(record.description)
    return invalid


def check_collection_dates(
    store: AggregationStore,
    calendar: GameCalendar,
    collection_time: datetime,
    collection_weekday: int = 0,
    grace_weekday: int = 1,
) -> None:
    """
    Raises:
        StaleCollectionError: listing every record captured on the wrong day.
    """
    invalid = find_stale_datasets(
        store, calendar, collection_time, collection_weekday, grace_weekday
    )
    if invalid:
        raise StaleCollectionError(
            "The following data was not collected on the collection day or belongs to "
            f"a different week:\n{_bullet_list(invalid)}",
            invalid,
        )


# -----------------------------
# Guild war leaderboard
# -----------------------------

def check_guild_war_leaderboard(store: AggregationStore) -> None:
    """
    The leaderboard must be last week's league page: its leading entry has a
    positive score and the same league as the guild's previous war result.

    Raises:
        LeaderboardMismatchError
    """
    war_result = store.payload("clanWarsLog")["results"]["previous"]
    leaderboard = store.payload("clanWarLeaderboard")
    top = leaderboard.get("top") or []
    if not top:
        raise LeaderboardMismatchError(
            "The Guild War Leaderboard has no entries.", ["Guild War Leaderboard"]
        )

    leader = top[0]
    points = to_number(leader.get("points", 0))
    if not isinstance(points, (int, float)) or points <= 0 or (
        to_number(leader.get("league")) != to_number(war_result.get("league"))
    ):
        raise LeaderboardMismatchError(
            "You must refer to the league page of the guild from the previous week "
            "on the Guild War Leaderboard.",
            ["Guild War Leaderboard"],
        )
