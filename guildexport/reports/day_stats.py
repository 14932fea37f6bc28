"""Day-stats patch of an exported Member Stats table.

The weekly report is usually collected before the last day of the week is
over. Once that day has ended, a fresh Guild Stats collection carries its
final values; `update_day_stats` writes them into the matching column of
every weekly series cell, leaving every other cell of the table untouched.
"""

import io

import pandas as pd

from guildexport.ingestion.store import AggregationStore
from guildexport.reports.base_report import format_cell
from guildexport.reports.members import DAYS_IN_WEEK
from guildexport.reports.validate import IncompleteCollectionError, StaleCollectionError
from guildexport.shared.game_calendar import monday_index
from guildexport.shared.utils import is_numeric_like, setup_logger, to_number

logger = setup_logger(__name__)

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

# stats table column -> guildStats field; the guild war series is left as exported
PATCHED_FIELDS: dict[str, str] = {
    "titanite": "dungeonActivity",
    "activity": "activity",
    "guildPrestige": "prestigeStat",
    "adventures": "adventureStat",
    "gifts": "clanGifts",
}


def replace_day(cell: str, index: int, value) -> str:
    """Replace one day of a comma-joined weekly series."""
    days = cell.split(",") if cell else []
    days += [""] * (DAYS_IN_WEEK - len(days))
    days[index] = format_cell(value)
    return ",".join(days)


def _member_id(value: str) -> int | None:
    if not value.strip() or not is_numeric_like(value):
        return None
    return int(to_number(value))


def update_day_stats(
    store: AggregationStore,
    stats_csv_text: str,
    weekday: int = 0,
) -> str:
    """Patch one weekday of every member's weekly series.

    Args:
        store: Store holding a fresh `guildStats` record.
        stats_csv_text: Member Stats table as exported.
        weekday: Day to patch (Sunday = 0).

    Returns:
        The patched table as CSV text.

    Raises:
        IncompleteCollectionError: Guild Stats has not been collected.
        StaleCollectionError: Guild Stats was collected on `weekday` itself,
            before that day was over.
    """
    record = store.get("guildStats")
    if record is None:
        raise IncompleteCollectionError(
            "The following data has not been collected:\n\n- Guild Stats", ["Guild Stats"]
        )

    record_day = record.coordinate.day_in_week
    if record_day == weekday:
        raise StaleCollectionError(
            f"The following data was collected on {WEEKDAY_NAMES[weekday]}:"
            f"\n\n- {record.description}",
            [record.description],
        )

    df = pd.read_csv(io.StringIO(stats_csv_text), dtype=str, keep_default_na=False)
    missing_columns = [column for column in ["id", *PATCHED_FIELDS] if column not in df.columns]
    if missing_columns:
        raise ValueError(f"Stats table is missing columns: {', '.join(missing_columns)}")

    # Game series are newest first: index 0 is the day the record was captured
    raw_index = (record_day - weekday) % DAYS_IN_WEEK
    column_index = monday_index(weekday)

    rows_by_id = {}
    for position, value in enumerate(df["id"]):
        member_id = _member_id(value)
        if member_id is not None:
            rows_by_id[member_id] = position

    patched = 0
    for stat in record.payload.get("stat") or []:
        position = rows_by_id.get(int(stat["id"]))
        if position is None:
            continue
        for column, source_field in PATCHED_FIELDS.items():
            series = stat.get(source_field) or []
            value = series[raw_index] if raw_index < len(series) else None
            df.iat[position, df.columns.get_loc(column)] = replace_day(
                df.iat[position, df.columns.get_loc(column)], column_index, value
            )
        patched += 1

    logger.info("Patched %s stats of %d members", WEEKDAY_NAMES[weekday], patched)
    return df.to_csv(index=False, lineterminator="\n")
