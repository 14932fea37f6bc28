"""Tests for the day-stats patch of an exported Member Stats table."""

import copy
import io
from datetime import timedelta

import pandas as pd
import pytest

from guildexport.ingestion.store import AggregationStore
from guildexport.reports.day_stats import replace_day, update_day_stats
from guildexport.reports.member_stats import MemberStatsReport
from guildexport.reports.report_builder import ReportBuilder
from guildexport.reports.validate import IncompleteCollectionError, StaleCollectionError


@pytest.fixture
def stats_csv(full_store, calendar, collection_time) -> str:
    result = ReportBuilder(full_store, collection_time, calendar=calendar).build()
    return MemberStatsReport.to_csv(result.member_stats)


@pytest.fixture
def monday_store(calendar, collection_time, payloads) -> AggregationStore:
    """Guild Stats collected the day after the report week ended.

    Works on its own copy: `full_store` holds the original payload.
    """
    stats = copy.deepcopy(payloads["guildStats"])
    # Index 0 is Monday (today), index 1 the Sunday that just ended
    stats["stat"][0]["dungeonActivity"] = [0, 70, 6, 5, 4, 3, 2]
    stats["stat"][0]["activity"] = [0, 99, 10, 10, 10, 10, 10]
    stats["stat"][1]["clanGifts"] = [0, 5, 0, 0, 0, 0, 0]
    stats["stat"][1]["clanWarStat"] = [9] * 7

    store = AggregationStore(calendar=calendar)
    store.ingest("group_1_body", stats, clock=collection_time + timedelta(days=1))
    return store


def read_table(text: str) -> pd.DataFrame:
    return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False).set_index("name")


class TestReplaceDay:
    def test_replace(self):
        assert replace_day("1,2,3,4,5,6,7", 6, 70) == "1,2,3,4,5,6,70"

    def test_blank_cell_is_padded(self):
        assert replace_day("", 6, 3) == ",,,,,,3"

    def test_missing_value_blanks_the_day(self):
        assert replace_day("1,2,3,4,5,6,7", 0, None) == ",2,3,4,5,6,7"


class TestUpdateDayStats:
    def test_patches_sunday_column(self, monday_store, stats_csv):
        patched = read_table(update_day_stats(monday_store, stats_csv, weekday=0))

        assert patched.loc["Alice", "titanite"] == "1,2,3,4,5,6,70"
        assert patched.loc["Alice", "activity"] == "10,10,10,10,10,10,99"
        assert patched.loc["Bob", "gifts"] == ",,,0,0,0,5"

    def test_other_columns_untouched(self, monday_store, stats_csv):
        original = read_table(stats_csv)
        patched = read_table(update_day_stats(monday_store, stats_csv, weekday=0))

        assert list(patched.columns) == list(original.columns)
        for column in ("id", "level", "joinDate", "lastLoginTime", "warrior", "guildWar", "cowHero"):
            assert patched[column].tolist() == original[column].tolist()

    def test_patches_earlier_weekday(self, monday_store, stats_csv):
        # Saturday is two days back from a Monday collection
        patched = read_table(update_day_stats(monday_store, stats_csv, weekday=6))

        assert patched.loc["Alice", "titanite"] == "1,2,3,4,5,6,7"
        assert patched.loc["Carol", "activity"] == "10,10,10,10,10,10,10"

    def test_guild_stats_missing(self, stats_csv, calendar):
        with pytest.raises(IncompleteCollectionError) as exc_info:
            update_day_stats(AggregationStore(calendar=calendar), stats_csv)

        assert not isinstance(exc_info.value, StaleCollectionError)
        assert exc_info.value.missing == ["Guild Stats"]

    def test_collected_on_the_patched_day(self, full_store, stats_csv):
        with pytest.raises(StaleCollectionError) as exc_info:
            update_day_stats(full_store, stats_csv, weekday=0)

        assert "collected on Sunday" in str(exc_info.value)
        assert exc_info.value.entries == ["Guild Stats"]

    def test_table_without_series_columns(self, monday_store):
        with pytest.raises(ValueError, match="titanite"):
            update_day_stats(monday_store, "id,name\n101,Alice\n")
