"""Tests for ReportBuilder: validation order and end-to-end report tables."""

from datetime import timedelta

import pytest

from guildexport.reports.report_builder import ReportBuilder, ReportResult
from guildexport.reports.validate import (
    IncompleteCollectionError,
    LeaderboardMismatchError,
    StaleCollectionError,
)


@pytest.fixture
def builder(full_store, calendar, collection_time):
    return ReportBuilder(full_store, collection_time, calendar=calendar)


class TestValidate:
    def test_valid_collection(self, builder):
        assert builder.validate() == []

    def test_missing_dataset_is_reported_first(self, full_store, builder, calendar, collection_time):
        full_store.records.pop("clanGetLog")
        full_store["guildStats"].coordinate = calendar.day_info(collection_time - timedelta(days=1))

        with pytest.raises(IncompleteCollectionError) as exc_info:
            builder.validate()

        assert not isinstance(exc_info.value, StaleCollectionError)
        assert exc_info.value.missing == ["Guild Status"]

    def test_stale_dataset_raises_by_default(self, full_store, builder, calendar, collection_time):
        full_store["guildStats"].coordinate = calendar.day_info(collection_time - timedelta(days=1))

        with pytest.raises(StaleCollectionError) as exc_info:
            builder.validate()

        assert exc_info.value.entries == ["Guild Stats"]

    def test_stale_dataset_accepted(self, full_store, builder, calendar, collection_time):
        full_store["guildStats"].coordinate = calendar.day_info(collection_time - timedelta(days=1))

        assert builder.validate(allow_stale=True) == ["Guild Stats"]

    def test_leaderboard_checked_after_dates(self, full_store, builder):
        full_store.payload("clanWarLeaderboard")["top"][0]["league"] = 3

        with pytest.raises(LeaderboardMismatchError):
            builder.validate()

    def test_monday_grace_run(self, full_store, calendar, collection_time):
        monday = collection_time + timedelta(days=1)
        builder = ReportBuilder(full_store, monday, calendar=calendar)

        assert builder.validate() == []


class TestBuild:
    def test_result_tables(self, builder, week_dates):
        result = builder.build()

        assert isinstance(result, ReportResult)
        assert result.week_dates == week_dates
        assert result.week_start == "2024-06-10"
        assert len(result.member_stats) == 3
        assert len(result.event_log) == 17
        assert len(result.boss_log) == 1
        assert result.missing_battle_logs == ["Wolves Server 34"]
        assert result.stale_entries == []

    def test_member_stats_end_to_end(self, builder):
        stats = builder.build().member_stats.set_index("name")

        assert stats.loc["Alice", "titanite"] == "1,2,3,4,5,6,7"
        assert stats.loc["Alice", "guildWar"] == "2,2,2,2,2,2,2"
        assert stats.loc["Alice", "cowHero"] == ",,,2,,,"
        assert stats.loc["Alice", "cowTitan"] == ",,,1,,,"
        assert stats.loc["Bob", "joinDate"] == "2024-06-13"
        assert stats.loc["Bob", "activity"] == ",,,10,10,10,10"
        assert stats.loc["Carol", "cowHero"] == ",,,0,,,"
        assert stats.loc["Carol", "raidBossDamage"] == 0

    def test_stale_build_records_entries(self, full_store, builder, calendar, collection_time):
        full_store["clanGetInfo"].coordinate = calendar.day_info(collection_time - timedelta(days=7))

        result = builder.build(allow_stale=True)

        assert result.stale_entries == ["Guild Info"]
        assert len(result.member_stats) == 3

    def test_store_unchanged_by_build(self, full_store, builder):
        before = full_store.dumps()
        builder.build()
        assert full_store.dumps() == before

