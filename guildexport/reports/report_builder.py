"""
Report Builder

Turns a completed `AggregationStore` into the three weekly report tables.

Stages:
1. Validate: every needed dataset collected, on the collection day, with
   last week's guild war leaderboard.
2. Build: join the datasets into one record per member (`GuildWeek`).
3. Emit: Member Stats, Event Log and Raid Boss Log tables.

The store is only read; nothing built here is written back to it.

Example:
    >>> builder = ReportBuilder(store, collection_time)
    >>> result = builder.build()
    >>> result.member_stats.head()
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pandas as pd

from guildexport.ingestion.catalog import DATASET_CATALOG, DatasetDescriptor
from guildexport.ingestion.store import AggregationStore
from guildexport.reports.boss_log import BossLogReport
from guildexport.reports.event_log import EventLogReport
from guildexport.reports.member_stats import MemberStatsReport
from guildexport.reports.members import GuildWeek, build_guild_week
from guildexport.reports.validate import (
    StaleCollectionError,
    check_collected,
    check_collection_dates,
    check_guild_war_leaderboard,
)
from guildexport.shared.config import Config
from guildexport.shared.game_calendar import GameCalendar
from guildexport.shared.utils import setup_logger, to_utc


@dataclass
class ReportResult:
    """The three report tables of one week."""

    member_stats: pd.DataFrame
    event_log: pd.DataFrame
    boss_log: pd.DataFrame
    week_dates: list[str]
    missing_battle_logs: list[str] = field(default_factory=list)
    stale_entries: list[str] = field(default_factory=list)

    @property
    def week_start(self) -> str:
        return self.week_dates[0]


class ReportBuilder:
    """Validate a collection and build its weekly reports."""

    def __init__(
        self,
        store: AggregationStore,
        collection_time: datetime,
        calendar: GameCalendar | None = None,
        catalog: Sequence[DatasetDescriptor] = DATASET_CATALOG,
        collection_weekday: int | None = None,
        grace_weekday: int | None = None,
        log_file: Path | None = None,
    ) -> None:
        self.store = store
        self.collection_time = to_utc(collection_time)
        self.calendar = calendar or GameCalendar()
        self.catalog = tuple(catalog)
        self.collection_weekday = (
            Config.COLLECTION_WEEKDAY if collection_weekday is None else collection_weekday
        )
        self.grace_weekday = Config.GRACE_WEEKDAY if grace_weekday is None else grace_weekday
        self.logger = setup_logger(self.__class__.__name__, log_file)

        self.member_stats_report = MemberStatsReport(self.calendar, log_file)
        self.event_log_report = EventLogReport(self.calendar, log_file)
        self.boss_log_report = BossLogReport(log_file)

    def validate(self, allow_stale: bool = False) -> list[str]:
        """Run every pre-report check.

        Args:
            allow_stale: Continue when datasets were collected on the wrong day.

        Returns:
            Descriptions of the stale datasets that were accepted.

        Raises:
            IncompleteCollectionError: A needed dataset is missing.
            StaleCollectionError: Stale datasets and `allow_stale` is False.
            LeaderboardMismatchError: The leaderboard is not last week's league page.
        """
        check_collected(self.store, self.catalog)

        stale = []
        try:
            check_collection_dates(
                self.store,
                self.calendar,
                self.collection_time,
                self.collection_weekday,
                self.grace_weekday,
            )
        except StaleCollectionError as exc:
            if not allow_stale:
                raise
            stale = exc.entries
            self.logger.warning("Proceeding with %d stale datasets: %s", len(stale), stale)

        check_guild_war_leaderboard(self.store)
        return stale

    def build_week(self) -> GuildWeek:
        return build_guild_week(self.store, self.calendar, self.collection_time)

    def build(self, allow_stale: bool = False) -> ReportResult:
        """Validate the store and build all report tables."""
        stale = self.validate(allow_stale)
        week = self.build_week()
        self.logger.info(
            "Building reports for week %s (%d members)", week.week_dates[0], len(week.members)
        )

        return ReportResult(
            member_stats=self.member_stats_report.build(week),
            event_log=self.event_log_report.build(week),
            boss_log=self.boss_log_report.build(week),
            week_dates=week.week_dates,
            missing_battle_logs=list(week.missing_battle_logs),
            stale_entries=stale,
        )
