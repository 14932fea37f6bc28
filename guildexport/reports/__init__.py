"""Weekly reports - validation, member index, report tables and delivery."""

from guildexport.reports.base_report import BaseReport, PersistenceFailure
from guildexport.reports.boss_log import BossLogReport
from guildexport.reports.day_stats import update_day_stats
from guildexport.reports.event_log import EventLogReport
from guildexport.reports.member_stats import MemberStatsReport
from guildexport.reports.pipeline import export_report
from guildexport.reports.report_builder import ReportBuilder, ReportResult
from guildexport.reports.validate import (
    IncompleteCollectionError,
    LeaderboardMismatchError,
    StaleCollectionError,
)

__all__ = [
    "BaseReport",
    "BossLogReport",
    "EventLogReport",
    "IncompleteCollectionError",
    "LeaderboardMismatchError",
    "MemberStatsReport",
    "PersistenceFailure",
    "ReportBuilder",
    "ReportResult",
    "StaleCollectionError",
    "export_report",
    "update_day_stats",
]
