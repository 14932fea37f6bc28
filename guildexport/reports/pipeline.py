"""Artifact delivery for a report run.

Writes the report tables in a fixed order:

1. stats_<week>.csv: on failure the content is handed to `fallback`
   (clipboard or any other alternate delivery) and `confirm` decides
   whether the remaining artifacts are still written.
2. event_log_<week>.csv: on failure the run stops.
3. boss_log_<week>.csv: on failure the run stops.

The raw snapshot (data_<week>.json) is written by
`ResponseCollector.export_snapshot`.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from guildexport.reports.base_report import PersistenceFailure
from guildexport.reports.boss_log import BossLogReport
from guildexport.reports.event_log import EventLogReport
from guildexport.reports.member_stats import MemberStatsReport
from guildexport.reports.report_builder import ReportResult
from guildexport.shared.config import Config
from guildexport.shared.utils import setup_logger

logger = setup_logger(__name__)

Fallback = Callable[[str, str], None]
Confirm = Callable[[str], bool]


@dataclass
class ExportOutcome:
    """Which artifacts were written and whether the run completed."""

    written: list[Path] = field(default_factory=list)
    delivered_elsewhere: list[str] = field(default_factory=list)
    completed: bool = True
    failure: PersistenceFailure | None = None


def export_report(
    result: ReportResult,
    output_dir: Path | None = None,
    fallback: Fallback | None = None,
    confirm: Confirm | None = None,
) -> ExportOutcome:
    """Write the three report tables of `result`.

    Args:
        result: Built report tables.
        output_dir: Target directory (default: data/reports/).
        fallback: Called with (file name, content) when the stats table
            cannot be written.
        confirm: Called with a message after a fallback delivery; returning
            False stops the run. Without a callback the run continues.

    Returns:
        ExportOutcome describing what was delivered.
    """
    outcome = ExportOutcome()
    output_dir = output_dir or Config.REPORTS_DIR

    try:
        outcome.written.append(
            MemberStatsReport().export(result.member_stats, result.week_start, output_dir)
        )
    except PersistenceFailure as exc:
        logger.error("%s", exc)
        if fallback is not None:
            fallback(exc.path.name, exc.content)
            outcome.delivered_elsewhere.append(exc.path.name)
        proceed = confirm(f"{exc} Do you want to continue?") if confirm is not None else True
        if not proceed:
            logger.info("Export cancelled after %s", exc.path.name)
            outcome.completed = False
            outcome.failure = exc
            return outcome

    for report, table in (
        (EventLogReport(), result.event_log),
        (BossLogReport(), result.boss_log),
    ):
        try:
            outcome.written.append(report.export(table, result.week_start, output_dir))
        except PersistenceFailure as exc:
            logger.error("%s; remaining artifacts skipped", exc)
            outcome.completed = False
            outcome.failure = exc
            return outcome

    return outcome

