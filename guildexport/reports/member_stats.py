"""Member Stats report.

One row per current guild member: identity, weekly activity series and raid
contribution. Each weekly series is one cell holding seven comma-joined
values, Monday first, with the days outside the member's time in the guild
left blank.
"""

from pathlib import Path

from guildexport.reports.base_report import BaseReport, format_cell
from guildexport.reports.members import GuildWeek, MembershipState
from guildexport.shared.game_calendar import GameCalendar, monday_index

# Clash of Worlds series are masked four days later than the other series
COW_MASK_OFFSET = 4

BLANK_SERIES = ",,,,,,"


def mask_weekly_series(
    series: list,
    membership: MembershipState | None,
    offset: int = 0,
) -> str:
    """Serialize a Monday-first series, blanking days outside the membership.

    After a join, days before the join day (+ offset) are blank. After a
    leave or kick, days after the leave day (+ offset) are blank; the leave
    day itself keeps its value.
    """
    cells = list(series)
    if membership is not None:
        cutoff = monday_index(membership.day_in_week) + offset
        for idx in range(len(cells)):
            if (membership.joined and idx < cutoff) or (not membership.joined and idx > cutoff):
                cells[idx] = None
    return ",".join(format_cell(cell) for cell in cells)


class MemberStatsReport(BaseReport):
    """Weekly member statistics table."""

    CATEGORY = "stats"
    COLUMNS = [
        "id",
        "name",
        "level",
        "joinDate",
        "lastLoginTime",
        "warrior",
        "titanite",
        "activity",
        "guildPrestige",
        "adventures",
        "guildWar",
        "cowHero",
        "cowTitan",
        "gifts",
        "raidAvailable",
        "raidMinionAttacks",
        "raidMorale",
        "raidBossAttacks",
        "raidBossDamage",
    ]

    def __init__(self, calendar: GameCalendar | None = None, log_file: Path | None = None) -> None:
        super().__init__(log_file)
        self.calendar = calendar or GameCalendar()

    def rows(self, week: GuildWeek) -> list[list]:
        rows = []
        for member_id, member in week.members.items():
            state = member.membership
            join_date = (
                self.calendar.local_date(state.date) if state is not None and state.joined else None
            )
            raid = member.raid or {}

            rows.append([
                member_id,
                member.name,
                member.level,
                join_date,
                member.last_login_time,
                member.warrior,
                mask_weekly_series(member.series("titanite"), state),
                mask_weekly_series(member.series("activity"), state),
                mask_weekly_series(member.series("guildPrestige"), state),
                mask_weekly_series(member.series("adventures"), state),
                mask_weekly_series(member.series("guildWar"), state) if member.warrior else BLANK_SERIES,
                mask_weekly_series(member.series("cowHero"), state, COW_MASK_OFFSET),
                mask_weekly_series(member.series("cowTitan"), state, COW_MASK_OFFSET),
                mask_weekly_series(member.series("gifts"), state),
                raid.get("raidAvailable"),
                raid.get("nodesAttemptsSpent"),
                raid.get("nodesPoints"),
                raid.get("bossAttemptsSpent"),
                raid.get("bossDamage"),
            ])
        return rows
