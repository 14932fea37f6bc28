"""Event Log report.

A generic nine-column chronicle of the week: guild war and Clash of Worlds
matches and results, raid outcome, guild snapshot, membership changes and
the full roster id listing.
"""

from pathlib import Path

from guildexport.reports.base_report import BaseReport
from guildexport.reports.members import (
    MEMBERSHIP_EVENTS,
    GuildWeek,
    membership_target,
)
from guildexport.reports.prestige import (
    final_prestige_progress,
    guild_name,
    prestige_level,
    win_status,
)
from guildexport.shared.game_calendar import GameCalendar, monday_index
from guildexport.shared.utils import from_ctime, to_number

GUILD_WAR_LEAGUES = ["Gold League", "Silver League", "Bronze League", "Qualifying League"]
COW_LEAGUES = ["Duke League", "Marquis League", "Earl League", "Viscount League", "Baron League"]
COW_DIVISIONS_PER_LEAGUE = 5
RAID_TYPES = ["Cradle of the Stars", "The Phantom Orchestra"]

GUILD_WAR_HISTORY_LENGTH = 5

SYSTEM_PERFORMER = "<system>"


def _label(labels: list[str], index: int) -> str | None:
    return labels[index] if 0 <= index < len(labels) else None


def _row(date, kind, name, status=None, value1=None, value2=None, value3=None, value4=None) -> list:
    return [date, None, kind, name, status, value1, value2, value3, value4]


class EventLogReport(BaseReport):
    """Weekly guild event chronicle."""

    CATEGORY = "event_log"
    COLUMNS = ["Date", "Days", "Type", "Name", "Status", "Value1", "Value2", "Value3", "Value4"]

    def __init__(self, calendar: GameCalendar | None = None, log_file: Path | None = None) -> None:
        super().__init__(log_file)
        self.calendar = calendar or GameCalendar()

    def rows(self, week: GuildWeek) -> list[list]:
        rows = self.guild_war_matches(week)
        rows.append(self.guild_war_result(week))
        rows.extend(self.cow_rows(week))
        rows.extend(self.raid_rows(week))
        rows.append(self.guild_info(week))
        rows.extend(self.membership_updates(week))
        rows.extend(self.roster_listing(week))
        return rows

    # -------------------------------------------------------
    # Guild War
    # -------------------------------------------------------
    def guild_war_matches(self, week: GuildWeek) -> list[list]:
        history = week.data("clanWarsLog").get("history") or []
        rows = []
        for match in history[-GUILD_WAR_HISTORY_LENGTH:]:
            day = int(to_number(match["day"])) - 1
            points = to_number(match["points"])
            enemy_points = to_number(match["enemyPoints"])
            rows.append(_row(
                _label(week.week_dates, day),
                "Guild War",
                str(match["enemyClan"]["title"]).strip(),
                win_status(points, enemy_points),
                points,
                enemy_points,
            ))
        return rows

    def guild_war_result(self, week: GuildWeek) -> list:
        result = week.data("clanWarsLog")["results"]["previous"]
        top = week.data("clanWarLeaderboard").get("top") or []
        league = int(to_number(result["league"]))
        position = int(to_number(result["position"]))

        points = gap_to_above = gap_to_below = None
        if 1 <= position <= len(top):
            points = to_number(top[position - 1]["points"])
            above = to_number(top[position - 2]["points"]) if position >= 2 else points
            below = to_number(top[position]["points"]) if position < len(top) else points
            gap_to_above = above - points
            gap_to_below = below - points

        season = str(week.data("clanWarGetInfo")["season"])
        return _row(
            week.week_dates[5],
            "Guild War - Result",
            f"Week {int(season[-2:])}",
            _label(GUILD_WAR_LEAGUES, league - 1),
            position,
            points,
            gap_to_above,
            gap_to_below,
        )

    # -------------------------------------------------------
    # Clash of Worlds
    # -------------------------------------------------------
    def cow_rows(self, week: GuildWeek) -> list[list]:
        rows = []
        cow_week = None
        for idx, match in enumerate(week.cow_matches):
            points = to_number(match["points"])
            enemy_points = to_number(match["enemyPoints"])
            if cow_week is None:
                cow_week = (int(to_number(match["war"])) + 1) // 2
            rows.append(_row(
                week.week_dates[idx * 3],
                "Clash of Worlds",
                guild_name(match["enemyClan"]["title"], match["enemyClan"]["serverId"]),
                win_status(points, enemy_points),
                points,
                enemy_points,
                to_number(match["ratingDelta"]),
            ))

        info = week.data("crossClanWar_getInfo")
        if week.cow_matches and info is not None:
            league = int(to_number(info["league"])) - 1
            rows.append(_row(
                week.week_dates[6],
                "Clash of Worlds - Result",
                f"Season {info['season']}. Week {cow_week}",
                _label(COW_LEAGUES, league),
                to_number(info["division"]) - league * COW_DIVISIONS_PER_LEAGUE,
                to_number(info["rating"]),
            ))
        elif week.cow_matches:
            self.logger.info("Clash of Worlds Info not collected; season result skipped")
        return rows

    # -------------------------------------------------------
    # Raid
    # -------------------------------------------------------
    def raid_rows(self, week: GuildWeek) -> list[list]:
        stats = week.data("clanRaid_getInfo")["stats"]
        boss_id = int(to_number(stats["currentBoss"])) - 1
        members = list(week.members.values())

        boss_damage = sum((member.raid or {}).get("bossDamage") or 0 for member in members)
        boss_attempts = sum((member.raid or {}).get("bossAttemptsSpent") or 0 for member in members)
        max_level_killed = max(
            (int(to_number(level)) for level, count in (stats.get("bossKilled") or {}).items() if count),
            default=0,
        )

        set_level = [event for event in week.event_history if event.get("event") == "clanRaidSetLevel"]
        next_level = set_level[0]["details"]["level"] if set_level else None

        return [
            _row(
                week.week_dates[6],
                "Raid - Result",
                _label(RAID_TYPES, boss_id),
                "Victory" if max_level_killed else "Defeat",
                max_level_killed,
                stats.get("points"),
                boss_damage,
                boss_attempts,
            ),
            _row(week.week_dates[6], "Raid Difficulty", _label(RAID_TYPES, 1 - boss_id), None, next_level),
        ]

    # -------------------------------------------------------
    # Guild
    # -------------------------------------------------------
    def guild_info(self, week: GuildWeek) -> list:
        clan = week.data("clanGetInfo")["clan"]
        prestige = week.data("clan_prestigeGetInfo")
        progress = to_number(prestige["prestigeCount"])
        final_progress = final_prestige_progress(
            progress, week.collection_time, from_ctime(prestige["endTime"])
        )
        return _row(
            week.week_dates[6],
            "Guild Info",
            week.guild_name,
            None,
            progress,
            prestige_level(final_progress),
            clan.get("giftsCount"),
        )

    # -------------------------------------------------------
    # Membership
    # -------------------------------------------------------
    def _member_name(self, week: GuildWeek, member_id: int, fallback):
        member = week.members.get(member_id)
        if member is not None:
            return member.name
        logged = week.logged_members.get(member_id)
        if logged is not None and logged.get("name") is not None:
            return logged["name"]
        return fallback

    def membership_updates(self, week: GuildWeek) -> list[list]:
        """Membership events of the week, newest first."""
        history = list(reversed(week.event_history))
        # Any blacklist event of the week decides between Banned and Kicked
        blacklist = next(
            (event for event in history if str(event.get("event", "")).startswith("blackList")),
            None,
        )

        rows = []
        for event in history:
            kind = event.get("event")
            if kind not in MEMBERSHIP_EVENTS:
                continue
            target_id = membership_target(event)
            performer = None
            message = None
            if kind == "join":
                status = "Joined"
            elif kind == "leave":
                status = "Left"
            elif kind == "autokick":
                status = "Kicked"
                performer = SYSTEM_PERFORMER
                message = "Automatically dismissed due to inactive player settings."
            elif kind == "kick":
                if blacklist is not None and blacklist["event"] == "blackListAdd":
                    status = "Banned"
                    message = "Expelled due to inactivity and blacklisted."
                else:
                    status = "Kicked"
                    message = "Expelled due to long-term inactivity."
                performer = int(event["userId"])

            day_in_week = self.calendar.day_info(from_ctime(event["ctime"])).day_in_week
            rows.append(_row(
                week.week_dates[monday_index(day_in_week)],
                "Membership Update",
                self._member_name(week, target_id, event["userId"]),
                status,
                target_id,
                performer,
                message,
            ))
        return rows

    def roster_listing(self, week: GuildWeek) -> list[list]:
        """Every known member id, by name in descending order."""
        names = {member_id: member.get("name") for member_id, member in week.logged_members.items()}
        names.update({member_id: member.name for member_id, member in week.members.items()})
        listing = sorted(names.items(), key=lambda item: str(item[1] or "").casefold(), reverse=True)
        return [
            _row(week.week_dates[6], "Membership Update", name, "ID", member_id)
            for member_id, name in listing
        ]
