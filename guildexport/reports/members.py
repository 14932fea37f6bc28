"""Member index for one report week.

Joins the roster, guild log, daily statistics, Clash of Worlds logs and raid
logs into one `MemberRecord` per current guild member. The result
(`GuildWeek`) is built fresh for each report run and never written back to
the store.

Weekly series are stored Monday first. The game sends them newest first
(index 0 = the day the statistics were loaded), so a Sunday collection is
reversed on merge.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime

from guildexport.ingestion.catalog import FORTS_BY_SLOT
from guildexport.ingestion.store import AggregationStore
from guildexport.reports.prestige import guild_name
from guildexport.shared.game_calendar import GameCalendar, monday_index
from guildexport.shared.utils import from_ctime, is_numeric_like, to_ctime, to_number

logger = logging.getLogger(__name__)

DAYS_IN_WEEK = 7

MEMBERSHIP_EVENTS = ("join", "leave", "autokick", "kick")

# report category -> guildStats field
STAT_FIELDS: dict[str, str] = {
    "activity": "activity",
    "titanite": "dungeonActivity",
    "adventures": "adventureStat",
    "guildWar": "clanWarStat",
    "guildPrestige": "prestigeStat",
    "gifts": "clanGifts",
}

RAID_DEFAULTS = {"hasActiveSubscription": None, "bonusClanBuffPoints": None, "raidAvailable": True}
RAID_COUNTERS = ("bossDamage", "nodesPoints", "nodesAttemptsSpent", "bossAttemptsSpent")

# Clash of Worlds battles: odd match numbers are fought on Thursday, even ones on Sunday
COW_ODD_MATCH_DAY = 3
COW_EVEN_MATCH_DAY = 6

# A titan attack weighs 100 hero attacks when tallying slots
TITAN_WEIGHT = 100


def empty_series() -> list:
    return [None] * DAYS_IN_WEEK


@dataclass
class MembershipState:
    """Last membership event of a member during the report week."""

    event: str
    joined: bool
    day_in_week: int
    date: datetime
    kicked_by: int | None = None


@dataclass
class MemberRecord:
    id: int
    name: str
    level: object = None
    last_login_time: object = None
    warrior: bool = False
    membership: MembershipState | None = None
    stats: dict[str, list] = field(default_factory=dict)
    raid: dict | None = None
    boss_log: list[dict] | None = None

    def series(self, category: str) -> list:
        return self.stats.get(category) or empty_series()


@dataclass
class GuildWeek:
    """Everything the report tables need, joined per member."""

    store: AggregationStore
    collection_time: datetime
    week_dates: list[str]
    week_start: datetime
    week_end: datetime
    guild_name: str
    members: dict[int, MemberRecord]
    logged_members: dict[int, dict]
    event_history: list[dict]
    cow_matches: list[dict]
    missing_battle_logs: list[str] = field(default_factory=list)

    def data(self, dataset_id: str):
        return self.store.payload(dataset_id)


# -----------------------------
# Roster and membership
# -----------------------------

def build_roster(clan: Mapping) -> dict[int, MemberRecord]:
    members = {}
    for member_id, member in (clan.get("members") or {}).items():
        members[int(member_id)] = MemberRecord(
            id=int(member_id),
            name=member.get("name", ""),
            level=member.get("level"),
            last_login_time=member.get("lastLoginTime"),
        )
    return members


def week_events(history: Iterable[dict], week_start: datetime, week_end: datetime) -> list[dict]:
    """History entries whose `ctime` falls inside [week_start, week_end)."""
    start = to_ctime(week_start)
    end = to_ctime(week_end)
    return [event for event in history if start <= float(event["ctime"]) < end]


def membership_target(event: Mapping) -> int:
    """Member affected by a membership event (kicks name the victim in `details`)."""
    if event["event"] == "kick":
        return int(event["details"]["userId"])
    return int(event["userId"])


def apply_membership_events(
    members: Mapping[int, MemberRecord],
    events: Iterable[dict],
    calendar: GameCalendar,
) -> None:
    for event in events:
        kind = event.get("event")
        if kind not in MEMBERSHIP_EVENTS:
            continue
        member = members.get(membership_target(event))
        if member is None:
            continue
        date = from_ctime(event["ctime"])
        member.membership = MembershipState(
            event=kind,
            joined=kind == "join",
            day_in_week=calendar.day_info(date).day_in_week,
            date=date,
            kicked_by=int(event["userId"]) if kind == "kick" else None,
        )


def mark_warriors(members: Mapping[int, MemberRecord], warrior_ids: Iterable) -> None:
    for warrior_id in warrior_ids:
        member = members.get(int(warrior_id))
        if member is not None:
            member.warrior = True


# -----------------------------
# Weekly statistics
# -----------------------------

def to_weekly_series(raw: Iterable | None) -> list:
    """Newest-first game series -> Monday-first series."""
    if raw is None:
        return empty_series()
    return list(reversed(list(raw)))


def merge_activity_stats(members: Mapping[int, MemberRecord], stat_rows: Iterable[dict]) -> None:
    for row in stat_rows:
        member = members.get(int(row["id"]))
        if member is None:
            continue
        for category, source_field in STAT_FIELDS.items():
            member.stats[category] = to_weekly_series(row.get(source_field))


# -----------------------------
# Clash of Worlds
# -----------------------------

def select_week_matches(
    cow_log: Iterable[dict], week_start: datetime, week_end: datetime
) -> list[dict]:
    """The two most recent matches of the week, oldest first."""
    matches = week_events(cow_log, week_start, week_end)
    matches.sort(key=lambda m: to_number(m["season"]) * 1000 + to_number(m["war"]), reverse=True)
    return list(reversed(matches[:2]))


def index_battle_logs(battle_logs: Iterable[dict], own_guild: str) -> dict[str, dict]:
    """Map enemy guild name -> battle log.

    The enemy is the first participant whose guild is not ours; a later log
    against the same enemy replaces an earlier one.
    """
    index = {}
    for battle_log in battle_logs:
        for user in (battle_log.get("users") or {}).values():
            enemy = guild_name(user.get("clanTitle", ""), user.get("serverId"))
            if enemy != own_guild:
                index[enemy] = battle_log
                break
    return index


def count_fort_attacks(attacks: Iterable[dict]) -> dict[int, tuple[int, int]]:
    """attacker id -> (hero attacks, titan attacks)."""
    weights: dict[int, int] = {}
    for attack in attacks:
        attacker_id = int(attack["attackerId"])
        fort = FORTS_BY_SLOT.get(int(attack["slotId"]))
        if fort is None:
            logger.warning("Unknown Clash of Worlds slot id: %s", attack["slotId"])
            continue
        weight = 1 if fort["type"] == "Hero" else TITAN_WEIGHT
        weights[attacker_id] = weights.get(attacker_id, 0) + weight
    return {
        attacker_id: (total % TITAN_WEIGHT, total // TITAN_WEIGHT)
        for attacker_id, total in weights.items()
    }


def cow_match_day(war) -> int:
    """Monday-based index of the day a Clash of Worlds match is fought."""
    return COW_ODD_MATCH_DAY if int(to_number(war)) % 2 != 0 else COW_EVEN_MATCH_DAY


def merge_cow_stats(
    members: Mapping[int, MemberRecord],
    matches: Iterable[dict],
    battle_index: Mapping[str, dict],
) -> list[str]:
    """Place hero/titan attack counts into the `cowHero`/`cowTitan` series.

    Returns:
        Enemy guild names whose battle log was not collected.
    """
    missing = []
    for match in matches:
        enemy = guild_name(match["enemyClan"]["title"], match["enemyClan"]["serverId"])
        battle_log = battle_index.get(enemy)
        if battle_log is None:
            missing.append(enemy)
            continue

        day = cow_match_day(match["war"])
        counts = count_fort_attacks(battle_log.get("attack") or [])
        for member_id, member in members.items():
            heroes, titans = counts.get(member_id, (0, 0))
            member.stats.setdefault("cowHero", empty_series())[day] = heroes
            member.stats.setdefault("cowTitan", empty_series())[day] = titans
    return missing


# -----------------------------
# Raid
# -----------------------------

def merge_raid_stats(
    members: Mapping[int, MemberRecord],
    member_info: Mapping[str, dict],
    brief_stats: Mapping[str, dict],
) -> None:
    """Join raid availability and contribution per member.

    Members without an availability entry are the collector themselves and
    default to "raid available". Available members default missing counters
    to zero; numeric strings become numbers.
    """
    for member_id, value in member_info.items():
        member = members.get(int(member_id))
        if member is not None:
            member.raid = dict(value)

    for member in members.values():
        if member.raid is None:
            member.raid = dict(RAID_DEFAULTS)

    for member_id, value in brief_stats.items():
        member = members.get(int(member_id))
        if member is not None and member.raid.get("raidAvailable"):
            member.raid = {**member.raid, **value}

    for member in members.values():
        if member.raid.get("raidAvailable"):
            for counter in RAID_COUNTERS:
                member.raid.setdefault(counter, 0)
        member.raid = {
            key: to_number(value) if isinstance(value, str) and is_numeric_like(value) else value
            for key, value in member.raid.items()
        }


def attach_boss_logs(members: Mapping[int, MemberRecord], boss_log: Mapping[str, dict]) -> None:
    for member_id, attempts in boss_log.items():
        member = members.get(int(member_id))
        if member is None:
            continue
        member.boss_log = [
            {
                "attackers": attempt.get("attackers"),
                "effects": attempt.get("effects"),
                "result": attempt.get("result"),
            }
            for attempt in attempts.values()
        ]


# -----------------------------
# Assembly
# -----------------------------

def build_guild_week(
    store: AggregationStore,
    calendar: GameCalendar,
    collection_time: datetime,
) -> GuildWeek:
    """Join every dataset of a validated store into a `GuildWeek`."""
    coordinate = calendar.day_info(collection_time)
    clan = store.payload("clanGetInfo")["clan"]
    guild_log = store.payload("clanGetLog")

    members = build_roster(clan)
    logged_members = {
        int(member_id): member for member_id, member in (guild_log.get("users") or {}).items()
    }

    history = week_events(guild_log.get("history") or [], coordinate.week_start, coordinate.week_end)
    apply_membership_events(members, history, calendar)
    mark_warriors(members, clan.get("warriors") or [])
    own_guild = guild_name(clan.get("title", ""), clan.get("serverId"))

    merge_activity_stats(members, store.payload("guildStats")["stat"])

    matches = select_week_matches(
        store.payload("crossClanWarLog") or [], coordinate.week_start, coordinate.week_end
    )
    battle_index = index_battle_logs(store.payload("crossClanWarBattleLog") or [], own_guild)
    missing = merge_cow_stats(members, matches, battle_index)
    for enemy in missing:
        logger.warning("Clash of Worlds Battle Log not collected for %s", enemy)

    merge_raid_stats(
        members,
        store.payload("clanRaidMemberInfo") or {},
        store.payload("clanRaidBriefStats") or {},
    )
    attach_boss_logs(members, store.payload("clanRaidBossLog") or {})

    return GuildWeek(
        store=store,
        collection_time=collection_time,
        week_dates=calendar.week_dates(collection_time),
        week_start=coordinate.week_start,
        week_end=coordinate.week_end,
        guild_name=own_guild,
        members=members,
        logged_members=logged_members,
        event_history=history,
        cow_matches=matches,
        missing_battle_logs=missing,
    )
