"""
Root pytest configuration.

Builds a complete synthetic collection for one report week (game server at
GMT+2, weeks starting Monday):

    week      2024-06-10 .. 2024-06-16
    collected 2024-06-16 20:00 UTC (Sunday in game time)

Guild "Knights" (server 12) has three members: Alice (101, warrior), Bob
(102, joined on Thursday) and Carol (103). Dave (104) left on Tuesday and
Eve (105) was kicked by Alice on Friday.
"""

import copy
from datetime import datetime

import pytest
import pytz

from guildexport.ingestion.store import AggregationStore
from guildexport.shared.game_calendar import GameCalendar
from guildexport.shared.utils import to_ctime

COLLECTION_TIME = datetime(2024, 6, 16, 20, 0, tzinfo=pytz.UTC)
WEEK_DATES = [
    "2024-06-10",
    "2024-06-11",
    "2024-06-12",
    "2024-06-13",
    "2024-06-14",
    "2024-06-15",
    "2024-06-16",
]


def ctime(*args) -> int:
    """Unix seconds of a UTC date/time."""
    return int(to_ctime(datetime(*args, tzinfo=pytz.UTC)))


def member_stat(member_id: int, activity=None, titanite=None) -> dict:
    """Guild Stats entry; series are newest first like the game sends them."""
    return {
        "id": str(member_id),
        "activity": activity or [10] * 7,
        "dungeonActivity": titanite or [10] * 7,
        "adventureStat": [1] * 7,
        "clanWarStat": [2] * 7,
        "prestigeStat": [3] * 7,
        "clanGifts": [0] * 7,
    }


def raid_attempt(result: dict, attackers: dict | None = None, effects: dict | None = None) -> dict:
    return {
        "result": result,
        "userId": 101,
        "typeId": 1,
        "attackers": attackers or {},
        "defenders": {},
        "effects": effects or {},
        "reward": {},
        "startTime": 1718400000,
        "seed": 42,
        "type": "clan_raid",
        "id": 1,
        "progress": [],
        "endTime": 1718400100,
    }


def build_payloads() -> dict[str, object]:
    """Payload of every dataset, keyed by dataset id."""
    return {
        "clanGetInfo": {
            "clan": {
                "id": 5,
                "title": "Knights ",
                "serverId": 12,
                "giftsCount": 42,
                "warriors": [101],
                "members": {
                    "101": {"id": "101", "name": "Alice", "level": "120", "lastLoginTime": "1718560000"},
                    "102": {"id": "102", "name": "Bob", "level": "80", "lastLoginTime": "1718550000"},
                    "103": {"id": "103", "name": "Carol", "level": "95", "lastLoginTime": "1718540000"},
                },
            },
            "membersStat": [],
            "stat": {},
            "serverResetTime": 1718510400,
            "clanWarEndSeasonTime": 1719000000,
            "freeClanChangeInterval": {},
            "giftUids": [],
        },
        "clanGetLog": {
            "history": [
                {"ctime": ctime(2024, 6, 5, 12), "event": "join", "userId": "103", "details": {}},
                {"ctime": ctime(2024, 6, 11, 12), "event": "leave", "userId": "104", "details": {}},
                {"ctime": ctime(2024, 6, 13, 12), "event": "join", "userId": "102", "details": {}},
                {
                    "ctime": ctime(2024, 6, 14, 12),
                    "event": "kick",
                    "userId": "101",
                    "details": {"userId": "105"},
                },
                {
                    "ctime": ctime(2024, 6, 15, 12),
                    "event": "clanRaidSetLevel",
                    "userId": "101",
                    "details": {"level": 120},
                },
            ],
            "users": {
                "101": {"id": "101", "name": "Alice"},
                "102": {"id": "102", "name": "Bob"},
                "103": {"id": "103", "name": "Carol"},
                "104": {"id": "104", "name": "Dave"},
                "105": {"id": "105", "name": "Eve"},
            },
        },
        "guildStats": {
            "stat": [
                member_stat(101, titanite=[7, 6, 5, 4, 3, 2, 1]),
                member_stat(102),
                member_stat(103),
            ],
            "today": 0,
            "dayInWeek": 0,
            "giftsCount": 5,
        },
        "clan_prestigeGetInfo": {
            "prestigeId": 1,
            "prestigeCount": 141000,
            "userPrestigeCount": 5000,
            "farmedPrestigeLevels": [],
            "endTime": ctime(2024, 6, 30, 14),
            "prestigeStartPopupViewed": True,
            "nextTime": ctime(2024, 7, 1, 14),
        },
        "clanWarGetInfo": {
            "season": 202424,
            "day": 6,
            "endTime": ctime(2024, 6, 16, 22),
            "nextWarTime": ctime(2024, 6, 17, 12),
            "nextLockTime": ctime(2024, 6, 17, 10),
        },
        "clanWarsLog": {
            "history": [
                {"day": "2", "enemyClan": {"title": " Foes "}, "points": 30, "enemyPoints": 20},
                {"day": "4", "enemyClan": {"title": "Raiders"}, "points": "10", "enemyPoints": 25},
            ],
            "results": {"previous": {"league": 2, "position": 3}},
        },
        "clanWarLeaderboard": {
            "top": [
                {"id": 1, "points": 900, "league": 2},
                {"id": 2, "points": 800, "league": 2},
                {"id": 5, "points": 700, "league": 2},
                {"id": 7, "points": 650, "league": 2},
            ],
            "promoCount": 2,
            "clans": {},
        },
        "crossClanWar_getInfo": {
            "nextWarTime": 0,
            "nextLockTime": 0,
            "plannedSeason": 12,
            "season": 12,
            "seasonEndTime": 0,
            "nextSeasonStartTime": 0,
            "requiredDefendedSlots": 0,
            "defendedSlots": 0,
            "settings": {},
            "war": {},
            "rating": 1500,
            "division": 8,
            "league": 2,
            "maxLeague": 1,
        },
        "crossClanWarLog": [
            {
                "season": 12,
                "war": 6,
                "ctime": ctime(2024, 6, 9, 18),
                "enemyClan": {"id": 899, "serverId": 31, "title": "Old Foes", "icon": {}},
                "ratingDelta": 5,
                "points": 70,
                "enemyPoints": 60,
                "rating": 1495,
            },
            {
                "season": 12,
                "war": 7,
                "ctime": ctime(2024, 6, 13, 18),
                "enemyClan": {"id": 900, "serverId": 33, "title": "Dragons", "icon": {}},
                "ratingDelta": 15,
                "points": 120,
                "enemyPoints": 80,
                "rating": 1510,
            },
            {
                "season": 12,
                "war": 8,
                "ctime": ctime(2024, 6, 16, 18),
                "enemyClan": {"id": 901, "serverId": 34, "title": "Wolves ", "icon": {}},
                "ratingDelta": -10,
                "points": 50,
                "enemyPoints": 90,
                "rating": 1500,
            },
        ],
        "crossClanWarBattleLog": [
            {
                "attack": [
                    {"attackerId": 101, "slotId": 1},
                    {"attackerId": 101, "slotId": 2},
                    {"attackerId": 101, "slotId": 15},
                    {"attackerId": 102, "slotId": 16},
                ],
                "defence": [],
                "users": {
                    "101": {"clanTitle": "Knights", "serverId": 12},
                    "900001": {"clanTitle": "Dragons", "serverId": 33},
                },
            },
        ],
        "clanRaid_getInfo": {
            "boss": {},
            "nodes": {},
            "shop": {},
            "buffs": {},
            "flags": {},
            "stats": {"currentBoss": 1, "points": 350, "bossKilled": {"100": 1, "110": 0}},
            "userStats": {},
            "attempts": 0,
            "bossAttempts": 0,
            "lastBossId": 1,
            "coins": 0,
        },
        "clanRaidMemberInfo": {
            "101": {"hasActiveSubscription": True, "bonusClanBuffPoints": 10, "raidAvailable": True},
            "102": {"hasActiveSubscription": False, "bonusClanBuffPoints": 0, "raidAvailable": False},
        },
        "clanRaidBriefStats": {
            "101": {
                "bossDamage": "5000",
                "nodesPoints": 40,
                "nodesAttemptsSpent": 4,
                "bossAttemptsSpent": 2,
            },
            "102": {
                "bossDamage": 999,
                "nodesPoints": 9,
                "nodesAttemptsSpent": 9,
                "bossAttemptsSpent": 9,
            },
        },
        "clanRaidBossLog": {
            "101": {
                "1": raid_attempt(
                    {"damage": {"1": 3000, "2": 2000}, "level": 100, "win": True},
                    attackers={
                        "1": {"id": 1, "level": 120, "color": 18, "star": 6, "power": 100000, "petId": 6004},
                        "2": {"id": 2, "level": 120, "color": 17, "star": 5, "power": 90000},
                    },
                    effects={"attackers": {"percentBuffAll_allAttacks": 20}},
                ),
            },
        },
        "clanRaidMinionLog": {
            "101": {"7": raid_attempt({"points": 10})},
        },
    }


NAMED_IDS = {"clanGetInfo", "clanGetLog", "clan_prestigeGetInfo", "clanWarGetInfo",
             "crossClanWar_getInfo", "clanRaid_getInfo"}


def ident_for(dataset_id: str) -> str:
    """Identifier the game client uses for a dataset's response fragment."""
    return dataset_id if dataset_id in NAMED_IDS else "group_1_body"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def calendar() -> GameCalendar:
    return GameCalendar(gmt_offset_hours=2, week_start_day=1)


@pytest.fixture
def collection_time() -> datetime:
    return COLLECTION_TIME


@pytest.fixture
def week_dates() -> list[str]:
    return list(WEEK_DATES)


@pytest.fixture
def payloads() -> dict[str, object]:
    return copy.deepcopy(build_payloads())


@pytest.fixture
def full_store(calendar, payloads) -> AggregationStore:
    """Store holding every dataset, ingested at the collection time."""
    store = AggregationStore(calendar=calendar)
    for dataset_id, payload in payloads.items():
        if dataset_id == "crossClanWarBattleLog":
            for battle_log in payload:
                store.ingest(ident_for(dataset_id), battle_log, clock=COLLECTION_TIME)
        else:
            store.ingest(ident_for(dataset_id), payload, clock=COLLECTION_TIME)
    return store
