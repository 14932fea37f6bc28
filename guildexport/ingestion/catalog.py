"""Dataset catalog.

Each `DatasetDescriptor` names one logical piece of guild state the report
needs and tells the classifier how to recognise it: by the API call name
(`named=True`) or by searching the catalog with the payload's shape.

Catalog order matters: an unnamed payload is assigned to the FIRST entry
whose schema it matches, so more specific schemas must come before more
general ones.
"""

from dataclasses import dataclass

from guildexport.ingestion.schema import (
    ANY,
    ArrayOf,
    IndexedMapShape,
    ObjectShape,
    Schema,
    TypeTag,
)

N = TypeTag.NUMBER
S = TypeTag.STRING
B = TypeTag.BOOLEAN


@dataclass(frozen=True)
class DatasetDescriptor:
    """Catalog entry for one dataset.

    Attributes:
        id: Unique dataset id (the API call name for named datasets).
        description: Human readable name used in messages.
        collection_path: Where in the game UI the data is loaded.
        named: Classify by identifier lookup instead of schema search.
        needed: Required for a complete report.
        accumulation: Append successive payloads instead of overwriting.
        schema: Structural schema of the payload.
    """

    id: str
    description: str
    collection_path: str
    named: bool
    needed: bool
    schema: Schema
    accumulation: bool = False


def _raid_log_schema(result: ObjectShape) -> IndexedMapShape:
    # user id -> attempt id -> battle record
    return IndexedMapShape(IndexedMapShape(ObjectShape({
        "result": result,
        "userId": N,
        "typeId": N,
        "attackers": ANY,
        "defenders": ANY,
        "effects": ANY,
        "reward": ANY,
        "startTime": N,
        "seed": N,
        "type": S,
        "id": N,
        "progress": ANY,
        "endTime": N,
    })))


DATASET_CATALOG: tuple[DatasetDescriptor, ...] = (
    DatasetDescriptor(
        id="clanGetInfo",
        description="Guild Info",
        collection_path="Home",
        named=True,
        needed=True,
        schema=ObjectShape({
            "clan": ANY,
            "membersStat": ANY,
            "stat": ANY,
            "serverResetTime": N,
            "clanWarEndSeasonTime": N,
            "freeClanChangeInterval": ANY,
            "giftUids": ANY,
        }),
    ),
    DatasetDescriptor(
        id="clanGetLog",
        description="Guild Status",
        collection_path="Home > Daily Quests > Guild Quests > Status",
        named=True,
        needed=True,
        schema=ObjectShape({"history": ANY, "users": ANY}),
    ),
    DatasetDescriptor(
        id="guildStats",
        description="Guild Stats",
        collection_path="Home > Daily Quests > Guild Quests > Statistics",
        named=False,
        needed=True,
        schema=ObjectShape({
            "stat": ANY,
            "today": N,
            "dayInWeek": N,
            "giftsCount": N,
        }),
    ),
    DatasetDescriptor(
        id="clan_prestigeGetInfo",
        description="Guild Prestige Progress",
        collection_path="Home > Daily Quests > Guild Quests > Prestige",
        named=True,
        needed=True,
        schema=ObjectShape({
            "prestigeId": N,
            "prestigeCount": N,
            "userPrestigeCount": N,
            "farmedPrestigeLevels": ANY,
            "endTime": N,
            "prestigeStartPopupViewed": B,
            "nextTime": N,
        }),
    ),
    DatasetDescriptor(
        id="clanWarGetInfo",
        description="Guild War Info",
        collection_path="Home",
        named=True,
        needed=True,
        schema=ObjectShape({
            "season": N,
            "day": N,
            "endTime": N,
            "nextWarTime": N,
            "nextLockTime": N,
        }),
    ),
    DatasetDescriptor(
        id="clanWarsLog",
        description="Guild Wars Log",
        collection_path="Home > Guild > Guild War > Guild War > Log",
        named=False,
        needed=True,
        schema=ObjectShape({"history": ANY, "results": ANY}),
    ),
    DatasetDescriptor(
        id="clanWarLeaderboard",
        description="Guild War Leaderboard",
        collection_path="Home > Guild > Guild War > Guild War > Leagues > Previous week",
        named=False,
        needed=True,
        schema=ObjectShape({"top": ANY, "promoCount": N, "clans": ANY}),
    ),
    DatasetDescriptor(
        id="crossClanWar_getInfo",
        description="Clash of Worlds Info",
        collection_path="Home > Guild > Guild War > Clash of Worlds",
        named=True,
        needed=False,
        schema=ObjectShape({
            "nextWarTime": N,
            "nextLockTime": N,
            "plannedSeason": N,
            "season": N,
            "seasonEndTime": N,
            "nextSeasonStartTime": N,
            "requiredDefendedSlots": N,
            "defendedSlots": N,
            "settings": ANY,
            "war": ANY,
            "rating": N,
            "division": N,
            "league": N,
            "maxLeague": N,
        }),
    ),
    DatasetDescriptor(
        id="crossClanWarLog",
        description="Clash of Worlds Log",
        collection_path="Home > Guild > Guild War > Clash of Worlds > Log",
        named=False,
        needed=True,
        schema=ArrayOf(ObjectShape({
            "season": N,
            "war": N,
            "ctime": N,
            "enemyClan": ObjectShape({
                "id": N,
                "serverId": N,
                "title": S,
                "icon": ANY,
            }),
            "ratingDelta": N,
            "points": N,
            "enemyPoints": N,
            "rating": N,
        })),
    ),
    DatasetDescriptor(
        id="crossClanWarBattleLog",
        description="Clash of Worlds Battle Log",
        collection_path="Home > Guild > Guild War > Clash of Worlds > Log > More",
        named=False,
        needed=True,
        accumulation=True,
        schema=ObjectShape({"attack": ANY, "defence": ANY, "users": ANY}),
    ),
    DatasetDescriptor(
        id="clanRaid_getInfo",
        description="Guild Raid Info",
        collection_path="Home > Guild > Asgard > Guild Raid",
        named=True,
        needed=True,
        schema=ObjectShape({
            "boss": ANY,
            "nodes": ANY,
            "shop": ANY,
            "buffs": ANY,
            "flags": ANY,
            "stats": ANY,
            "userStats": ANY,
            "attempts": N,
            "bossAttempts": N,
            "lastBossId": N,
            "coins": N,
        }),
    ),
    DatasetDescriptor(
        id="clanRaidMemberInfo",
        description="Guild Raid Member Info",
        collection_path="Home > Guild > Asgard > Guild Raid > Log",
        named=False,
        needed=True,
        schema=IndexedMapShape(ObjectShape({
            "hasActiveSubscription": B,
            "bonusClanBuffPoints": N,  # morale / 2
            "raidAvailable": B,
        })),
    ),
    DatasetDescriptor(
        id="clanRaidBriefStats",
        description="Guild Raid Damage Dealt to Boss & Morale Points",
        collection_path="Home > Guild > Asgard > Guild Raid > Log",
        named=False,
        needed=True,
        schema=IndexedMapShape(ObjectShape({
            "bossDamage": N,
            "nodesPoints": ANY,  # morale
            "nodesAttemptsSpent": N,
            "bossAttemptsSpent": N,
        })),
    ),
    DatasetDescriptor(
        id="clanRaidBossLog",
        description="Guild Raid Boss Log",
        collection_path="Home > Guild > Asgard > Guild Raid > Log",
        named=False,
        needed=True,
        schema=_raid_log_schema(ObjectShape({"damage": ANY})),
    ),
    DatasetDescriptor(
        id="clanRaidMinionLog",
        description="Guild Raid Minion Log",
        collection_path="Home > Guild > Asgard > Guild Raid > Log",
        named=False,
        needed=True,
        schema=_raid_log_schema(ObjectShape({"points": N})),
    ),
)

NAMED_DATASETS: dict[str, DatasetDescriptor] = {
    info.id: info for info in DATASET_CATALOG if info.named
}

DATASETS_BY_ID: dict[str, DatasetDescriptor] = {info.id: info for info in DATASET_CATALOG}


# Clash of Worlds fortifications; slot ids are contiguous per building
FORTS: tuple[dict, ...] = (
    {"name": "Mage Academy", "type": "Hero", "start_slot_id": 1, "num_slots": 3},
    {"name": "Lighthouse", "type": "Hero", "start_slot_id": 5, "num_slots": 5},
    {"name": "Barracks", "type": "Hero", "start_slot_id": 12, "num_slots": 3},
    {"name": "Bridge", "type": "Titan", "start_slot_id": 15, "num_slots": 6},
    {"name": "Engineerium", "type": "Hero", "start_slot_id": 21, "num_slots": 5},
    {"name": "Spring of Elements", "type": "Titan", "start_slot_id": 26, "num_slots": 4},
    {"name": "Foundry", "type": "Hero", "start_slot_id": 30, "num_slots": 5},
    {"name": "Gates of Nature", "type": "Titan", "start_slot_id": 35, "num_slots": 4},
    {"name": "Bastion of Fire", "type": "Titan", "start_slot_id": 39, "num_slots": 4},
    {"name": "Bastion of Ice", "type": "Titan", "start_slot_id": 43, "num_slots": 4},
    {"name": "Ether Prism", "type": "Titan", "start_slot_id": 47, "num_slots": 5},
    {"name": "Shooting Range", "type": "Hero", "start_slot_id": 52, "num_slots": 5},
    {"name": "Bastion", "type": "Hero", "start_slot_id": 57, "num_slots": 5},
    {"name": "Altar of Life", "type": "Titan", "start_slot_id": 62, "num_slots": 5},
    {"name": "Heroes' Bridge", "type": "Hero", "start_slot_id": 67, "num_slots": 6},
    {"name": "Alchemy Tower", "type": "Hero", "start_slot_id": 73, "num_slots": 5},
    {"name": "City Hall", "type": "Hero", "start_slot_id": 78, "num_slots": 5},
    {"name": "Sun Temple", "type": "Titan", "start_slot_id": 83, "num_slots": 4},
    {"name": "Moon Temple", "type": "Titan", "start_slot_id": 87, "num_slots": 4},
    {"name": "Citadel", "type": "Hero", "start_slot_id": 91, "num_slots": 8},
)

FORTS_BY_SLOT: dict[int, dict] = {
    fort["start_slot_id"] + i: fort for fort in FORTS for i in range(fort["num_slots"])
}
