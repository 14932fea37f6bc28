"""Raid Boss Log report: one row per boss attempt of every member."""

import json

from guildexport.reports.base_report import BaseReport, format_cell
from guildexport.reports.members import GuildWeek

TEAM_SLOTS = 6


def format_slot(attacker: dict) -> str:
    """`id,level,color,star,power,petId` of one team slot; missing fields are blank."""
    pet_id = attacker.get("petId")
    return ",".join(
        format_cell(value)
        for value in (
            attacker.get("id"),
            attacker.get("level"),
            attacker.get("color"),
            attacker.get("star"),
            attacker.get("power"),
            pet_id if pet_id else None,
        )
    )


class BossLogReport(BaseReport):
    """Raid boss attempts with team composition, damage and buffs."""

    CATEGORY = "boss_log"
    COLUMNS = [
        "id",
        "name",
        "slot1",
        "slot2",
        "slot3",
        "slot4",
        "slot5",
        "slot6",
        "power",
        "bossLevel",
        "damage",
        "buffs",
    ]

    def attempt_row(self, member_id: int, name: str, attempt: dict) -> list:
        attackers = list((attempt.get("attackers") or {}).values())
        slots = [format_slot(attacker) for attacker in attackers]
        slots = (slots + [None] * TEAM_SLOTS)[:TEAM_SLOTS]

        result = attempt.get("result") or {}
        team_power = sum(attacker.get("power") or 0 for attacker in attackers)
        damage = sum((result.get("damage") or {}).values())
        effects = attempt.get("effects") or {}
        attacker_effects = effects.get("attackers")
        buffs = (
            json.dumps(attacker_effects, separators=(",", ":")) if attacker_effects is not None else None
        )

        return [member_id, name, *slots, team_power, result.get("level"), damage, buffs]

    def rows(self, week: GuildWeek) -> list[list]:
        rows = []
        for member_id, member in week.members.items():
            for attempt in member.boss_log or []:
                rows.append(self.attempt_row(member_id, member.name, attempt))
        return rows
